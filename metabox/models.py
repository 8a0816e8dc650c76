"""
Data model for metabox panels.
Pydantic models for the tab/field schema, the per-render state and save outcomes.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class SanitizeMode(str, Enum):
    """Sanitize policies a field may declare."""
    DEFAULT = "default"
    QUOTE_PRESERVING = "quote-preserving"


# Legacy spellings still found in older panel schemas
SANITIZE_ALIASES = {
    'default': SanitizeMode.DEFAULT,
    'quote-preserving': SanitizeMode.QUOTE_PRESERVING,
    'quote_preserving': SanitizeMode.QUOTE_PRESERVING,
    'shortcode': SanitizeMode.QUOTE_PRESERVING,
    'no_encode_quotes': SanitizeMode.QUOTE_PRESERVING,
}


class SaveResult(IntEnum):
    """Outcome of a save attempt."""
    UNAUTHORIZED = -1
    SKIPPED = 0
    APPLIED = 1


class FieldDescriptor(BaseModel):
    """
    Declarative metadata for one form field.
    
    Unknown keys are kept as type-specific rendering options and can be
    read back with option().
    """
    model_config = ConfigDict(extra='allow', frozen=True)
    
    id: Optional[str] = None
    type: str
    sanitize: Optional[SanitizeMode] = None
    multi: bool = False
    label: Optional[str] = None
    desc: Optional[str] = None
    default: Any = None
    
    @field_validator('id', mode='before')
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip()
    
    @field_validator('sanitize', mode='before')
    @classmethod
    def _normalize_sanitize(cls, value: Any) -> Optional[SanitizeMode]:
        if value is None or isinstance(value, SanitizeMode):
            return value
        mode = SANITIZE_ALIASES.get(str(value).strip().lower())
        if mode is None:
            logger.warning(f"Unknown sanitize policy '{value}', using default escaping")
            return SanitizeMode.DEFAULT
        return mode
    
    @property
    def persistable(self) -> bool:
        """Whether the field has an id and can be saved."""
        return bool(self.id)
    
    def option(self, name: str, default: Any = None) -> Any:
        """Get a type-specific rendering option."""
        return (self.model_extra or {}).get(name, default)
    
    def options(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class Tab(BaseModel):
    """A named group of fields shown as one section of a panel."""
    model_config = ConfigDict(frozen=True)
    
    title: str = ""
    fields: List[FieldDescriptor] = Field(default_factory=list)


class NavigationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    tab_id: str
    index: int
    title: str
    active: bool
    markup: str


class ContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    tab_id: str
    index: int
    active: bool
    fields: Tuple[str, ...] = ()
    markup: str


class RenderState(BaseModel):
    """Navigation and content built for a single render call."""
    model_config = ConfigDict(frozen=True)
    
    navigation: Tuple[NavigationEntry, ...] = ()
    content: Tuple[ContentBlock, ...] = ()
    tab_count: int = 0
    
    @property
    def navigation_markup(self) -> str:
        return "".join(entry.markup for entry in self.navigation)
    
    @property
    def content_markup(self) -> str:
        return "".join(block.markup for block in self.content)
    
    @property
    def show_navigation(self) -> bool:
        """Tab navigation is only shown when there are 2 or more tabs."""
        return self.tab_count > 1
