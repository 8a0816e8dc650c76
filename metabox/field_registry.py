"""
Field type registry for metabox panels.
Maps declared field type identifiers to renderer instances.
"""

import re
from typing import Dict, Iterator, List, Optional
import logging

from .exceptions import UnknownFieldType
from .field_renderers import BUILTIN_RENDERERS, FieldRenderer

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r'[\s_\-]+')


def canonical_name(type_identifier: str) -> str:
    """
    Normalize a field type identifier to its canonical renderer name.

    Each word segment is upper-cased on its first letter and separators are
    stripped, e.g. "text-area" -> "TextArea", "textarea-w-tags" -> "TextareaWTags".

    Args:
        type_identifier: Declared field type

    Returns:
        Canonical renderer name ('' for an empty identifier)
    """
    segments = _SEPARATORS.split(str(type_identifier or '').strip())
    return "".join(segment[:1].upper() + segment[1:] for segment in segments if segment)


def lookup_key(type_identifier: str) -> str:
    """Registry key for a type identifier: the case-folded canonical name."""
    return canonical_name(type_identifier).casefold()


class FieldTypeRegistry:
    """Explicit mapping of field types to renderers, populated at startup."""

    def __init__(self):
        self._renderers: Dict[str, FieldRenderer] = {}

    def register(self, type_identifier: str, renderer: FieldRenderer) -> None:
        """
        Register a renderer for a field type.

        Args:
            type_identifier: Field type as declared in schemas
            renderer: Renderer instance handling the type
        """
        key = lookup_key(type_identifier)
        if not key:
            raise ValueError("Field type identifier must not be empty")

        if key in self._renderers:
            logger.warning(f"Replacing renderer for field type '{type_identifier}'")

        renderer.name = canonical_name(type_identifier)
        self._renderers[key] = renderer
        logger.debug(f"Registered field type '{type_identifier}' as {renderer.name}")

    def resolve(self, type_identifier: str) -> FieldRenderer:
        """
        Resolve a field type to its renderer.

        Raises:
            UnknownFieldType: If no renderer is registered for the type
        """
        renderer = self._renderers.get(lookup_key(type_identifier))
        if renderer is None:
            raise UnknownFieldType(type_identifier, self.types)
        return renderer

    def get(self, type_identifier: str) -> Optional[FieldRenderer]:
        return self._renderers.get(lookup_key(type_identifier))

    @property
    def types(self) -> List[str]:
        """Canonical names of all registered types."""
        return sorted(renderer.name for renderer in self._renderers.values())

    def __contains__(self, type_identifier: object) -> bool:
        return isinstance(type_identifier, str) and lookup_key(type_identifier) in self._renderers

    def __len__(self) -> int:
        return len(self._renderers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)


def default_registry() -> FieldTypeRegistry:
    """Create a registry with all built-in field types."""
    registry = FieldTypeRegistry()
    for type_identifier, renderer_class in BUILTIN_RENDERERS.items():
        registry.register(type_identifier, renderer_class())
    return registry
