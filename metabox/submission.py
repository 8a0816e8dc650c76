"""
Raw submission access for metabox saves.
All submitted values are read through Submission so that shape handling
is applied the same way for every field.
"""

from typing import Any, Dict, Mapping, Optional
import logging

from .sanitizer import coerce_to_list

logger = logging.getLogger(__name__)

# Save requests that carry partial field data
LOW_FIDELITY_ACTIONS = {'inline-save'}


class Submission:
    """Submitted form data for a single save request."""
    
    def __init__(self, data: Optional[Mapping[str, Any]] = None, is_ajax: bool = False):
        self._data: Dict[str, Any] = dict(data or {})
        self.is_ajax = is_ajax
    
    @property
    def action(self) -> Optional[str]:
        return self._data.get('action')
    
    @property
    def is_low_fidelity(self) -> bool:
        """Quick-edit and async saves must not trigger a full schema save."""
        return self.action in LOW_FIDELITY_ACTIONS or self.is_ajax
    
    def has(self, field_id: str) -> bool:
        return field_id in self._data and self._data[field_id] is not None
    
    def get_submitted_value(self, field_id: str, as_array: bool = False) -> Any:
        """
        Get the raw value submitted for a field.
        
        Args:
            field_id: Key the value was submitted under
            as_array: Coerce a scalar into a one-element list
            
        Returns:
            Raw value, or None if nothing was submitted
        """
        if not self.has(field_id):
            return None
        
        value = self._data[field_id]
        if as_array:
            if not isinstance(value, (list, tuple)):
                logger.debug(f"Coercing scalar value for '{field_id}' to a list")
            return coerce_to_list(value)
        return value
    
    def keys(self):
        return self._data.keys()
    
    def __repr__(self) -> str:
        return f"Submission(keys={sorted(self._data)}, is_ajax={self.is_ajax})"
