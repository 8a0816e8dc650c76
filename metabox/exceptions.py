"""
Custom exception classes for metabox schema and registry errors.

These are programmer-facing failures: a schema that does not match the
registered field types, or a schema file that cannot be read. They are
raised at render time and never swallowed by the pipeline.
"""

import logging
from typing import Optional, Dict, Any, List, Iterable

logger = logging.getLogger(__name__)


class MetaboxError(Exception):
    """
    Base exception for metabox errors.
    
    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """
    
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)
    
    def __str__(self) -> str:
        return self.message
    
    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class UnknownFieldType(MetaboxError):
    """
    Exception raised when a field type has no registered renderer.
    
    Indicates a mismatch between a panel schema and the field type registry.
    """
    
    def __init__(self, type_identifier: str, known_types: Optional[Iterable[str]] = None,
                 message: Optional[str] = None):
        self.type_identifier = type_identifier
        self.known_types = sorted(known_types or [])
        
        if message is None:
            message = f"No renderer registered for field type '{type_identifier}'"
        
        context = {
            'type_identifier': type_identifier,
            'known_types': self.known_types
        }
        
        recovery_suggestions = [
            f"Check the spelling of field type '{type_identifier}' in the panel schema",
            "Register a renderer for this type before rendering the panel",
            f"Known field types: {', '.join(self.known_types) or 'none'}"
        ]
        
        super().__init__(message, context, recovery_suggestions)


class SchemaError(MetaboxError):
    """
    Exception raised when a panel schema cannot be loaded or is malformed.
    """
    
    def __init__(self, source: str, issue: str, message: Optional[str] = None):
        self.source = source
        self.issue = issue
        
        if message is None:
            message = f"Invalid panel schema ({source}): {issue}"
        
        context = {
            'source': source,
            'issue': issue
        }
        
        recovery_suggestions = [
            "Verify the schema is a list of tabs, each with a title and a list of fields",
            "Check YAML syntax in the schema file",
            "Ensure every field declares a type"
        ]
        
        super().__init__(message, context, recovery_suggestions)


def log_error_with_context(error: MetaboxError, operation: str) -> None:
    """
    Log error with full context information.
    
    Args:
        error: MetaboxError instance
        operation: Description of the operation that failed
    """
    logger.error(f"Metabox error during {operation}")
    logger.error(f"Error type: {type(error).__name__}")
    logger.error(f"Error message: {error.message}")
    
    if error.context:
        logger.error("Error context:")
        for key, value in error.context.items():
            logger.error(f"  {key}: {value}")
    
    if error.recovery_suggestions:
        logger.info("Recovery suggestions:")
        for i, suggestion in enumerate(error.recovery_suggestions, 1):
            logger.info(f"  {i}. {suggestion}")
