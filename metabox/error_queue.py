"""
Deferred user-facing messages for metabox panels.

Messages are queued during a save, flushed to the store once at the end
of the request and shown (then deleted) on the next render.
"""

from typing import Any, Callable, List, Optional, Tuple
import logging

from .store import KeyValueStore

logger = logging.getLogger(__name__)


class ErrorQueue:
    """Append-only message buffer for one panel instance."""
    
    def __init__(self, option_key: str, store: KeyValueStore):
        self.option_key = option_key
        self.store = store
        self._messages: List[str] = []
        self._flushed = False
    
    def add(self, text: str) -> None:
        """Add an error message."""
        self._messages.append(str(text))
    
    def has_errors(self) -> bool:
        return bool(self._messages)
    
    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(self._messages)
    
    def flush(self) -> bool:
        """
        Write queued messages to the store.
        
        Only runs once per instance and only when messages were added.
        The in-memory queue is kept.
        
        Returns:
            True if messages were written
        """
        if self._flushed or not self._messages:
            return False
        
        self._flushed = True
        self.store.set_option(self.option_key, list(self._messages))
        logger.info(f"Queued {len(self._messages)} messages under '{self.option_key}'")
        return True
    
    def get_stored(self) -> List[str]:
        """Retrieve messages stored by a previous request."""
        stored = self.store.get_option(self.option_key, [])
        return list(stored) if isinstance(stored, (list, tuple)) else []
    
    def display(self, notice: Optional[Callable[[str], Any]] = None) -> List[str]:
        """
        Show stored messages once and delete them from the store.
        
        Args:
            notice: Called with each message (the host's notice surface)
            
        Returns:
            The messages that were displayed
        """
        if self.store.get_option(self.option_key) is None:
            return []

        messages = self.get_stored()
        if not messages:
            logger.warning(f"Clearing unreadable or empty messages under '{self.option_key}'")

        if notice is not None:
            for message in messages:
                notice(message)
        
        self.store.delete_option(self.option_key)
        logger.debug(f"Displayed and cleared {len(messages)} messages from '{self.option_key}'")
        return messages
