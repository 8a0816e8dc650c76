"""
Explicit hook table for the metabox host.
Actions and filters are registered once at startup and dispatched by name,
in priority order (lower first, then registration order).
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Mapping, Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


class HookRegistry:
    """Named actions and filters."""
    
    def __init__(self):
        self._actions: DefaultDict[str, List[Tuple[int, int, Callable]]] = defaultdict(list)
        self._filters: DefaultDict[str, List[Tuple[int, int, Callable]]] = defaultdict(list)
        self._counter = 0
    
    def _add(self, table, name: str, callback: Callable, priority: int) -> None:
        self._counter += 1
        table[name].append((priority, self._counter, callback))
        table[name].sort(key=lambda entry: (entry[0], entry[1]))
    
    def add_action(self, name: str, callback: Callable, priority: int = DEFAULT_PRIORITY) -> None:
        self._add(self._actions, name, callback, priority)
    
    def add_filter(self, name: str, callback: Callable, priority: int = DEFAULT_PRIORITY) -> None:
        self._add(self._filters, name, callback, priority)
    
    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))
    
    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))
    
    def do_action(self, name: str, *args: Any) -> List[Any]:
        """
        Run every callback registered for an action.
        
        Returns:
            Callback return values, in call order
        """
        results = []
        for _, _, callback in list(self._actions.get(name, [])):
            results.append(callback(*args))
        return results
    
    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Pass a value through every filter registered under a name."""
        for _, _, callback in list(self._filters.get(name, [])):
            value = callback(value, *args)
        return value
    
    def subscribe(self, subscriptions: Mapping[str, Callable], priority: int = DEFAULT_PRIORITY) -> None:
        """Register a table of action name -> callback."""
        for name, callback in subscriptions.items():
            self.add_action(name, callback, priority)
            logger.debug(f"Subscribed {getattr(callback, '__qualname__', callback)} to '{name}'")
