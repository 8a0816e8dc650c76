"""
Anti-forgery tokens and capability checks for metabox saves.
"""

import hashlib
import hmac
import math
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_NONCE_LIFETIME = 86400

ROLE_CAPABILITIES = {
    'administrator': frozenset({'read', 'edit_posts', 'edit_others_posts', 'manage_options'}),
    'editor': frozenset({'read', 'edit_posts', 'edit_others_posts'}),
    'author': frozenset({'read', 'edit_posts'}),
    'subscriber': frozenset({'read'}),
}


@dataclass(frozen=True)
class Principal:
    """The acting user of a request."""
    user_id: int
    login: str = ''
    capabilities: FrozenSet[str] = field(default_factory=frozenset)
    
    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def principal_for_role(user_id: int, login: str, role: str) -> Principal:
    """Build a principal holding the capabilities of a role."""
    capabilities = ROLE_CAPABILITIES.get(role)
    if capabilities is None:
        logger.warning(f"Unknown role '{role}', granting no capabilities")
        capabilities = frozenset()
    return Principal(user_id=user_id, login=login, capabilities=capabilities)


class CapabilityAuthorizer:
    """
    Checks whether a principal may edit a post.
    
    'edit_post' is resolved against the post owner: anyone with
    'edit_others_posts' may edit, owners need 'edit_posts'. Any other
    capability is checked directly.
    """
    
    def __init__(self, capability: str = 'edit_post',
                 owner_lookup: Optional[Callable[[Any], Optional[int]]] = None):
        self.capability = capability
        self.owner_lookup = owner_lookup
    
    def can_edit(self, principal: Optional[Principal], post_id: Any) -> bool:
        if principal is None:
            return False
        
        if self.capability != 'edit_post':
            return principal.can(self.capability)
        
        if principal.can('edit_others_posts'):
            return True
        
        owner = self.owner_lookup(post_id) if self.owner_lookup else None
        return owner == principal.user_id and principal.can('edit_posts')


class NonceManager:
    """
    Issues and verifies time-limited anti-forgery tokens.
    
    A token is valid for the tick it was issued in and the following one,
    each tick being half the configured lifetime.
    """
    
    def __init__(self, secret: Optional[str] = None, lifetime: int = DEFAULT_NONCE_LIFETIME,
                 clock: Callable[[], float] = time.time):
        if lifetime <= 0:
            raise ValueError("Nonce lifetime must be positive")
        self._secret = (secret or secrets.token_hex(32)).encode('utf-8')
        self.lifetime = lifetime
        self._clock = clock
    
    def tick(self) -> int:
        return math.ceil(self._clock() / (self.lifetime / 2))
    
    def _hash(self, tick: int, action: str, user_id: int) -> str:
        message = f"{tick}|{action}|{user_id}".encode('utf-8')
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()[-12:-2]
    
    def create(self, action: str, user_id: int = 0) -> str:
        """Create a token for an action."""
        return self._hash(self.tick(), action, user_id)
    
    def verify(self, token: Optional[str], action: str, user_id: int = 0) -> bool:
        """
        Verify a token for an action.
        
        Returns:
            True if the token was issued for this action and user and has not expired
        """
        if not token or not isinstance(token, str):
            return False
        
        current = self.tick()
        for tick in (current, current - 1):
            if hmac.compare_digest(self._hash(tick, action, user_id), token):
                return True
        
        logger.info(f"Nonce verification failed for action '{action}'")
        return False
