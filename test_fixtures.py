"""
Test fixtures for metabox panel tests.

Provides reusable schemas, a fixed-clock nonce manager and a small
concrete metabox for exercising the lifecycle.
"""

from typing import Any, Dict, List

from metabox.metabox import AdminMetabox
from metabox.security import NonceManager, Principal
from metabox.submission import Submission

FIXED_NOW = 1_700_000_000.0
SECRET = "test-secret"


class SchemaFixtures:
    """Raw panel schemas for various scenarios."""

    @staticmethod
    def get_three_tab_schema() -> List[Dict[str, Any]]:
        return [
            {'title': 'General', 'fields': [
                {'type': 'text', 'id': 'title', 'label': 'Title'},
                {'type': 'custom-html', 'html': '<hr>'},
            ]},
            {'title': 'Options', 'fields': [
                {'type': 'select', 'id': 'tags', 'multi': True, 'options': ['a', 'b', 'c']},
                {'type': 'checkbox', 'id': 'enabled', 'value': 'yes'},
            ]},
            {'title': 'Messages', 'fields': [
                {'type': 'textarea', 'id': 'message', 'sanitize': 'shortcode'},
            ]},
        ]

    @staticmethod
    def get_single_tab_schema() -> List[Dict[str, Any]]:
        return [
            {'title': 'Only', 'fields': [
                {'type': 'text', 'id': 'title'},
            ]},
        ]


class SampleMetabox(AdminMetabox):
    """Minimal metabox whose fields are set per test."""

    def __init__(self, store, fields=None, **kwargs):
        self._fields = SchemaFixtures.get_three_tab_schema() if fields is None else fields
        super().__init__(store, **kwargs)

    def configure(self) -> None:
        self.id = 'sample-box'
        self.title = 'Sample Box'
        self.screens = ['course', 'lesson']

    def get_fields(self):
        return self._fields


def make_nonces(now: float = FIXED_NOW) -> NonceManager:
    return NonceManager(secret=SECRET, lifetime=86400, clock=lambda: now)


def make_submission(nonces: NonceManager, principal: Principal, data: Dict[str, Any] = None,
                    action: str = 'metabox_save_data', nonce_field: str = 'metabox_nonce',
                    **kwargs) -> Submission:
    """Submission carrying a valid token for the principal."""
    payload = {nonce_field: nonces.create(action, principal.user_id)}
    payload.update(data or {})
    return Submission(payload, **kwargs)
