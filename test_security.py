"""
Unit tests for anti-forgery tokens and capability checks.
"""

import pytest

from metabox.security import (
    CapabilityAuthorizer, NonceManager, Principal, principal_for_role
)


class TestNonceManager:
    """Test cases for NonceManager."""

    def setup_method(self):
        self.now = 1_700_000_000.0
        self.nonces = NonceManager(secret="s", lifetime=100, clock=lambda: self.now)

    def test_created_token_verifies(self):
        token = self.nonces.create('save', 1)

        assert isinstance(token, str) and len(token) == 10
        assert self.nonces.verify(token, 'save', 1) is True

    def test_wrong_action_or_user(self):
        token = self.nonces.create('save', 1)

        assert self.nonces.verify(token, 'delete', 1) is False
        assert self.nonces.verify(token, 'save', 2) is False

    def test_token_valid_for_next_tick_only(self):
        token = self.nonces.create('save', 1)

        self.now += 50
        assert self.nonces.verify(token, 'save', 1) is True

        self.now += 50
        assert self.nonces.verify(token, 'save', 1) is False

    def test_other_secret_rejects(self):
        token = self.nonces.create('save', 1)
        other = NonceManager(secret="t", lifetime=100, clock=lambda: self.now)

        assert other.verify(token, 'save', 1) is False

    @pytest.mark.parametrize("token", [None, "", 123, ["x"]])
    def test_malformed_tokens(self, token):
        assert self.nonces.verify(token, 'save', 1) is False

    def test_lifetime_must_be_positive(self):
        with pytest.raises(ValueError):
            NonceManager(lifetime=0)


class TestCapabilityAuthorizer:
    """Test cases for CapabilityAuthorizer."""

    def test_editor_edits_any_post(self):
        editor = principal_for_role(2, 'editor', 'editor')

        assert CapabilityAuthorizer().can_edit(editor, 9) is True

    def test_author_edits_own_post_only(self):
        author = principal_for_role(3, 'author', 'author')
        owners = {9: 3, 10: 1}
        authorizer = CapabilityAuthorizer(owner_lookup=owners.get)

        assert authorizer.can_edit(author, 9) is True
        assert authorizer.can_edit(author, 10) is False
        assert CapabilityAuthorizer().can_edit(author, 9) is False

    def test_subscriber_denied(self):
        subscriber = principal_for_role(4, 'subscriber', 'subscriber')

        assert CapabilityAuthorizer(owner_lookup=lambda post_id: 4).can_edit(subscriber, 9) is False

    def test_direct_capability(self):
        admin = principal_for_role(1, 'admin', 'administrator')
        editor = principal_for_role(2, 'editor', 'editor')
        authorizer = CapabilityAuthorizer('manage_options')

        assert authorizer.can_edit(admin, 9) is True
        assert authorizer.can_edit(editor, 9) is False

    def test_no_principal(self):
        assert CapabilityAuthorizer().can_edit(None, 9) is False

    def test_unknown_role_has_no_capabilities(self):
        assert principal_for_role(5, 'ghost', 'ghost') == Principal(5, 'ghost', frozenset())
