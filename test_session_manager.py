"""
Unit tests for session state management.
"""

from unittest.mock import patch

from metabox.session_manager import SessionManager, DEFAULT_POST_ID, USER_IDS
from test_edit_view import _SessionState


class TestSessionManager:
    """Test cases for SessionManager."""

    def setup_method(self):
        self.state = _SessionState()
        self.patcher = patch('metabox.session_manager.st')
        mock_st = self.patcher.start()
        mock_st.session_state = self.state

    def teardown_method(self):
        self.patcher.stop()

    def test_initialize_sets_defaults(self):
        SessionManager.initialize()

        assert SessionManager.get_current_user() == 'admin'
        assert SessionManager.get_current_post() == DEFAULT_POST_ID
        assert SessionManager.get_form_version() == 0
        assert len(SessionManager.get_nonce_secret()) == 64
        assert self.state.session_id.startswith('session_')

    def test_initialize_keeps_existing_values(self):
        self.state['nonce_secret'] = 'kept'
        self.state['current_post_id'] = 9

        SessionManager.initialize()

        assert SessionManager.get_nonce_secret() == 'kept'
        assert SessionManager.get_current_post() == 9

    def test_principal_follows_user_and_role(self):
        SessionManager.initialize()
        SessionManager.set_current_user('author', 'author')

        principal = SessionManager.get_principal()

        assert principal.user_id == USER_IDS['author']
        assert principal.can('edit_posts') is True
        assert principal.can('edit_others_posts') is False

    def test_changing_post_bumps_form_version(self):
        SessionManager.initialize()

        SessionManager.set_current_post(DEFAULT_POST_ID)
        assert SessionManager.get_form_version() == 0

        SessionManager.set_current_post(5)
        assert SessionManager.get_current_post() == 5
        assert SessionManager.get_form_version() == 1

    def test_session_info(self):
        SessionManager.initialize()

        info = SessionManager.get_session_info()

        assert info['current_role'] == 'administrator'
        assert info['form_version'] == 0
        assert isinstance(info['last_activity'], str)
