"""
Session state management for the metabox admin screen.
Holds the acting user, the post being edited and the form version.
"""

import secrets
import streamlit as st
from typing import Dict, Any
from datetime import datetime
import logging

from .security import Principal, principal_for_role

logger = logging.getLogger(__name__)

# Default values
DEFAULT_USER = "admin"
DEFAULT_ROLE = "administrator"
DEFAULT_POST_ID = 1

USER_IDS = {
    'admin': 1,
    'editor': 2,
    'author': 3,
    'subscriber': 4,
}


class SessionManager:
    """Manages Streamlit session state for the admin screen."""

    @staticmethod
    def initialize():
        """Initialize all session state variables with default values."""
        defaults = {
            'current_user': DEFAULT_USER,
            'current_role': DEFAULT_ROLE,
            'current_post_id': DEFAULT_POST_ID,
            'form_version': 0,
            'nonce_secret': secrets.token_hex(32),
            'last_activity': datetime.now(),
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if not st.session_state.session_id:
            st.session_state.session_id = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

        logger.debug(f"Session initialized: {st.session_state.session_id}")

    @staticmethod
    def get_current_user() -> str:
        return st.session_state.get('current_user', DEFAULT_USER)

    @staticmethod
    def get_current_role() -> str:
        return st.session_state.get('current_role', DEFAULT_ROLE)

    @staticmethod
    def set_current_user(user: str, role: str):
        """Set the acting user and role."""
        if user != st.session_state.get('current_user') or role != st.session_state.get('current_role'):
            logger.info(f"User changed: {st.session_state.get('current_user')} -> {user} ({role})")
            st.session_state.current_user = user
            st.session_state.current_role = role
            SessionManager.update_activity()

    @staticmethod
    def get_principal() -> Principal:
        """Build the principal for the acting user."""
        user = SessionManager.get_current_user()
        return principal_for_role(USER_IDS.get(user, 0), user, SessionManager.get_current_role())

    @staticmethod
    def get_current_post() -> int:
        return st.session_state.get('current_post_id', DEFAULT_POST_ID)

    @staticmethod
    def set_current_post(post_id: int):
        """Set the post being edited and reset widget state."""
        if post_id != st.session_state.get('current_post_id'):
            logger.info(f"Post changed: {st.session_state.get('current_post_id')} -> {post_id}")
            st.session_state.current_post_id = post_id
            SessionManager.bump_form_version()

    @staticmethod
    def get_form_version() -> int:
        return st.session_state.get('form_version', 0)

    @staticmethod
    def bump_form_version():
        """Give every form widget a fresh key so it reloads stored values."""
        st.session_state.form_version = SessionManager.get_form_version() + 1
        SessionManager.update_activity()

    @staticmethod
    def get_nonce_secret() -> str:
        return st.session_state.get('nonce_secret', '')

    @staticmethod
    def update_activity():
        """Update last activity timestamp."""
        st.session_state.last_activity = datetime.now()

    @staticmethod
    def get_session_info() -> Dict[str, Any]:
        """Get session information for debugging."""
        return {
            'session_id': st.session_state.get('session_id', 'unknown'),
            'current_user': SessionManager.get_current_user(),
            'current_role': SessionManager.get_current_role(),
            'current_post_id': SessionManager.get_current_post(),
            'form_version': SessionManager.get_form_version(),
            'last_activity': st.session_state.get('last_activity', datetime.now()).isoformat(),
        }
