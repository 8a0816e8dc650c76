"""
Main Streamlit application for metabox panels.
Admin editing screen hosting the Course Options metabox.
"""

import streamlit as st
from pathlib import Path
import logging

from metabox.config_loader import load_config, validate_config, get_config_value, get_default_config
from metabox.edit_view import EditView
from metabox.error_handler import ErrorHandler, ErrorType
from metabox.exceptions import MetaboxError
from metabox.hooks import HookRegistry
from metabox.models import SaveResult
from metabox.panels import CourseOptionsMetabox
from metabox.security import NonceManager, ROLE_CAPABILITIES
from metabox.session_manager import SessionManager, USER_IDS
from metabox.store import JsonFileStore


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


config = load_config()
if not validate_config(config):
    config = get_default_config()

log_level_str = get_config_value(config, 'logging', 'level', 'INFO')
logging.basicConfig(level=get_logging_level(log_level_str))
logger = logging.getLogger(__name__)
logger.info(f"Logging configured to level: {log_level_str}")

st.set_page_config(
    page_title=get_config_value(config, 'ui', 'page_title', 'Edit Course'),
    page_icon="📋",
    layout="wide",
    initial_sidebar_state="expanded"
)


def build_host():
    """Create the store, hook table and metabox for this request."""
    store = JsonFileStore(Path(get_config_value(config, 'storage', 'path', 'data/store.json')))
    hooks = HookRegistry()
    nonces = NonceManager(
        secret=get_config_value(config, 'security', 'nonce_secret') or SessionManager.get_nonce_secret(),
        lifetime=int(get_config_value(config, 'security', 'nonce_lifetime', 86400))
    )

    metabox = CourseOptionsMetabox(store, hooks=hooks, nonces=nonces, config=config)
    hooks.subscribe(metabox.subscriptions())
    return hooks, metabox


def render_sidebar():
    """Render user, post and request options."""
    with st.sidebar:
        st.title("Navigation")

        users = list(USER_IDS)
        user = st.selectbox("Acting user", users, index=users.index(SessionManager.get_current_user()))
        roles = list(ROLE_CAPABILITIES)
        role = st.selectbox("Role", roles, index=roles.index(SessionManager.get_current_role()))
        SessionManager.set_current_user(user, role)

        post_id = st.number_input("Course ID", min_value=1, step=1, value=SessionManager.get_current_post())
        SessionManager.set_current_post(int(post_id))

        quick_edit = st.checkbox("Quick edit request", help="Posts action=inline-save; the panel is not saved")

        with st.expander("Session"):
            st.json(SessionManager.get_session_info())

    return 'inline-save' if quick_edit else None


def main():
    """Main application entry point."""
    SessionManager.initialize()
    action = render_sidebar()

    hooks, metabox = build_host()
    principal = SessionManager.get_principal()
    post_id = SessionManager.get_current_post()

    hooks.do_action('admin_notices', st.error)

    try:
        if not any(hooks.do_action('add_meta_boxes', post_id, principal)):
            st.info("You are not allowed to edit this course's options.")
            hooks.do_action('shutdown')
            return

        submission = EditView.render(metabox, post_id, principal, action)

    except MetaboxError as e:
        ErrorHandler.handle_error(e, f"rendering metabox {metabox.id}", ErrorType.SCHEMA)
        raise

    if submission is None:
        hooks.do_action('shutdown')
        return

    results = []
    for screen in metabox.get_screens():
        results.extend(hooks.do_action(f'save_post_{screen}', post_id, submission, principal))

    hooks.do_action('shutdown')

    if SaveResult.APPLIED in results:
        st.toast("Course options updated", icon="✅")
    logger.info(f"Save results for post {post_id}: {[getattr(r, 'name', r) for r in results]}")

    SessionManager.bump_form_version()
    st.rerun()


if __name__ == "__main__":
    main()
