"""
Form data collection for the metabox admin screen.
Builds a Submission from the Streamlit widgets of the edit form.
"""

import streamlit as st
import logging
from typing import Any, Dict, Optional, Sequence
from datetime import date, datetime

from .models import FieldDescriptor, Tab
from .submission import Submission

logger = logging.getLogger(__name__)


def widget_key(field_id: str, form_version: int) -> str:
    """Session state key of a field's widget."""
    return f"field_{field_id}_v{form_version}"


def to_submitted_value(field: FieldDescriptor, value: Any) -> Any:
    """
    Convert a widget value into what a browser form would have posted.

    Returns:
        A string, a list of strings, or None when nothing would be posted
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Unchecked checkboxes are not posted
        return str(field.option('value', 'yes')) if value else None

    if isinstance(value, (date, datetime)):
        return value.isoformat()

    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]

    return str(value)


def collect_submission(
    schema: Sequence[Tab],
    nonce_field: str,
    token: Optional[str],
    form_version: int = 0,
    action: Optional[str] = None
) -> Submission:
    """
    Collect current form values from the widgets in session state.

    Args:
        schema: Tabs of the panel being edited
        nonce_field: Name the anti-forgery token is posted under
        token: Anti-forgery token issued when the form was rendered
        form_version: Current form version (part of widget keys)
        action: Posted action, e.g. 'inline-save'

    Returns:
        Submission holding the posted values
    """
    data: Dict[str, Any] = {nonce_field: token}
    if action:
        data['action'] = action

    for tab in schema:
        for field in tab.fields:
            if not field.persistable:
                continue

            key = widget_key(field.id, form_version)
            if key not in st.session_state:
                logger.warning(f"Missing widget value for: {field.id}")
                continue

            value = to_submitted_value(field, st.session_state[key])
            if value is not None:
                data[field.id] = value

    logger.info(f"Collected {len(data)} submitted keys")
    return Submission(data)
