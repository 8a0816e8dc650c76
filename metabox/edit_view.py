"""
Edit view for the metabox admin screen.
Renders the panel preview and a tabbed Streamlit form for its fields.
"""

import streamlit as st
from datetime import date
from typing import Any, Callable, Dict, List, Optional
import logging

from .exceptions import UnknownFieldType
from .field_registry import lookup_key
from .field_renderers import display_value, normalize_choices, selected_values
from .form_data_collector import collect_submission, widget_key
from .metabox import AdminMetabox
from .models import FieldDescriptor
from .security import Principal
from .session_manager import SessionManager
from .submission import Submission

logger = logging.getLogger(__name__)


def _text(field: FieldDescriptor, value: Any, key: str) -> Any:
    return st.text_input(field.label or field.id, value='' if value is None else str(value),
                         key=key, help=field.desc, placeholder=field.option('placeholder'))


def _textarea(field: FieldDescriptor, value: Any, key: str) -> Any:
    return st.text_area(field.label or field.id, value='' if value is None else str(value),
                        key=key, help=field.desc)


def _number(field: FieldDescriptor, value: Any, key: str) -> Any:
    try:
        number = float(value) if value not in (None, '') else None
    except (TypeError, ValueError):
        logger.warning(f"Stored value for {field.id} is not a number: {value!r}")
        number = None

    min_value = field.option('min')
    max_value = field.option('max')
    return st.number_input(
        field.label or field.id,
        value=number,
        min_value=float(min_value) if min_value is not None else None,
        max_value=float(max_value) if max_value is not None else None,
        step=float(field.option('step', 1)),
        key=key,
        help=field.desc,
    )


def _date(field: FieldDescriptor, value: Any, key: str) -> Any:
    try:
        current = date.fromisoformat(value) if value else None
    except (TypeError, ValueError):
        logger.warning(f"Stored value for {field.id} is not an ISO date: {value!r}")
        current = None
    return st.date_input(field.label or field.id, value=current, key=key, help=field.desc)


def _select(field: FieldDescriptor, value: Any, key: str) -> Any:
    choices = dict(normalize_choices(field.option('options')))
    keys = list(choices)
    selected = [item for item in selected_values(value) if item in choices]

    if field.multi:
        return st.multiselect(field.label or field.id, options=keys, default=selected,
                              format_func=choices.get, key=key, help=field.desc)

    index = keys.index(selected[0]) if selected else None
    return st.selectbox(field.label or field.id, options=keys, index=index,
                        format_func=choices.get, key=key, help=field.desc)


def _radio(field: FieldDescriptor, value: Any, key: str) -> Any:
    choices = dict(normalize_choices(field.option('options')))
    keys = list(choices)
    selected = [item for item in selected_values(value) if item in choices]
    index = keys.index(selected[0]) if selected else None
    return st.radio(field.label or field.id, options=keys, index=index,
                    format_func=choices.get, key=key, help=field.desc)


def _checkbox(field: FieldDescriptor, value: Any, key: str) -> Any:
    checked = value is not None and str(value) == str(field.option('value', 'yes'))
    return st.checkbox(field.label or field.id, value=checked, key=key, help=field.desc)


def _custom_html(field: FieldDescriptor, value: Any, key: str) -> Any:
    st.markdown(field.option('html', ''), unsafe_allow_html=True)
    return None


# Streamlit widget per field type, keyed like the field type registry
WIDGETS: Dict[str, Callable[[FieldDescriptor, Any, str], Any]] = {
    lookup_key('text'): _text,
    lookup_key('textarea'): _textarea,
    lookup_key('textarea-w-tags'): _textarea,
    lookup_key('number'): _number,
    lookup_key('date'): _date,
    lookup_key('select'): _select,
    lookup_key('radio'): _radio,
    lookup_key('checkbox'): _checkbox,
    lookup_key('custom-html'): _custom_html,
}


class EditView:
    """Manages the edit screen for a metabox."""

    @staticmethod
    def render(metabox: AdminMetabox, post_id: Any, principal: Principal,
               action: Optional[str] = None) -> Optional[Submission]:
        """
        Render the metabox preview and edit form.

        Returns:
            The Submission when the form was submitted, None otherwise
        """
        st.header(f"✏️ {metabox.title}")

        with st.expander("Panel preview", expanded=False):
            st.markdown(metabox.output(post_id, principal), unsafe_allow_html=True)

        schema = metabox.get_schema() or []
        values = metabox.store.get_all(post_id)
        form_version = SessionManager.get_form_version()
        token = metabox.nonces.create(metabox.nonce_action, principal.user_id)

        with st.form(f"metabox_{metabox.id}", clear_on_submit=False):
            if len(schema) > 1:
                containers = st.tabs([tab.title for tab in schema])
            else:
                containers = [st.container() for _ in schema]

            for container, tab in zip(containers, schema):
                with container:
                    for field in tab.fields:
                        EditView._render_field(field, values, form_version)

            submitted = st.form_submit_button("Update", type="primary")

        if not submitted:
            return None

        return collect_submission(schema, metabox.nonce_field, token, form_version, action)

    @staticmethod
    def _render_field(field: FieldDescriptor, values: Dict[str, Any], form_version: int) -> None:
        widget = WIDGETS.get(lookup_key(field.type))
        if widget is None:
            raise UnknownFieldType(field.type, EditView.widget_types())

        key = widget_key(field.id, form_version) if field.id else f"render_only_{id(field)}_v{form_version}"
        widget(field, display_value(values.get(field.id)) if field.id else None, key)

    @staticmethod
    def widget_types() -> List[str]:
        return sorted(WIDGETS)
