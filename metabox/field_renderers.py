"""
Field widget renderers for metabox panels.
Each renderer turns a field descriptor (and its stored value) into markup
using the Jinja2 templates shipped in metabox/templates.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .models import FieldDescriptor

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

DEFAULT_ALLOWED_TAGS = "<a> <b> <strong> <em> <i> <u> <ul> <ol> <li> <p> <br>"


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Render template with context"""
    return jinja_env.get_template(template_name).render(**context)


def display_value(value: Any) -> Any:
    """Decode the entities a stored value was saved with, for editing and re-escaping on output."""
    if isinstance(value, str):
        return Markup(value).unescape()
    if isinstance(value, (list, tuple)):
        return [display_value(item) for item in value]
    return value


class FieldRenderer:
    """Base renderer: a single template fed with the common field context."""

    template = "fields/text.html"

    def __init__(self, name: Optional[str] = None):
        # Set by FieldTypeRegistry.register() to the canonical type name
        self.name = name or self.__class__.__name__

    def render(self, descriptor: FieldDescriptor, value: Any = None) -> str:
        context = self.get_context(descriptor, value)
        return render_template(self.template, context)

    def get_context(self, descriptor: FieldDescriptor, value: Any) -> Dict[str, Any]:
        if value is None:
            value = descriptor.default

        return {
            'field': descriptor,
            'id': descriptor.id or '',
            'type_slug': descriptor.type.strip().lower().replace('_', '-'),
            'label': descriptor.label,
            'desc': descriptor.desc,
            'css_class': descriptor.option('class'),
            'multi': descriptor.multi,
            'options': _OptionView(descriptor.options()),
            'value': display_value(value),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class _OptionView(dict):
    """Dict whose missing keys read as None inside templates."""

    def __getattr__(self, item: str) -> Any:
        return self.get(item)


def normalize_choices(raw_choices: Any) -> List[Tuple[str, str]]:
    """Turn a mapping or a list of values/pairs into (value, label) tuples."""
    if not raw_choices:
        return []

    if isinstance(raw_choices, dict):
        return [(str(key), str(label)) for key, label in raw_choices.items()]

    choices = []
    for choice in raw_choices:
        if isinstance(choice, dict):
            choice_value = choice.get('key', choice.get('value', ''))
            choices.append((str(choice_value), str(choice.get('title', choice.get('label', choice_value)))))
        elif isinstance(choice, (list, tuple)) and len(choice) == 2:
            choices.append((str(choice[0]), str(choice[1])))
        else:
            choices.append((str(choice), str(choice)))
    return choices


def selected_values(value: Any) -> List[str]:
    if value is None or value == '':
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    return [str(value)]


class TextRenderer(FieldRenderer):
    template = "fields/text.html"


class NumberRenderer(FieldRenderer):
    template = "fields/number.html"


class DateRenderer(FieldRenderer):
    template = "fields/date.html"


class TextareaRenderer(FieldRenderer):
    template = "fields/textarea.html"


class TextareaWTagsRenderer(FieldRenderer):
    template = "fields/textarea_w_tags.html"

    def get_context(self, descriptor: FieldDescriptor, value: Any) -> Dict[str, Any]:
        context = super().get_context(descriptor, value)
        context['allowed_tags'] = descriptor.option('allowed_tags', DEFAULT_ALLOWED_TAGS)
        return context


class SelectRenderer(FieldRenderer):
    template = "fields/select.html"

    def get_context(self, descriptor: FieldDescriptor, value: Any) -> Dict[str, Any]:
        context = super().get_context(descriptor, value)
        context['choices'] = normalize_choices(descriptor.option('options'))
        context['selected'] = selected_values(context['value'])
        return context


class RadioRenderer(SelectRenderer):
    template = "fields/radio.html"


class CheckboxRenderer(FieldRenderer):
    template = "fields/checkbox.html"

    def get_context(self, descriptor: FieldDescriptor, value: Any) -> Dict[str, Any]:
        context = super().get_context(descriptor, value)
        checked_value = str(descriptor.option('value', 'yes'))
        context['checked_value'] = checked_value
        context['checked'] = str(context['value']) == checked_value if context['value'] is not None else False
        return context


class CustomHtmlRenderer(FieldRenderer):
    """Render-only block of trusted markup declared in the schema."""

    template = "fields/custom_html.html"

    def get_context(self, descriptor: FieldDescriptor, value: Any) -> Dict[str, Any]:
        context = super().get_context(descriptor, value)
        context['html'] = Markup(descriptor.option('html', ''))
        return context


# Built-in field types, registered by field_registry.default_registry()
BUILTIN_RENDERERS = {
    'text': TextRenderer,
    'textarea': TextareaRenderer,
    'textarea-w-tags': TextareaWTagsRenderer,
    'number': NumberRenderer,
    'date': DateRenderer,
    'select': SelectRenderer,
    'checkbox': CheckboxRenderer,
    'radio': RadioRenderer,
    'custom-html': CustomHtmlRenderer,
}
