"""
Unit tests for the field type registry and the built-in renderers.
"""

import pytest

from metabox.exceptions import UnknownFieldType
from metabox.field_registry import FieldTypeRegistry, canonical_name, default_registry, lookup_key
from metabox.field_renderers import (
    FieldRenderer, SelectRenderer, display_value, normalize_choices, selected_values
)
from metabox.models import FieldDescriptor


class TestCanonicalName:
    """Test cases for type identifier normalization."""

    @pytest.mark.parametrize("identifier,expected", [
        ("text", "Text"),
        ("text-area", "TextArea"),
        ("textarea-w-tags", "TextareaWTags"),
        ("custom_html", "CustomHtml"),
        ("  date  ", "Date"),
        ("", ""),
    ])
    def test_canonical_name(self, identifier, expected):
        assert canonical_name(identifier) == expected

    def test_lookup_key_ignores_separators_and_case(self):
        """'text-area' and 'textarea' resolve to the same registry entry."""
        assert lookup_key("text-area") == lookup_key("textarea") == lookup_key("TextArea")


class TestFieldTypeRegistry:
    """Test cases for FieldTypeRegistry."""

    def test_default_registry_has_builtin_types(self):
        registry = default_registry()

        for type_identifier in ['text', 'textarea', 'textarea-w-tags', 'number', 'date',
                                'select', 'checkbox', 'radio', 'custom-html']:
            assert type_identifier in registry

    def test_resolve_returns_registered_renderer(self):
        registry = FieldTypeRegistry()
        renderer = FieldRenderer()

        registry.register('text-area', renderer)

        assert registry.resolve('textarea') is renderer
        assert registry.resolve('Text_Area') is renderer
        assert renderer.name == 'TextArea'

    def test_resolve_unknown_type_raises(self):
        registry = default_registry()

        with pytest.raises(UnknownFieldType) as exc_info:
            registry.resolve('bogus')

        assert exc_info.value.type_identifier == 'bogus'
        assert 'Text' in exc_info.value.known_types
        assert "bogus" in str(exc_info.value)

    def test_register_empty_identifier_raises(self):
        registry = FieldTypeRegistry()

        with pytest.raises(ValueError):
            registry.register('  ', FieldRenderer())

    def test_register_replaces_existing(self):
        registry = FieldTypeRegistry()
        first, second = FieldRenderer(), FieldRenderer()

        registry.register('text', first)
        registry.register('Text', second)

        assert len(registry) == 1
        assert registry.resolve('text') is second

    def test_get_and_iteration(self):
        registry = FieldTypeRegistry()
        registry.register('number', FieldRenderer())
        registry.register('date', FieldRenderer())

        assert registry.get('missing') is None
        assert list(registry) == ['Date', 'Number']
        assert 42 not in registry


class TestRenderers:
    """Test cases for the built-in renderers."""

    def setup_method(self):
        self.registry = default_registry()

    def render(self, field, value=None):
        descriptor = FieldDescriptor.model_validate(field)
        return self.registry.resolve(descriptor.type).render(descriptor, value)

    def test_text_renders_stored_value_escaped(self):
        markup = self.render({'type': 'text', 'id': 'title', 'label': 'Title'}, 'a "quoted" <b>')

        assert 'name="title"' in markup
        assert '<label class="mb-label" for="title">Title</label>' in markup
        assert '&#34;quoted&#34;' in markup
        assert '<b>' not in markup

    def test_stored_entities_are_escaped_once(self):
        markup = self.render({'type': 'textarea', 'id': 'msg'}, 'He said &#34;hi&#34; &amp; left')

        assert '>He said &#34;hi&#34; &amp; left</textarea>' in markup
        assert '&amp;#34;' not in markup

    def test_display_value(self):
        assert display_value('it&#39;s &lt;ok&gt;') == "it's <ok>"
        assert display_value(['&#34;a&#34;', 'b']) == ['"a"', 'b']
        assert display_value(None) is None

    def test_text_uses_default_when_no_value(self):
        markup = self.render({'type': 'text', 'id': 'title', 'default': 'Untitled'})

        assert 'value="Untitled"' in markup

    def test_multi_select_posts_array(self):
        markup = self.render({'type': 'select', 'id': 'tags', 'multi': True,
                              'options': ['a', 'b']}, ['b'])

        assert 'name="tags[]"' in markup
        assert 'multiple' in markup
        assert '<option value="b" selected>' in markup
        assert '<option value="a">' in markup

    def test_select_with_mapping_options(self):
        markup = self.render({'type': 'select', 'id': 'level',
                              'options': {'beg': 'Beginner', 'adv': 'Advanced'}}, 'adv')

        assert '<option value="adv" selected>Advanced</option>' in markup

    def test_checkbox_checked_state(self):
        field = {'type': 'checkbox', 'id': 'enabled', 'value': 'yes'}

        assert ' checked' in self.render(field, 'yes')
        assert ' checked' not in self.render(field, '')

    def test_radio_marks_selected_choice(self):
        markup = self.render({'type': 'radio', 'id': 'mode', 'options': ['on', 'off']}, 'off')

        assert 'value="off" checked' in markup
        assert 'value="on" checked' not in markup

    def test_number_options(self):
        markup = self.render({'type': 'number', 'id': 'capacity', 'min': 0, 'step': 1}, '25')

        assert 'value="25"' in markup
        assert 'min="0"' in markup
        assert 'max=' not in markup

    def test_custom_html_is_not_escaped(self):
        markup = self.render({'type': 'custom-html', 'html': '<hr>'})

        assert '<div class="mb-custom-html"><hr></div>' in markup

    def test_textarea_w_tags_lists_allowed_tags(self):
        markup = self.render({'type': 'textarea-w-tags', 'id': 'msg', 'allowed_tags': '<b>'}, 'hi')

        assert 'Allowed tags: &lt;b&gt;' in markup
        assert '>hi</textarea>' in markup


class TestChoiceHelpers:
    """Test cases for choice normalization helpers."""

    def test_normalize_choices_shapes(self):
        assert normalize_choices(None) == []
        assert normalize_choices({'a': 'A'}) == [('a', 'A')]
        assert normalize_choices(['x', ('y', 'Y'), {'key': 'z', 'title': 'Z'}]) == [
            ('x', 'x'), ('y', 'Y'), ('z', 'Z')
        ]

    def test_selected_values(self):
        assert selected_values(None) == []
        assert selected_values('') == []
        assert selected_values('a') == ['a']
        assert selected_values(['a', 1]) == ['a', '1']

    def test_select_renderer_repr(self):
        assert repr(SelectRenderer('Select')) == "SelectRenderer(name='Select')"
