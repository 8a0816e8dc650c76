"""
Schema processor for metabox panels.
Turns a tab/field schema into navigation and content markup for one render.
"""

from typing import Any, List, Mapping, Optional, Sequence
import logging

from .field_registry import FieldTypeRegistry
from .field_renderers import render_template
from .models import ContentBlock, NavigationEntry, RenderState, Tab

logger = logging.getLogger(__name__)


def tab_id(panel_id: str, index: int) -> str:
    """Composite id shared by a tab's navigation entry and content block."""
    return f"{panel_id}-tab-{index}"


def process_fields(
    panel_id: str,
    schema: Sequence[Tab],
    registry: FieldTypeRegistry,
    values: Optional[Mapping[str, Any]] = None
) -> RenderState:
    """
    Build navigation and content for a panel schema.

    Tabs are indexed from 1 and the first tab is the active one. Each field
    is rendered by the renderer its type resolves to.

    Args:
        panel_id: Id of the panel being rendered
        schema: Ordered list of tabs
        registry: Field type registry used to resolve renderers
        values: Stored values keyed by field id, used to populate widgets

    Returns:
        RenderState for this render call

    Raises:
        UnknownFieldType: If a field's type has no registered renderer
    """
    values = values or {}
    navigation: List[NavigationEntry] = []
    content: List[ContentBlock] = []

    for index, tab in enumerate(schema, start=1):
        active = index == 1
        composite_id = tab_id(panel_id, index)

        navigation.append(NavigationEntry(
            tab_id=composite_id,
            index=index,
            title=tab.title,
            active=active,
            markup=render_template("panel/nav_item.html", {
                'tab_id': composite_id,
                'title': tab.title,
                'active': active,
            }),
        ))

        fields_markup = []
        for field in tab.fields:
            renderer = registry.resolve(field.type)
            value = values.get(field.id) if field.id else None
            fields_markup.append(renderer.render(field, value))

        content.append(ContentBlock(
            tab_id=composite_id,
            index=index,
            active=active,
            fields=tuple(fields_markup),
            markup=render_template("panel/tab_content.html", {
                'tab_id': composite_id,
                'active': active,
                'fields': fields_markup,
            }),
        ))

    logger.debug(f"Processed panel {panel_id}: {len(navigation)} tabs")
    return RenderState(navigation=tuple(navigation), content=tuple(content), tab_count=len(navigation))


def render_panel(
    panel_id: str,
    state: RenderState,
    before_content: str = "",
    after_content: str = "",
    nonce_markup: str = ""
) -> str:
    """
    Render the panel container around a processed render state.

    Tab navigation is only included when the panel has 2 or more tabs.
    """
    return render_template("panel/container.html", {
        'panel_id': panel_id,
        'show_navigation': state.show_navigation,
        'navigation': state.navigation_markup,
        'content': state.content_markup,
        'before_content': before_content,
        'after_content': after_content,
        'nonce_markup': nonce_markup,
    })
