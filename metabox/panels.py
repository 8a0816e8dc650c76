"""
Course Options metabox.
Fields are declared in schemas/course_options.yaml.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from .config_loader import get_config_value
from .metabox import AdminMetabox
from .schema_loader import load_schema

logger = logging.getLogger(__name__)


class CourseOptionsMetabox(AdminMetabox):
    """Settings for a course: general info, enrollment period and messages."""

    schema_file = "course_options.yaml"

    def configure(self) -> None:
        self.id = 'course-options'
        self.title = 'Course Options'
        self.screens = ['course']
        self.priority = 'high'

    def get_fields(self) -> List[Dict[str, Any]]:
        schemas_dir = Path(get_config_value(self.config, 'schema', 'directory', 'schemas'))
        tabs = load_schema(self.schema_file, schemas_dir)
        return [self._prefix_tab(tab) for tab in tabs]

    def _prefix_tab(self, tab: Any) -> Any:
        if not isinstance(tab, dict) or not isinstance(tab.get('fields'), list):
            return tab

        fields = []
        for field in tab['fields']:
            if isinstance(field, dict) and field.get('id'):
                field = dict(field, id=f"{self.prefix}{field['id']}")
            fields.append(field)
        return dict(tab, fields=fields)

    def save_after(self, post_id: Any) -> None:
        """Queue an error when the enrollment period ends before it starts."""
        if self.store.get(post_id, f"{self.prefix}enrollment_period") != 'yes':
            return

        start = self._get_date(post_id, 'enrollment_start_date')
        end = self._get_date(post_id, 'enrollment_end_date')
        if start and end and end < start:
            logger.info(f"Course {post_id}: enrollment end date {end} is before start date {start}")
            self.add_error("The enrollment end date must be after the enrollment start date.")

    def _get_date(self, post_id: Any, key: str) -> Optional[str]:
        value = self.store.get(post_id, f"{self.prefix}{key}")
        return value or None
