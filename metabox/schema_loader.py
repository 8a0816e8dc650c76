"""
Schema loader for metabox panels.
Handles loading of YAML/JSON panel schemas and coercion of raw schema
declarations into Tab models.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

import yaml
from pydantic import ValidationError

from .exceptions import SchemaError
from .models import FieldDescriptor, Tab

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path("schemas")


def load_schema(schema_path: Union[str, Path], schemas_dir: Optional[Path] = None) -> List[Dict[str, Any]]:
    """
    Load a raw panel schema from a YAML or JSON file.

    The file holds either a list of tabs or a mapping with a 'tabs' key.

    Args:
        schema_path: Path to schema file (relative paths resolve against schemas_dir)
        schemas_dir: Directory holding schema files (defaults to ./schemas)

    Returns:
        Raw list of tab declarations

    Raises:
        SchemaError: If the file is missing, unreadable or not a list of tabs
    """
    full_path = Path(schema_path)
    if not full_path.is_absolute():
        full_path = (schemas_dir or SCHEMAS_DIR) / full_path

    if not full_path.exists():
        logger.error(f"Schema file not found: {full_path}")
        raise SchemaError(str(full_path), "file not found")

    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            if full_path.suffix.lower() in ['.yaml', '.yml']:
                raw = yaml.safe_load(f)
            elif full_path.suffix.lower() == '.json':
                raw = json.load(f)
            else:
                raise SchemaError(str(full_path), f"unsupported file format '{full_path.suffix}'")
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {full_path}: {e}")
        raise SchemaError(str(full_path), f"YAML parsing error: {e}") from e
    except json.JSONDecodeError as e:
        logger.error(f"JSON parsing error in {full_path}: {e}")
        raise SchemaError(str(full_path), f"JSON parsing error: {e}") from e
    except OSError as e:
        logger.error(f"Error reading schema {full_path}: {e}")
        raise SchemaError(str(full_path), str(e)) from e

    if isinstance(raw, dict) and 'tabs' in raw:
        raw = raw['tabs']

    if not isinstance(raw, list):
        raise SchemaError(str(full_path), "schema must be a list of tabs")

    logger.info(f"Successfully loaded schema: {full_path} ({len(raw)} tabs)")
    return raw


def coerce_tab(raw_tab: Any) -> Optional[Tab]:
    """
    Coerce a single tab declaration.

    Tabs that are not mappings are dropped; a tab whose 'fields' entry is
    missing or not a list is kept with no fields.

    Raises:
        ValidationError: If a field declaration is invalid
    """
    if isinstance(raw_tab, Tab):
        return raw_tab

    if not isinstance(raw_tab, dict):
        logger.warning(f"Ignoring tab declaration of type {type(raw_tab).__name__}")
        return None

    raw_fields = raw_tab.get('fields')
    if not isinstance(raw_fields, (list, tuple)):
        logger.warning(f"Tab '{raw_tab.get('title', '')}' has no field list")
        raw_fields = []

    fields = [
        field if isinstance(field, FieldDescriptor) else FieldDescriptor.model_validate(field)
        for field in raw_fields
    ]
    return Tab(title=str(raw_tab.get('title', '')), fields=fields)


def coerce_schema(raw_schema: Any) -> Optional[List[Tab]]:
    """
    Coerce a raw schema declaration into a list of tabs.

    Args:
        raw_schema: List of tab declarations (dicts or Tab instances)

    Returns:
        List of Tab models, or None if the schema is absent or malformed
    """
    if raw_schema is None:
        logger.debug("No schema declared")
        return None

    if not isinstance(raw_schema, (list, tuple)):
        logger.error(f"Schema must be a list of tabs, got {type(raw_schema).__name__}")
        return None

    tabs: List[Tab] = []
    try:
        for raw_tab in raw_schema:
            tab = coerce_tab(raw_tab)
            if tab is not None:
                tabs.append(tab)
    except ValidationError as e:
        logger.error(f"Invalid field declaration in schema: {e}")
        return None

    return tabs


def extract_field_ids(schema: Sequence[Tab]) -> List[str]:
    """
    Extract the ids of all persistable fields, in schema order.

    Args:
        schema: List of tabs

    Returns:
        Field ids
    """
    return [field.id for tab in schema for field in tab.fields if field.persistable]
