"""Schema manager: load, validate and save event schemas.

The bundled schema ships as JSON next to this module. Custom schemas may be
JSON or YAML; both are read with ruamel.yaml and validated via Pydantic.
"""

import json
import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from config.schema import EventSchema
from data.errors import MissingResourceError, SchemaValidationError

logger = logging.getLogger(__name__)

yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML COMMENTS ───

_YAML_HEADER = f"""\
# ============================================
# Event schema: spreadsheet layout of the registration export
# Exported: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "class_selection_sheet": (
        "Roster sheet",
        "One row per attendee. Column values are either an exact header\n"
        "or {pattern: ...} to match headers containing the text.",
    ),
    "period_sheets": (
        "Period sheets",
        "One entry per period. Every workshop column is one duration segment\n"
        "(start_day..end_day, within total_days).",
    ),
    "workshop_format": (
        "Workshop cell format",
        None,
    ),
}


class SchemaManager:
    SCHEMA_DIR = Path(__file__).parent
    DEFAULT_SCHEMA = SCHEMA_DIR / "winter_adventure_schema.json"

    # ─── Loading ───

    def load(self, path: Optional[Path] = None) -> EventSchema:
        """Load a schema from JSON/YAML. Validates automatically via Pydantic."""
        target = Path(path) if path is not None else self.DEFAULT_SCHEMA
        if not target.exists():
            raise MissingResourceError(str(target))
        try:
            with open(target, "r", encoding="utf-8") as f:
                raw = yaml.load(f)
        except (OSError, YAMLError) as e:
            raise SchemaValidationError(
                f"Schema file could not be read: {target}\n{e}",
                schema_name=target.name,
            ) from e
        if not isinstance(raw, dict):
            raise SchemaValidationError(
                f"Schema file is empty or not a mapping: {target}",
                schema_name=target.name,
            )
        try:
            schema = EventSchema.model_validate(_plain(raw))
        except ValidationError as e:
            raise SchemaValidationError(
                f"Schema file is invalid: {target}\nPydantic error: {e}",
                schema_name=target.name,
            ) from e
        logger.debug(f"Schema '{schema.event_name}' loaded from {target}")
        return schema

    # ─── Saving ───

    def save(self, schema: EventSchema, path: Path) -> None:
        """Write the schema as commented YAML (editable copy for a new year)."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(schema)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)
        logger.info(f"Schema written to {target}")

    def _build_commented_yaml(self, schema: EventSchema) -> CommentedMap:
        raw = json.loads(schema.model_dump_json())
        # Exact headers are written back as plain strings
        sheets = [raw["class_selection_sheet"], *raw["period_sheets"]]
        for sheet in sheets:
            sheet["columns"] = {
                role: ({"pattern": ref["pattern"]} if ref["pattern"] else ref["name"])
                for role, ref in sheet["columns"].items()
            }
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        cm.yaml_add_eol_comment("days of the event", "total_days")
        return cm


def _plain(node):
    """ruamel containers → plain dict/list."""
    if isinstance(node, dict):
        return {str(k): _plain(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_plain(v) for v in node]
    return node


@lru_cache(maxsize=1)
def load_default_schema() -> EventSchema:
    """Bundled schema, loaded once and shared read-only."""
    return SchemaManager().load()
