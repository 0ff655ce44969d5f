"""Export and import of the logic configuration document {version, rules, flows, templates}."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from ..logic import Flow, LogicTemplate, Rule
from ..logic.templates import BUILTIN_TEMPLATE_IDS
from ..models import LogicConfig

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1


class LogicConfigError(ValueError):
    """Import document failed shape validation."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class ImportedConfig:
    rules: tuple[Rule, ...] = ()
    flows: tuple[Flow, ...] = ()
    templates: tuple[LogicTemplate, ...] = field(default_factory=tuple)


def export_logic_config(
    rules: Iterable[Rule] = (),
    flows: Iterable[Flow] = (),
    templates: Iterable[LogicTemplate] = (),
) -> dict[str, Any]:
    """Self-describing export. Built-in templates and test results are left out."""
    flow_dicts = []
    for f in flows:
        d = f.to_dict()
        d.pop("testResults", None)
        flow_dicts.append(d)
    return {
        "version": CONFIG_VERSION,
        "rules": [r.to_dict() for r in rules],
        "flows": flow_dicts,
        "templates": [t.to_dict() for t in templates if t.id not in BUILTIN_TEMPLATE_IDS],
    }


def _summarize(e: ValidationError) -> list[dict[str, Any]]:
    return [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()]


def import_logic_config(data: dict[str, Any] | str | bytes) -> ImportedConfig:
    """Validate and convert an export document. Raises LogicConfigError on any shape problem."""
    try:
        if isinstance(data, (str, bytes)):
            config = LogicConfig.model_validate_json(data)
        else:
            config = LogicConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Rejected logic config: %d validation error(s)", e.error_count())
        raise LogicConfigError("Invalid logic config", errors=_summarize(e)) from e
    imported = ImportedConfig(
        rules=tuple(r.to_engine() for r in config.rules),
        flows=tuple(f.to_engine() for f in config.flows),
        templates=tuple(t.to_engine() for t in config.templates),
    )
    logger.info(
        "Imported logic config: %d rules, %d flows, %d templates",
        len(imported.rules),
        len(imported.flows),
        len(imported.templates),
    )
    return imported


def load_logic_config(path: str | Path) -> ImportedConfig:
    return import_logic_config(Path(path).read_text(encoding="utf-8"))


def dump_logic_config(path: str | Path, config: dict[str, Any]) -> None:
    Path(path).write_text(json.dumps(config, ensure_ascii=False, indent=2), encoding="utf-8")
