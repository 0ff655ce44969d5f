"""Quiz document store: decode stored showIf/skipIf into rules, save edited rules back."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from .. import config
from ..logic import Combinator, Rule, RuleKind, QuizDocument, apply_legacy_logic, decode_legacy_logic, encode_legacy_logic
from ..models import DOCUMENT_ID_PATTERN, QuizDocumentIn

logger = logging.getLogger(__name__)

# Default storage for documents:
# - in-memory for fast path
# - persisted on disk so saved logic survives a server restart
_document_store: dict[str, QuizDocument] = {}

_BACKEND_DIR = Path(__file__).resolve().parents[3]  # backend/
_DEFAULT_DATA_DIR = _BACKEND_DIR / ".data"

# Document ids become file names
DOCUMENT_ID_RE = re.compile(DOCUMENT_ID_PATTERN)


def _documents_dir() -> Path:
    return Path(config.QUIZ_FLOW_DATA_DIR or _DEFAULT_DATA_DIR) / "documents"


def _document_path(document_id: str) -> Path:
    if not DOCUMENT_ID_RE.fullmatch(document_id):
        raise ValueError(f"Invalid document id: {document_id!r}")
    return _documents_dir() / f"{document_id}.json"


def _persist(document: QuizDocument) -> None:
    path = _document_path(document.id)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document.to_dict(), ensure_ascii=False), encoding="utf-8")


def _load_from_disk(document_id: str) -> QuizDocument | None:
    if not DOCUMENT_ID_RE.fullmatch(document_id):
        return None
    path = _document_path(document_id)
    if not path.exists():
        return None
    try:
        return QuizDocumentIn.model_validate_json(path.read_text(encoding="utf-8")).to_engine()
    except ValueError:
        logger.exception("Stored document %s is unreadable", document_id)
        return None


def save_document(document: QuizDocument) -> dict[str, Any]:
    """Store document and return its id and the rules decoded from its logic."""
    _persist(document)
    _document_store[document.id] = document
    rules = decode_legacy_logic(document)
    logger.info("Saved document %s (%d questions, %d rules)", document.id, len(document.questions), len(rules))
    return {"document_id": document.id, "rules": len(rules)}


def get_document(document_id: str) -> QuizDocument | None:
    doc = _document_store.get(document_id)
    if doc is not None:
        return doc
    doc = _load_from_disk(document_id)
    if doc is not None:
        _document_store[document_id] = doc
    return doc


def save_rules(document_id: str, rules: Iterable[Rule]) -> QuizDocument:
    """Encode rules into the document's showIf/skipIf and store the new document.

    Custom rules have no legacy form and are not saved; AND rules with several
    conditions are stored as one entry per condition.
    """
    doc = get_document(document_id)
    if doc is None:
        raise KeyError(document_id)
    rules = list(rules)
    encoded = encode_legacy_logic(rules)
    dropped = [r.id for r in rules if r.kind == RuleKind.CUSTOM]
    if dropped:
        logger.warning("Document %s: %d custom rule(s) not stored: %s", document_id, len(dropped), ", ".join(dropped))
    flattened = [
        r.id
        for r in rules
        if r.kind != RuleKind.CUSTOM and r.combinator == Combinator.AND and len(r.conditions) > 1
    ]
    if flattened:
        logger.warning(
            "Document %s: AND rule(s) split into independent showIf/skipIf entries: %s",
            document_id,
            ", ".join(flattened),
        )
    updated = apply_legacy_logic(doc, encoded)
    _document_store[document_id] = updated
    _persist(updated)
    return updated
