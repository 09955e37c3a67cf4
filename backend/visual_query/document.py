"""Import and export of visual query documents (sql-forge/visual-query/v1)."""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from config import DEFAULT_QUERY_NAME
from .errors import DocumentImportError
from .query_types import SCHEMA_ID, DocumentMeta, QueryNode, VisualQueryDocument

logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGE = "Failed to parse JSON file"
INVALID_SCHEMA_MESSAGE = "Invalid file: not a SQL Forge query"


def is_valid_schema(data: Any) -> bool:
    """Check the envelope: the schema tag and a non-null root object."""
    if not isinstance(data, dict):
        return False
    return data.get("$schema") == SCHEMA_ID and isinstance(data.get("root"), dict)


def load_document(text: str) -> VisualQueryDocument:
    """
    Parse a saved document.

    Raises DocumentImportError with a user-facing message when the text is
    not JSON, the envelope is wrong, or the root is not a valid query.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        logger.info(f"[import] Rejected document: {e}")
        raise DocumentImportError(PARSE_ERROR_MESSAGE) from e

    if not is_valid_schema(raw):
        raise DocumentImportError(INVALID_SCHEMA_MESSAGE)

    meta = raw.get("meta")
    if not isinstance(meta, dict) or not meta.get("name"):
        meta = {**(meta if isinstance(meta, dict) else {}), "name": DEFAULT_QUERY_NAME}

    try:
        return VisualQueryDocument.model_validate({**raw, "meta": meta})
    except ValidationError as e:
        logger.info(f"[import] Root failed validation: {e.error_count()} error(s)")
        raise DocumentImportError(INVALID_SCHEMA_MESSAGE) from e


def _timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_document(
    root: QueryNode, name: str = "", now: Optional[datetime] = None
) -> VisualQueryDocument:
    """Wrap a root query in a fresh envelope stamped with the current time."""
    stamp = _timestamp(now)
    return VisualQueryDocument(
        meta=DocumentMeta(
            name=name or DEFAULT_QUERY_NAME,
            created_at=stamp,
            updated_at=stamp,
        ),
        root=root,
    )


def document_to_dict(doc: VisualQueryDocument) -> dict:
    # Unset subQueryId is left out, as the frontend does
    return doc.model_dump(by_alias=True, exclude_none=True)


def dumps_document(doc: VisualQueryDocument) -> str:
    return json.dumps(document_to_dict(doc), indent=2)


def export_filename(name: str) -> str:
    """File name for a download, e.g. 'top customers' -> 'top_customers.sqlforge.json'."""
    return re.sub(r"\s+", "_", name or DEFAULT_QUERY_NAME) + ".sqlforge.json"
