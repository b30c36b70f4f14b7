"""
Persisted workflow context.

Two JSON documents written by the authoring workflow carry state this
engine reads but never writes:

- the project context, holding the test-first policy
  ({"tdd_determination": "mandatory"})
- the feature context, holding the locked assertion hash
  ({"testify": {"assertion_hash": "<sha256 hex>"}})

Anything unreadable degrades to "absent" with a warning.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from .validate import ValidationError, validate

logger = logging.getLogger(__name__)

SCHEMA_NAME = "context"


@dataclass(frozen=True)
class ContextState:
    """Values read from a context document. None means not recorded."""
    tdd_determination: Optional[str] = None
    assertion_hash: Optional[str] = None


def parse_context(text: Optional[str], source: str = "context.json") -> ContextState:
    """Parse and validate a context document.

    Args:
        text: Raw JSON, or None if the document doesn't exist
        source: File name used in warnings

    Returns:
        ContextState; empty if the document is absent or malformed
    """
    if text is None:
        return ContextState()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed context {source}: invalid JSON: {e}")
        return ContextState()

    try:
        validate(data, SCHEMA_NAME)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed context {source}: {e}")
        return ContextState()

    testify = data.get("testify") or {}
    return ContextState(
        tdd_determination=data.get("tdd_determination"),
        assertion_hash=testify.get("assertion_hash") or None,
    )
