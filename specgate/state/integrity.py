"""
Assertion integrity for locked test scenarios.

Once scenarios are locked, the authoring workflow stores a SHA-256 of
their Given/When/Then steps. Recomputing it here detects edits made
after implementation started.

The hash input is every step line across all .feature files (files in
filename order, lines in document order), each with whitespace runs
collapsed to one space and trimmed, joined with "\\n".
"""

import hashlib
import re
from typing import Optional

from specgate.lib.types import IntegrityRecord, IntegrityStatus

STEP_RE = re.compile(r'^\s*(Given|When|Then|And|But) ')
WHITESPACE_RE = re.compile(r'\s+')


def extract_assertions(content: Optional[str]) -> list[str]:
    """Return normalized step lines in document order."""
    if not content:
        return []
    return [
        WHITESPACE_RE.sub(' ', line).strip()
        for line in content.split('\n')
        if STEP_RE.match(line)
    ]


def compute_assertion_hash(content: Optional[str]) -> Optional[str]:
    """SHA-256 hex digest of the normalized steps, or None if there are none."""
    lines = extract_assertions(content)
    if not lines:
        return None
    return hashlib.sha256('\n'.join(lines).encode('utf-8')).hexdigest()


def check_integrity(current_hash: Optional[str], stored_hash: Optional[str]) -> IntegrityRecord:
    """Compare the live hash with the stored one.

    missing when either side is absent, valid when equal, tampered otherwise.
    """
    if not current_hash or not stored_hash:
        return IntegrityRecord(IntegrityStatus.MISSING, current_hash or None, stored_hash or None)

    status = IntegrityStatus.VALID if current_hash == stored_hash else IntegrityStatus.TAMPERED
    return IntegrityRecord(status, current_hash, stored_hash)
