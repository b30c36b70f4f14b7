"""
specgate integrity - Check locked test assertions against the stored hash.

Exits 1 when the assertions were modified after being locked.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.lib.types import IntegrityStatus
from specgate.state import load_feature_state


def cmd_integrity(args, project_dir: Path, config: ProjectConfig) -> int:
    testify = load_feature_state(project_dir, args.feature, config).testify
    record = testify.integrity

    print(f"Status:         {record.status.value}")
    print(f"Current hash:   {record.current_hash or '-'}")
    print(f"Stored hash:    {record.stored_hash or '-'}")

    if record.status == IntegrityStatus.TAMPERED:
        print()
        print("ERROR: Test assertions changed since they were locked.")
        return 1
    if record.status == IntegrityStatus.MISSING and not testify.exists:
        print()
        print("No .feature files found.")

    return 0
