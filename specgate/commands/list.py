"""
specgate list - List features and their progress.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.state import list_features


def cmd_list(args, project_dir: Path, config: ProjectConfig) -> int:
    """List features under the specs directory."""
    features = list_features(project_dir, config)

    if not features:
        print(f"Features: none (no {config.specs_dir}/<feature>/{config.spec} found)")
        return 0

    print("Features")
    print("-" * 60)
    for feature in features:
        name = feature.name[:30] + "..." if len(feature.name) > 30 else feature.name
        print(f"  {feature.id:<28} {name:<33} {feature.stories} stories  tasks {feature.progress}")

    return 0
