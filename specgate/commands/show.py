"""
specgate show - Dump the full feature state as JSON or YAML.
"""

import json
from pathlib import Path

import yaml

from specgate.lib.config import ProjectConfig
from specgate.state import load_feature_state


def render_state(data: dict, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def cmd_show(args, project_dir: Path, config: ProjectConfig) -> int:
    state = load_feature_state(project_dir, args.feature, config)
    print(render_state(state.to_dict(), args.format))
    return 0
