import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from wizard.flow.models import FlowConfig
from wizard.settings import settings

REPO_ROOT = Path(__file__).resolve().parents[2]


class ConfigLoadError(RuntimeError):
    """The flow document is missing, unreadable or not a valid flow."""


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    p = Path(path or settings.FLOW_CONFIG_PATH)
    return p if p.is_absolute() else REPO_ROOT / p


def load_raw_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Read the flow document from disk. Re-read on every call so edits apply without a restart."""
    p = resolve_config_path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigLoadError(f"Cannot read flow config {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"Flow config {p} must be a JSON object")
    return raw


def parse_config(raw: Dict[str, Any]) -> FlowConfig:
    try:
        return FlowConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid flow config: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


def load_flow_config(path: Optional[Union[str, Path]] = None) -> FlowConfig:
    return parse_config(load_raw_config(path))
