from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..errors import ConfigError

DEFAULT_MANIFEST = Path(__file__).resolve().parents[1] / "manifests" / "tools.yaml"

# Keys read through ToolGroup.strings(); each must hold a YAML list.
LIST_KEYS = ("packages", "prerequisites", "pipx", "npm_global", "installer_args", "cargo", "apps")


@dataclass(frozen=True)
class ToolGroup:
    name: str
    raw: Dict[str, Any]

    @property
    def summary(self) -> str:
        return str(self.raw.get("summary") or self.name)

    @property
    def packages(self) -> List[str]:
        return self.strings("packages")

    def strings(self, key: str) -> List[str]:
        items = self.raw.get(key) or []
        if not isinstance(items, list):
            raise ConfigError(f"tool group {self.name}: {key} must be a list")
        return [str(i).strip() for i in items if str(i).strip()]

    def text(self, key: str, default: str = "") -> str:
        return str(self.raw.get(key) or default)


@dataclass(frozen=True)
class ToolManifest:
    raw: Dict[str, Any]

    def group(self, name: str) -> ToolGroup:
        groups = self.raw.get("groups") or {}
        data = groups.get(name)
        if not isinstance(data, dict):
            raise ConfigError(f"tool manifest has no group {name!r}")
        return ToolGroup(name=name, raw=data)


def _check_groups(p: Path, groups: Dict[str, Any], required: Iterable[str]) -> None:
    missing = sorted(set(required) - set(groups))
    if missing:
        raise ConfigError(f"Manifest {p}: missing group(s) {', '.join(missing)}")
    for name, data in groups.items():
        if not isinstance(data, dict):
            raise ConfigError(f"Manifest {p}: group {name} must be a mapping")
        for key in LIST_KEYS:
            if data.get(key) is not None and not isinstance(data[key], list):
                raise ConfigError(f"Manifest {p}: {name}.{key} must be a list")


def load_manifest(path: Optional[str | Path] = None, *, required: Iterable[str] = ()) -> ToolManifest:
    """Load and check a tool catalog; `required` names groups that must exist."""

    p = Path(path) if path else DEFAULT_MANIFEST
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read tool manifest {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must be a mapping/dict: {p}")
    if not isinstance(data.get("groups"), dict):
        raise ConfigError(f"Manifest {p}: groups must be a mapping")
    _check_groups(p, data["groups"], required)
    return ToolManifest(raw=data)
