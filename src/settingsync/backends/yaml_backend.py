from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

from ..errors import SettingsLoadError
from . import register_backend
from .base import BaseBackend, atomic_write, flatten, nest, read_text


def _yaml():
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise SettingsLoadError("PyYAML is required for .yaml settings files") from exc
    return yaml


@register_backend
class YamlBackend(BaseBackend):
    """YAML file backend; values keep their native types."""

    suffixes = (".yaml", ".yml")

    def load(self, path: Path) -> MutableMapping[str, Any]:
        yaml = _yaml()
        raw = read_text(path)
        if raw is None:
            return {}
        try:
            sections = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise SettingsLoadError(f"{path}: {exc}") from exc
        if not isinstance(sections, dict):
            raise SettingsLoadError(f"{path}: top level must be a mapping of sections")
        return flatten(sections)

    def save(self, path: Path, data: Mapping[str, Any]) -> None:
        yaml = _yaml()
        sections = nest(data)
        atomic_write(
            path,
            lambda fh: yaml.safe_dump(sections, fh, sort_keys=True, allow_unicode=True),
        )
