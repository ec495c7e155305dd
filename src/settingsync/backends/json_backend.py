from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

from ..errors import SettingsLoadError
from . import register_backend
from .base import BaseBackend, atomic_write, flatten, nest, read_text


@register_backend
class JsonBackend(BaseBackend):
    """JSON file backend."""

    suffixes = (".json",)

    def load(self, path: Path) -> MutableMapping[str, Any]:
        raw = read_text(path)
        if raw is None:
            return {}
        try:
            sections = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SettingsLoadError(f"{path}: {exc}") from exc
        if not isinstance(sections, dict):
            raise SettingsLoadError(f"{path}: top level must be an object of sections")
        return flatten(sections)

    def save(self, path: Path, data: Mapping[str, Any]) -> None:
        sections = nest(data)
        atomic_write(
            path,
            lambda fh: json.dump(sections, fh, indent=2, sort_keys=True, ensure_ascii=False),
        )
