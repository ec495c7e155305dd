from __future__ import annotations

import configparser
import json
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

from ..errors import SettingsLoadError
from . import register_backend
from .base import BaseBackend, atomic_write, split_key


def _format(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


@register_backend
class IniBackend(BaseBackend):
    suffixes = (".ini",)

    def load(self, path: Path) -> MutableMapping[str, Any]:
        parser = configparser.ConfigParser(interpolation=None)
        if path.exists():
            try:
                parser.read(path, encoding="utf-8")
            except configparser.Error as exc:
                raise SettingsLoadError(str(exc)) from exc
        data: MutableMapping[str, Any] = {}
        for section in parser.sections():
            for key, value in parser.items(section):
                data[key if section == "__root__" else f"{section}.{key}"] = value
        return data

    def save(self, path: Path, data: Mapping[str, Any]) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        for dotted in sorted(data):
            section, key = split_key(dotted)
            if not parser.has_section(section):
                parser.add_section(section)
            parser.set(section, key, _format(data[dotted]))
        atomic_write(path, parser.write)
