"""Settings file formats, looked up by file suffix."""
from __future__ import annotations

from pathlib import Path

from .base import BaseBackend

_BACKENDS: dict[str, type[BaseBackend]] = {}


def register_backend(backend: type[BaseBackend]) -> type[BaseBackend]:
    """Class decorator adding *backend* for each of its ``suffixes``."""
    for suffix in backend.suffixes:
        _BACKENDS[suffix] = backend
    return backend


def supported_suffixes() -> list[str]:
    return sorted(_BACKENDS)


def get_backend_for_path(path: str | Path) -> BaseBackend:
    suffix = Path(path).suffix.lower()
    try:
        return _BACKENDS[suffix]()
    except KeyError:
        known = ", ".join(supported_suffixes())
        raise ValueError(f"unsupported settings file {suffix or path!s}; use one of {known}") from None


from . import ini_backend, json_backend, yaml_backend  # noqa: F401,E402
