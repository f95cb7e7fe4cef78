"""Configuration precedence system for flagconv."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

try:
    import tomllib  # type: ignore[import-not-found]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef]


_KNOWN_KEYS = ("element_delimiter", "key_value_delimiter", "base")


class FlagconvConfig:
    """Resolves tag defaults through the precedence chain.

    defaults -> ``pyproject.toml [tool.flagconv]`` -> ``FLAGCONV_*`` environment.
    Values stay strings; they are validated where they are used, the same way
    a tag value is.
    """

    def __init__(self, project_root: str | Path | None = None, env: dict[str, str] | None = None) -> None:
        self._project_root = Path(project_root) if project_root is not None else Path.cwd()
        self._config: dict[str, str] = {}
        self._load_defaults()
        self._load_project_config()
        self._load_env_vars(os.environ if env is None else env)

    def _load_defaults(self) -> None:
        self._config = {
            "element_delimiter": ",",
            "key_value_delimiter": ":",
            "base": "10",
        }

    def _load_project_config(self) -> None:
        """Load from pyproject.toml [tool.flagconv]"""
        path = self._project_root / "pyproject.toml"
        if not path.exists():
            return
        with open(path, "rb") as f:
            data = tomllib.load(f)
        section = data.get("tool", {}).get("flagconv", {})
        for key in _KNOWN_KEYS:
            if key in section:
                self._config[key] = str(section[key])

    def _load_env_vars(self, environ: Any) -> None:
        """Load from FLAGCONV_* environment variables."""
        for key, value in environ.items():
            if key.startswith("FLAGCONV_"):
                config_key = key[9:].lower()
                if config_key in _KNOWN_KEYS:
                    self._config[config_key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def as_dict(self) -> dict[str, str]:
        return dict(self._config)
