#
# Copyright 2024 podfix Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Configuration handler for podfix.

Reads PODFIX.toml and environment variables. Every value has a default, so
the file is optional.
"""

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11, 0, "alpha", 7):
    import tomllib
else:
    import tomli as tomllib

from podfix.patches.flags import DEFAULT_PREFIX, DEFAULT_SETTINGS, DEFAULT_TARGETS
from podfix.patches.header import DEFAULT_REPLACE, DEFAULT_SEARCH, HEADER_RELATIVE_PATH
from podfix.utils.errors import NotFoundError, ParseError

CONFIG_FILE_NAME = "PODFIX.toml"
DEFAULT_PODS_DIR = "ios/Pods"
PODS_PROJECT_NAME = "Pods.xcodeproj"
PODS_DIR_ENV = "PODFIX_PODS_DIR"


@dataclass
class FlagSettings:
    """Which flags to strip, and from where."""
    targets: List[str] = field(default_factory=lambda: list(DEFAULT_TARGETS))
    settings: List[str] = field(default_factory=lambda: list(DEFAULT_SETTINGS))
    prefix: str = DEFAULT_PREFIX


@dataclass
class HeaderSettings:
    """Which header to patch, and how."""
    path: Optional[Path] = None
    search: str = DEFAULT_SEARCH
    replace: str = DEFAULT_REPLACE


def find_config_file(project_dir) -> Optional[Path]:
    """
    Look for PODFIX.toml in ``project_dir``, then in its immediate subdirectories.

    Returns:
        Path to the file, or None if there is none.
    """
    project_dir = Path(project_dir)
    candidate = project_dir / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    if not project_dir.is_dir():
        return None
    for subdir in sorted(project_dir.iterdir()):
        if not subdir.is_dir():
            continue
        candidate = subdir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_toml(path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(str(e), path=str(path)) from e


class PodfixConfig:
    """Resolved podfix settings."""

    def __init__(self, config: Dict[str, Any], project_dir=".", config_path=None):
        """
        Args:
            config: Configuration dictionary from PODFIX.toml
            project_dir: Application root; defaults resolve against it
            config_path: File the dictionary was read from, if any. Paths set
                in the file resolve against its directory
        """
        self.raw_config = config
        self.project_dir = Path(project_dir).resolve()
        self.config_path = Path(config_path) if config_path else None
        self.config_dir = (
            self.config_path.resolve().parent if self.config_path else self.project_dir
        )

        pods_config = self._section("pods")
        if os.environ.get(PODS_DIR_ENV):
            self.pods_dir = self._resolve(os.environ[PODS_DIR_ENV], self.project_dir)
        elif pods_config.get("dir"):
            self.pods_dir = self._resolve(pods_config["dir"], self.config_dir)
        else:
            self.pods_dir = self._resolve(DEFAULT_PODS_DIR, self.project_dir)

        project = pods_config.get("project")
        self.pods_project = (
            self._resolve(project, self.config_dir)
            if project
            else self.pods_dir / PODS_PROJECT_NAME
        )

        flags_config = self._section("flags")
        self.flags = FlagSettings(
            targets=self._string_list(flags_config, "targets", DEFAULT_TARGETS),
            settings=self._string_list(flags_config, "settings", DEFAULT_SETTINGS),
            prefix=self._string(flags_config, "prefix", DEFAULT_PREFIX),
        )

        header_config = self._section("header")
        header_path = header_config.get("path")
        self.header = HeaderSettings(
            path=(
                self._resolve(header_path, self.config_dir)
                if header_path
                else self.pods_dir / HEADER_RELATIVE_PATH
            ),
            search=self._string(header_config, "search", DEFAULT_SEARCH),
            replace=self._string(header_config, "replace", DEFAULT_REPLACE, allow_empty=True),
        )

    @classmethod
    def load(cls, project_dir=None, config_path=None) -> "PodfixConfig":
        """
        Load configuration for ``project_dir`` (defaults to the working directory).

        An explicit ``config_path`` must exist; otherwise PODFIX.toml is
        discovered and defaults are used when none is found.
        """
        project_dir = Path(project_dir) if project_dir else Path(os.getcwd())
        if config_path:
            config_path = Path(config_path)
            if not config_path.is_file():
                raise NotFoundError(config_path, CONFIG_FILE_NAME)
        else:
            config_path = find_config_file(project_dir)

        if config_path is None:
            return cls({}, project_dir)
        return cls(load_toml(config_path), project_dir, config_path)

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.raw_config.get(name, {})
        if not isinstance(section, dict):
            raise ParseError(f"[{name}] must be a table", path=self._source())
        return section

    def _source(self) -> Optional[str]:
        return str(self.config_path) if self.config_path else None

    def _string(self, section, key, default, allow_empty=False) -> str:
        value = section.get(key, default)
        if not isinstance(value, str) or (not value and not allow_empty):
            raise ParseError(f"'{key}' must be a non-empty string", path=self._source())
        return self._expand_env(value)

    def _string_list(self, section, key, default) -> List[str]:
        value = section.get(key, default)
        if isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ParseError(f"'{key}' must be a list of strings", path=self._source())
        return [self._expand_env(v) for v in value]

    def _resolve(self, value, base: Path) -> Path:
        path = Path(self._expand_env(str(value))).expanduser()
        if not path.is_absolute():
            path = base / path
        return path

    def _expand_env(self, value: str) -> str:
        """
        Expand environment variables in configuration values.

        Supports ${VAR_NAME} and $VAR_NAME syntax. Unknown variables are left as is.
        """
        if not isinstance(value, str):
            return value

        pattern1 = re.compile(r'\$\{([^}]+)\}')
        value = pattern1.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

        # $(inherited) style build variables never match this
        pattern2 = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
        value = pattern2.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

        return value

    def apply_overrides(
        self,
        pods_dir=None,
        project=None,
        header=None,
        targets=None,
        settings=None,
        prefix=None,
    ):
        """Apply command line overrides; relative paths resolve against the working directory."""
        cwd = Path(os.getcwd())
        if pods_dir:
            self.pods_dir = cwd / Path(pods_dir).expanduser()
            if not self._section("pods").get("project"):
                self.pods_project = self.pods_dir / PODS_PROJECT_NAME
            if not self._section("header").get("path"):
                self.header.path = self.pods_dir / HEADER_RELATIVE_PATH
        if project:
            self.pods_project = cwd / Path(project).expanduser()
        if header:
            self.header.path = cwd / Path(header).expanduser()
        if targets:
            self.flags.targets = list(targets)
        if settings:
            self.flags.settings = list(settings)
        if prefix:
            self.flags.prefix = prefix
        return self

    def describe_source(self) -> str:
        if self.config_path:
            return str(self.config_path)
        return "built-in defaults"
