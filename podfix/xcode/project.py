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
Project configuration model and the stores that read and write it.

The patching code only sees ``ProjectConfiguration`` -> ``Target`` ->
``BuildConfiguration`` -> ``build_settings``. ``PbxprojStore`` backs that model
with a real ``project.pbxproj``; ``InMemoryProjectStore`` backs it with plain
dictionaries.
"""

import copy
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, List, Optional

from podfix.utils.errors import NotFoundError
from podfix.xcode.pbxproj import PBXProjDocument, PlistArray, PlistDict

PBXPROJ_FILE_NAME = "project.pbxproj"


class PbxBuildSettings(Mapping):
    """``buildSettings`` of one configuration; list values can be reassigned."""

    def __init__(self, document: PBXProjDocument, settings: PlistDict):
        self._document = document
        self._settings = settings

    def __getitem__(self, key):
        return self._settings[key]

    def __iter__(self):
        return iter(self._settings)

    def __len__(self):
        return len(self._settings)

    def __setitem__(self, key, value):
        current = self._settings.get(key)
        if not isinstance(current, PlistArray):
            raise ValueError(f"only list settings can be rewritten, '{key}' is not a list")
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise TypeError(f"value for '{key}' must be a list of strings")
        self._settings[key] = self._document.replace_array(current, value)


class BuildConfiguration:
    def __init__(self, name: str, build_settings):
        self.name = name
        self.build_settings = build_settings

    def __repr__(self):
        return f"BuildConfiguration({self.name!r})"


class Target:
    def __init__(self, name: str, build_configurations: List[BuildConfiguration]):
        self.name = name
        self.build_configurations = build_configurations

    def __repr__(self):
        return f"Target({self.name!r})"


class ProjectConfiguration:
    """Targets of a project, each with its build configurations."""

    def __init__(self, targets: List[Target], path: Optional[str] = None, document=None):
        self.targets = targets
        self.path = path
        self.document = document

    def target_names(self) -> List[str]:
        return [target.name for target in self.targets]

    def find_target(self, name: str) -> Optional[Target]:
        for target in self.targets:
            if target.name == name:
                return target
        return None


class ProjectConfigurationStore(ABC):
    """Reads and writes a ``ProjectConfiguration``."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Location shown in messages."""

    @abstractmethod
    def exists(self) -> bool:
        """Whether there is a project to open."""

    @abstractmethod
    def open(self) -> ProjectConfiguration:
        """Load the project; raises ``NotFoundError`` when it does not exist."""

    @abstractmethod
    def save(self, project: ProjectConfiguration):
        """Persist ``project`` in its original format."""


def resolve_pbxproj_path(path) -> Path:
    """Accept either an ``.xcodeproj`` bundle or the ``project.pbxproj`` inside it."""
    path = Path(path)
    if path.suffix == ".xcodeproj" or path.is_dir():
        return path / PBXPROJ_FILE_NAME
    return path


class PbxprojStore(ProjectConfigurationStore):
    """Store backed by an Xcode ``project.pbxproj`` file."""

    def __init__(self, project_path):
        self.project_path = Path(project_path)
        self.pbxproj_path = resolve_pbxproj_path(project_path)

    @property
    def path(self) -> str:
        return str(self.project_path)

    def exists(self) -> bool:
        return os.path.isfile(self.pbxproj_path)

    def open(self) -> ProjectConfiguration:
        if not self.exists():
            raise NotFoundError(self.project_path, "Pods project")
        document = PBXProjDocument.load(self.pbxproj_path)
        targets = []
        for _, target in document.targets():
            configurations = []
            for config in document.build_configurations(target):
                settings = config.get("buildSettings")
                if not isinstance(settings, PlistDict):
                    settings = PlistDict()
                configurations.append(
                    BuildConfiguration(
                        str(config.get("name", "")),
                        PbxBuildSettings(document, settings),
                    )
                )
            targets.append(Target(str(target.get("name", "")), configurations))
        return ProjectConfiguration(targets, path=self.path, document=document)

    def save(self, project: ProjectConfiguration):
        project.document.save(self.pbxproj_path)


class InMemoryProjectStore(ProjectConfigurationStore):
    """
    Store holding ``{target: {configuration: {setting: value}}}`` in memory.

    ``open`` hands out a deep copy, ``save`` copies it back and counts the call.
    """

    def __init__(self, targets: Optional[Dict[str, Dict[str, dict]]] = None, present: bool = True):
        self.targets = targets if targets is not None else {}
        self.present = present
        self.save_count = 0

    @property
    def path(self) -> str:
        return "<memory>"

    def exists(self) -> bool:
        return self.present

    def open(self) -> ProjectConfiguration:
        if not self.exists():
            raise NotFoundError(self.path, "Pods project")
        targets = []
        for target_name, configs in copy.deepcopy(self.targets).items():
            targets.append(
                Target(
                    target_name,
                    [BuildConfiguration(name, settings) for name, settings in configs.items()],
                )
            )
        return ProjectConfiguration(targets, path=self.path)

    def save(self, project: ProjectConfiguration):
        self.targets = {
            target.name: {
                config.name: copy.deepcopy(config.build_settings)
                for config in target.build_configurations
            }
            for target in project.targets
        }
        self.save_count += 1
