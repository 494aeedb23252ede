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
Strip disallowed flags from targets of the generated Pods project.

gRPC-Core and BoringSSL-GRPC ship ``-G`` options in OTHER_CFLAGS and
OTHER_LDFLAGS that Xcode's clang rejects for arm64 builds.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from podfix.xcode.project import (
    BuildConfiguration,
    ProjectConfiguration,
    ProjectConfigurationStore,
    Target,
)

DEFAULT_TARGETS = ("gRPC-Core", "BoringSSL-GRPC")
DEFAULT_SETTINGS = ("OTHER_LDFLAGS", "OTHER_CFLAGS")
DEFAULT_PREFIX = "-G"


def strip_prefixed(flags: Sequence, prefix: str) -> list:
    """Drop every flag whose string form starts with ``prefix``, keeping order."""
    return [flag for flag in flags if not str(flag).startswith(prefix)]


@dataclass
class FlagChange:
    """Entries removed from one setting of one configuration."""
    target: str
    setting: str
    configuration: str
    removed: List[str] = field(default_factory=list)
    remaining: List[str] = field(default_factory=list)


@dataclass
class CleanReport:
    path: str
    prefix: str
    changes: List[FlagChange] = field(default_factory=list)
    targets_seen: List[str] = field(default_factory=list)
    saved: bool = False

    @property
    def modified(self) -> bool:
        return bool(self.changes)

    @property
    def removed_count(self) -> int:
        return sum(len(change.removed) for change in self.changes)


def find_prefixed_flags(
    project: ProjectConfiguration,
    targets: Sequence[str] = DEFAULT_TARGETS,
    settings: Sequence[str] = DEFAULT_SETTINGS,
    prefix: str = DEFAULT_PREFIX,
) -> Iterator[Tuple[Target, BuildConfiguration, str, list]]:
    """
    Yield ``(target, configuration, setting, cleaned)`` for every list setting
    that holds at least one prefixed flag.
    """
    for target in project.targets:
        if target.name not in targets:
            continue
        for config in target.build_configurations:
            for setting in settings:
                flags = config.build_settings.get(setting)
                # scalar values are left alone
                if not isinstance(flags, list):
                    continue
                cleaned = strip_prefixed(flags, prefix)
                if len(cleaned) != len(flags):
                    yield target, config, setting, cleaned


class ProjectFlagCleaner:
    """Remove prefixed flags from selected targets and save when anything changed."""

    def __init__(
        self,
        store: ProjectConfigurationStore,
        targets: Sequence[str] = DEFAULT_TARGETS,
        settings: Sequence[str] = DEFAULT_SETTINGS,
        prefix: str = DEFAULT_PREFIX,
        dry_run: bool = False,
    ):
        self.store = store
        self.targets = tuple(targets)
        self.settings = tuple(settings)
        self.prefix = prefix
        self.dry_run = dry_run

    def run(self) -> CleanReport:
        """
        Clean the project held by the store.

        Raises:
            NotFoundError: the project does not exist; nothing is read.
            ParseError: the project file is malformed.
        """
        project = self.store.open()
        report = CleanReport(path=self.store.path, prefix=self.prefix)

        for target in project.targets:
            if target.name not in self.targets:
                continue
            print(f"Processing target: {target.name}")
            report.targets_seen.append(target.name)

            for config in target.build_configurations:
                for setting in self.settings:
                    change = self._clean_setting(target, config, setting)
                    if change is None:
                        continue
                    report.changes.append(change)
                    verb = "Would fix" if self.dry_run else "Fixed"
                    print(f"  {verb} {setting} in {config.name} configuration")

        if report.modified and not self.dry_run:
            self.store.save(project)
            report.saved = True
            print(f"✅ Successfully fixed '{self.prefix}' flag issues in {self.store.path}")
        elif report.modified:
            print(
                f"ℹ️  Dry run: {report.removed_count} '{self.prefix}' flag(s) would be "
                f"removed from {self.store.path}"
            )
        else:
            print(f"No '{self.prefix}' flag issues found in the project.")
        return report

    def _clean_setting(self, target: Target, config: BuildConfiguration, setting: str):
        flags = config.build_settings.get(setting)
        if not isinstance(flags, list):
            return None
        cleaned = strip_prefixed(flags, self.prefix)
        if len(cleaned) == len(flags):
            return None
        removed = [str(flag) for flag in flags if str(flag).startswith(self.prefix)]
        if not self.dry_run:
            config.build_settings[setting] = cleaned
        return FlagChange(
            target=target.name,
            setting=setting,
            configuration=config.name,
            removed=removed,
            remaining=[str(flag) for flag in cleaned],
        )
