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

import argparse
import sys
from abc import ABC, abstractmethod
from typing import List, Optional

from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace

# Options that take a separate value, so the value is never mistaken for the command
VALUE_OPTIONS = (
    "--project-dir",
    "--config",
    "--pods-dir",
    "--project",
    "--target",
    "--setting",
    "--prefix",
    "--header",
)


def find_command_index(argv: List[str]) -> Optional[int]:
    """Index of the first positional argument in ``argv``, skipping option values."""
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            return i + 1 if i + 1 < len(argv) else None
        if arg.startswith("-"):
            i += 2 if arg in VALUE_OPTIONS else 1
            continue
        return i
    return None


# Base class of every podfix subcommand
class CliCommand(ABC):
    @abstractmethod
    def description(self) -> str:
        pass

    @abstractmethod
    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        pass

    @abstractmethod
    def exec(self, context: CliContext, args: CliNameSpace):
        pass

    def command_name(self) -> str:
        return self.__class__.__name__.lower()

    def input_argv(self, argv: Optional[List[str]] = None) -> List[str]:
        """Arguments meant for this subcommand, without the subcommand name."""
        if argv is None:
            argv = sys.argv[1:]
        argv = list(argv)
        index = find_command_index(argv)
        if index is not None and argv[index] == self.command_name():
            del argv[index]
        return argv

    def new_parser(self) -> argparse.ArgumentParser:
        return argparse.ArgumentParser(
            prog=f"podfix {self.command_name()}",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )

    def add_project_arguments(self, parser: argparse.ArgumentParser):
        """Options shared by every command that locates the Pods directory."""
        parser.add_argument(
            "--project-dir",
            type=str,
            default=None,
            help="Application root holding PODFIX.toml (default: current directory)",
        )
        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help="Explicit path to a PODFIX.toml file",
        )
        parser.add_argument(
            "--pods-dir",
            type=str,
            default=None,
            help="CocoaPods Pods directory (default: ios/Pods)",
        )

    def add_flags_arguments(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--project",
            type=str,
            default=None,
            help="Pods.xcodeproj (or its project.pbxproj) to clean",
        )
        parser.add_argument(
            "--target",
            action="append",
            default=None,
            help="Target to clean (can be used multiple times)",
        )
        parser.add_argument(
            "--setting",
            action="append",
            default=None,
            help="Build setting to clean (can be used multiple times)",
        )
        parser.add_argument(
            "--prefix",
            type=str,
            default=None,
            help="Flags starting with this prefix are removed (default: -G)",
        )

    def add_header_arguments(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--header",
            type=str,
            default=None,
            help="Header file to patch",
        )
