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
import importlib
import os
import sys
from typing import List, Optional

from podfix import __version__
from podfix.utils.context.command import CliCommand, find_command_index
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]
PACKAGE_NAME = os.path.basename(SCRIPT_PATH)


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """podfix - post-install patches for CocoaPods native builds

Fixes the gRPC-Core / BoringSSL-GRPC pods so the iOS app builds with
current Xcode. Run it after every 'pod install'.

USAGE:
    podfix <command> [options]

COMMANDS:
    flags       Strip '-G' flags from the Pods project
    header      Patch the gRPC-Core basic_seq.h header
    all         Apply every patch
    check       Check prerequisites without writing anything
    help        Show detailed help information

EXAMPLES:
    podfix all                       # Typical post-install hook
    podfix flags --dry-run           # Preview flag removal
    podfix check --verbose           # Inspect what would change

For more information on a specific command:
    podfix <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if (
                not command.startswith("_")
                and not command.startswith("test_")
                and command.endswith(".py")
            ):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def new_root_parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="podfix",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs="?",
            choices=self.get_command_list(),
        )
        return parser

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        if argv is None:
            argv = sys.argv[1:]
        # Only 'podfix --help' is handled here, 'podfix flags --help' goes to the subcommand
        if len(argv) == 1 and argv[0] in ["--help", "-h"]:
            self.new_root_parser().print_help()
            sys.exit(0)
        if len(argv) == 1 and argv[0] == "--version":
            print(f"podfix {__version__}")
            sys.exit(0)

        parser = self.new_root_parser(add_help=False)
        # options may come before the command, only the command itself is parsed here
        index = find_command_index(argv)
        command_argv = [] if index is None else [argv[index]]
        args = parser.parse_args(command_argv, namespace=CliNameSpace())
        args.argv = list(argv)
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self.new_root_parser().print_help()
            sys.exit(1)

        # get module name
        module_name = f"{PACKAGE_NAME}.commands.{args.subcommand}"
        # get class name
        class_name = args.subcommand.capitalize()
        # import module
        module = importlib.import_module(module_name)
        # get class of module
        klass = getattr(module, class_name)
        # instance class
        sub_cmd = klass()
        # now execute the subcommand
        sub_cmd.exec(context, sub_cmd.cli(args.argv))


def main(argv: Optional[List[str]] = None):
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli(argv))


if __name__ == "__main__":
    main()
