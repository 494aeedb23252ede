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

import sys
from typing import List, Optional

from podfix.patches.flags import ProjectFlagCleaner
from podfix.utils.context.command import CliCommand
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace
from podfix.utils.errors import NotFoundError
from podfix.xcode.project import PbxprojStore


class Flags(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to strip disallowed flags from the Pods project.

        Removes every OTHER_LDFLAGS / OTHER_CFLAGS entry starting with '-G'
        from the gRPC-Core and BoringSSL-GRPC targets, in all build
        configurations. The project is only saved when something changed.

        Examples:
            podfix flags                            # Clean ios/Pods/Pods.xcodeproj
            podfix flags --dry-run                  # Show what would be removed
            podfix flags --pods-dir path/to/Pods    # Use another Pods directory
            podfix flags --target Foo --prefix -W   # Clean other flags
        """

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        parser = self.new_parser()
        self.add_project_arguments(parser)
        self.add_flags_arguments(parser)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report the flags that would be removed without saving",
        )
        args, unknown = parser.parse_known_args(self.input_argv(argv), namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        config = context.load_config(args)
        run_flag_cleaner(config, dry_run=args.dry_run)


def run_flag_cleaner(config, dry_run=False):
    """Run the cleaner for ``config``; exits with status 1 when the project is missing."""
    store = PbxprojStore(config.pods_project)
    cleaner = ProjectFlagCleaner(
        store,
        targets=config.flags.targets,
        settings=config.flags.settings,
        prefix=config.flags.prefix,
        dry_run=dry_run,
    )
    try:
        return cleaner.run()
    except NotFoundError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
