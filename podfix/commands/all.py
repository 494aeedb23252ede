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

from typing import List, Optional

from podfix.commands.flags import run_flag_cleaner
from podfix.commands.header import run_header_patcher
from podfix.utils.context.command import CliCommand
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace


class All(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to apply every patch, as a post-install hook would.

        Runs 'podfix flags' and then 'podfix header'. A missing Pods project
        stops the run with status 1 before the header is touched.

        Examples:
            podfix all
            podfix all --dry-run
            podfix all --pods-dir path/to/Pods
        """

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        parser = self.new_parser()
        self.add_project_arguments(parser)
        self.add_flags_arguments(parser)
        self.add_header_arguments(parser)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without writing any file",
        )
        args, unknown = parser.parse_known_args(self.input_argv(argv), namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        config = context.load_config(args)
        print(f"Using configuration from {config.describe_source()}\n")

        print("[1/2] Pods project flags")
        run_flag_cleaner(config, dry_run=args.dry_run)

        print("\n[2/2] gRPC-Core header")
        run_header_patcher(config, dry_run=args.dry_run)
