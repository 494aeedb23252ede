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

from podfix.patches.header import HeaderTextPatcher
from podfix.utils.context.command import CliCommand
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace


class Header(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to patch the gRPC-Core basic_seq.h header.

        Rewrites 'Traits::template CheckResultAndRunNext<Wrapped>(' as
        'Traits:: template CheckResultAndRunNext<Wrapped>(' so the header
        compiles with current clang. A missing header is not an error.

        Examples:
            podfix header                 # Patch the header under ios/Pods
            podfix header --dry-run       # Count occurrences only
            podfix header --header path/to/basic_seq.h
        """

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        parser = self.new_parser()
        self.add_project_arguments(parser)
        self.add_header_arguments(parser)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Count occurrences without rewriting the file",
        )
        args, unknown = parser.parse_known_args(self.input_argv(argv), namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        config = context.load_config(args)
        run_header_patcher(config, dry_run=args.dry_run)


def run_header_patcher(config, dry_run=False):
    patcher = HeaderTextPatcher(
        config.header.path,
        search=config.header.search,
        replace=config.header.replace,
        dry_run=dry_run,
    )
    return patcher.run()
