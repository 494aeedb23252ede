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

from podfix.utils.context.command import CliCommand
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace


class Help(CliCommand):
    def description(self) -> str:
        return """Show detailed help information for podfix commands.

This command displays usage information including:
- Command syntax and options
- PODFIX.toml keys
- Environment variables

Use 'podfix <command> --help' for command-specific help.
        """

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        parser = self.new_parser()
        args, unknown = parser.parse_known_args(self.input_argv(argv), namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        print("\n" + "=" * 70)
        print("podfix - post-install patches for CocoaPods native builds")
        print("=" * 70)

        print("\n1. Strip disallowed flags from the Pods project")
        print("\n  podfix flags [options]")
        print("\n  Options:")
        print("    --project <path>       Pods.xcodeproj or project.pbxproj")
        print("    --target <name>        Target to clean (repeatable)")
        print("    --setting <key>        Build setting to clean (repeatable)")
        print("    --prefix <text>        Flag prefix to remove (default: -G)")
        print("    --dry-run              Show what would be removed")
        print("\n  Examples:")
        print("    podfix flags")
        print("    podfix flags --dry-run")

        print("\n2. Patch the gRPC-Core basic_seq.h header")
        print("\n  podfix header [options]")
        print("\n  Options:")
        print("    --header <path>        Header file to patch")
        print("    --dry-run              Count occurrences only")
        print("\n  Examples:")
        print("    podfix header")

        print("\n3. Apply every patch")
        print("\n  podfix all [options]")
        print("\n  Examples:")
        print("    podfix all")
        print("    podfix all --pods-dir ios/Pods")

        print("\n4. Check prerequisites")
        print("\n  podfix check [--verbose]")

        print("\nCommon options:")
        print("    --project-dir <path>   Application root (default: current directory)")
        print("    --config <path>        Explicit PODFIX.toml")
        print("    --pods-dir <path>      Pods directory (default: ios/Pods)")

        print("\nPODFIX.toml:")
        print("    [pods]")
        print('    dir = "ios/Pods"')
        print('    project = "ios/Pods/Pods.xcodeproj"')
        print("    [flags]")
        print('    targets = ["gRPC-Core", "BoringSSL-GRPC"]')
        print('    settings = ["OTHER_LDFLAGS", "OTHER_CFLAGS"]')
        print('    prefix = "-G"')
        print("    [header]")
        print('    path = "ios/Pods/gRPC-Core/src/core/lib/promise/detail/basic_seq.h"')

        print("\nEnvironment variables:")
        print("    PODFIX_PODS_DIR        Overrides [pods] dir")
        print("    ${VAR} / $VAR in PODFIX.toml string values are expanded")
        print("")
