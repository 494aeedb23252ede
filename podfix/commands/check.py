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

import os
import sys
from typing import List, Optional

from podfix.patches.flags import find_prefixed_flags
from podfix.utils.config import PodfixConfig, tomllib
from podfix.utils.context.command import CliCommand
from podfix.utils.context.context import CliContext
from podfix.utils.context.namespace import CliNameSpace
from podfix.utils.context.result import CliResult
from podfix.utils.errors import NotFoundError, ParseError
from podfix.xcode.project import PbxprojStore


class Check(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to check that the patches can run.

        Verifies the TOML parser, the configuration, the Pods project and the
        gRPC-Core header, and reports how much each patch would change.
        Nothing is written.

        Examples:
            podfix check
            podfix check --verbose
            podfix check --pods-dir path/to/Pods
        """

    def cli(self, argv: Optional[List[str]] = None) -> CliNameSpace:
        parser = self.new_parser()
        self.add_project_arguments(parser)
        self.add_flags_arguments(parser)
        self.add_header_arguments(parser)
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed information",
        )
        args, unknown = parser.parse_known_args(self.input_argv(argv), namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        print("🔍 Checking podfix prerequisites...")

        checker = PrerequisiteChecker(verbose=args.verbose)
        config = checker.check_config(context, args).get_value()
        if config is not None:
            checker.check_project(config)
            checker.check_header(config)

        checker.print_summary()
        if checker.errors:
            sys.exit(1)


class PrerequisiteChecker:
    def __init__(self, verbose=False):
        self.verbose = verbose
        self.results = {}
        self.warnings = []
        self.errors = []

    def print_ok(self, msg):
        """Print success message"""
        print(f"  ✅ {msg}")

    def print_error(self, msg):
        """Print error message"""
        print(f"  ❌ {msg}")
        self.errors.append(msg)

    def print_warning(self, msg):
        """Print warning message"""
        print(f"  ⚠️  {msg}")
        self.warnings.append(msg)

    def print_info(self, msg):
        """Print info message"""
        print(f"  ℹ️  {msg}")

    def print_section(self, title):
        """Print section header"""
        print(f"\n{'='*60}")
        print(f"  {title}")
        print(f"{'='*60}")

    def record(self, name, result: CliResult) -> CliResult:
        self.results[name] = result
        for warning in result.warnings:
            self.print_warning(warning)
        if result.is_failure():
            self.print_error(result.get_error())
        return result

    def check_config(self, context: CliContext, args) -> CliResult:
        """Check TOML support and load the configuration"""
        self.print_section("Configuration")
        self.print_ok(f"TOML parser: {tomllib.__name__}")
        try:
            config = context.load_config(args)
        except (NotFoundError, ParseError) as e:
            return self.record("config", CliResult.fail(str(e)))

        warnings = []
        if config.config_path is None:
            self.print_info("PODFIX.toml not found, using built-in defaults")
        else:
            self.print_ok(f"Configuration: {config.config_path}")
        if not os.path.isdir(config.pods_dir):
            warnings.append(f"Pods directory not found: {config.pods_dir} (run 'pod install' first)")
        if self.verbose:
            self.print_info(f"Pods project: {config.pods_project}")
            self.print_info(f"Header: {config.header.path}")
            self.print_info(f"Targets: {', '.join(config.flags.targets)}")
            self.print_info(f"Settings: {', '.join(config.flags.settings)}")
        return self.record("config", CliResult.ok(config, warnings))

    def check_project(self, config: PodfixConfig) -> CliResult:
        """Check the Pods project can be parsed and count pending flag removals"""
        self.print_section("Pods project")
        store = PbxprojStore(config.pods_project)
        try:
            project = store.open()
        except (NotFoundError, ParseError) as e:
            return self.record("project", CliResult.fail(str(e)))
        self.print_ok(f"Parsed {store.pbxproj_path} ({len(project.targets)} targets)")

        warnings = []
        names = project.target_names()
        for target in config.flags.targets:
            if target in names:
                self.print_ok(f"Target found: {target}")
            else:
                warnings.append(f"Target not found: {target}")

        prefix = config.flags.prefix
        pending = 0
        for target, build_config, setting, cleaned in find_prefixed_flags(
            project, config.flags.targets, config.flags.settings, prefix
        ):
            flags = build_config.build_settings[setting]
            count = len(flags) - len(cleaned)
            pending += count
            if self.verbose:
                self.print_info(f"{target.name} / {build_config.name}: {count} '{prefix}' flag(s) in {setting}")

        if pending:
            self.print_info(f"{pending} '{prefix}' flag(s) pending removal, run 'podfix flags'")
        else:
            self.print_ok(f"No '{prefix}' flags left")
        return self.record("project", CliResult.ok(pending, warnings))

    def check_header(self, config: PodfixConfig) -> CliResult:
        """Check the header exists and count pending replacements"""
        self.print_section("gRPC-Core header")
        path = config.header.path
        if not os.path.isfile(path):
            return self.record("header", CliResult.ok(0, [f"Header not found: {path}"]))

        with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            content = f.read()
        pending = content.count(config.header.search)
        self.print_ok(f"Header found: {path}")
        if pending:
            self.print_info(f"{pending} occurrence(s) pending, run 'podfix header'")
        else:
            self.print_ok("Header already patched")
        return self.record("header", CliResult.ok(pending))

    def print_summary(self):
        """Print summary of check results"""
        self.print_section("Summary")

        if not self.results:
            self.print_info("No checks performed")
            return

        passed = sum(1 for result in self.results.values() if result.is_success())
        print(f"  {passed}/{len(self.results)} checks passed")
        if self.warnings:
            print(f"  {len(self.warnings)} warning(s)")
        if self.errors:
            print(f"  {len(self.errors)} error(s):")
            for error in self.errors:
                print(f"    - {error}")
        else:
            print("  ✅ Ready to patch")
