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
Tests for the project flag cleaner.

Run with: python3 -m pytest podfix/patches
"""

import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from podfix.patches.flags import (
    DEFAULT_PREFIX,
    ProjectFlagCleaner,
    find_prefixed_flags,
    strip_prefixed,
)
from podfix.utils.errors import NotFoundError, ParseError
from podfix.xcode.project import InMemoryProjectStore, PbxprojStore

FIXTURE_PROJECT = Path(__file__).parent.parent / "xcode" / "testdata" / "Pods.xcodeproj"


def make_store():
    return InMemoryProjectStore({
        "gRPC-Core": {
            "Debug": {
                "OTHER_LDFLAGS": ["$(inherited)", "-G", "-ObjC", "-Gfull"],
                "OTHER_CFLAGS": ["-DNDEBUG", "-G0"],
            },
            "Release": {
                "OTHER_LDFLAGS": ["$(inherited)", "-ObjC"],
                "OTHER_CFLAGS": "-G",
            },
        },
        "BoringSSL-GRPC": {
            "Debug": {"OTHER_CFLAGS": ["-G", "-DOPENSSL_NO_ASM"]},
        },
        "abseil": {
            "Debug": {"OTHER_LDFLAGS": ["-G"]},
        },
    })


def run_quietly(cleaner):
    output = io.StringIO()
    with redirect_stdout(output):
        report = cleaner.run()
    return report, output.getvalue()


class TestStripPrefixed(unittest.TestCase):

    def test_keeps_order(self):
        flags = ["-a", "-Gx", "-b", "-G", "-c"]
        self.assertEqual(strip_prefixed(flags, "-G"), ["-a", "-b", "-c"])

    def test_idempotent(self):
        flags = ["-G", "-ObjC", "-Gfull", "$(inherited)"]
        once = strip_prefixed(flags, "-G")
        self.assertEqual(strip_prefixed(once, "-G"), once)

    def test_uses_string_form(self):
        self.assertEqual(strip_prefixed([1, "-G1"], "-G"), [1])

    def test_empty(self):
        self.assertEqual(strip_prefixed([], DEFAULT_PREFIX), [])


class TestProjectFlagCleaner(unittest.TestCase):
    """Cleaner behavior against the in-memory store."""

    def test_removes_prefixed_flags(self):
        store = make_store()
        report, output = run_quietly(ProjectFlagCleaner(store))

        self.assertTrue(report.modified)
        self.assertTrue(report.saved)
        self.assertEqual(store.save_count, 1)
        grpc = store.targets["gRPC-Core"]
        self.assertEqual(grpc["Debug"]["OTHER_LDFLAGS"], ["$(inherited)", "-ObjC"])
        self.assertEqual(grpc["Debug"]["OTHER_CFLAGS"], ["-DNDEBUG"])
        self.assertEqual(grpc["Release"]["OTHER_CFLAGS"], "-G")
        self.assertEqual(
            store.targets["BoringSSL-GRPC"]["Debug"]["OTHER_CFLAGS"], ["-DOPENSSL_NO_ASM"]
        )
        # other targets are left alone
        self.assertEqual(store.targets["abseil"]["Debug"]["OTHER_LDFLAGS"], ["-G"])

        self.assertEqual(
            [(c.target, c.setting, c.configuration) for c in report.changes],
            [
                ("gRPC-Core", "OTHER_LDFLAGS", "Debug"),
                ("gRPC-Core", "OTHER_CFLAGS", "Debug"),
                ("BoringSSL-GRPC", "OTHER_CFLAGS", "Debug"),
            ],
        )
        self.assertEqual(report.changes[0].removed, ["-G", "-Gfull"])
        self.assertEqual(report.removed_count, 4)

        self.assertIn("Processing target: gRPC-Core", output)
        self.assertIn("Processing target: BoringSSL-GRPC", output)
        self.assertIn("  Fixed OTHER_LDFLAGS in Debug configuration", output)
        self.assertIn("Successfully fixed '-G' flag issues", output)

    def test_second_run_is_noop(self):
        store = make_store()
        run_quietly(ProjectFlagCleaner(store))
        after_first = store.targets

        report, output = run_quietly(ProjectFlagCleaner(store))
        self.assertFalse(report.modified)
        self.assertFalse(report.saved)
        self.assertEqual(store.save_count, 1)
        self.assertEqual(store.targets, after_first)
        self.assertIn("No '-G' flag issues found in the project.", output)

    def test_nothing_to_remove_does_not_save(self):
        store = InMemoryProjectStore({"gRPC-Core": {"Debug": {"OTHER_LDFLAGS": ["-ObjC"]}}})
        report, _ = run_quietly(ProjectFlagCleaner(store))
        self.assertFalse(report.modified)
        self.assertEqual(store.save_count, 0)
        self.assertEqual(report.targets_seen, ["gRPC-Core"])

    def test_dry_run_does_not_save(self):
        store = make_store()
        report, output = run_quietly(ProjectFlagCleaner(store, dry_run=True))
        self.assertTrue(report.modified)
        self.assertFalse(report.saved)
        self.assertEqual(store.save_count, 0)
        self.assertEqual(store.targets["gRPC-Core"]["Debug"]["OTHER_CFLAGS"], ["-DNDEBUG", "-G0"])
        self.assertIn("Would fix OTHER_CFLAGS in Debug configuration", output)

    def test_custom_targets_settings_and_prefix(self):
        store = InMemoryProjectStore({
            "abseil": {"Debug": {"OTHER_LDFLAGS": ["-G"], "WARNING_CFLAGS": ["-Wall", "-Wno-x"]}},
        })
        cleaner = ProjectFlagCleaner(
            store, targets=["abseil"], settings=["WARNING_CFLAGS"], prefix="-Wno"
        )
        run_quietly(cleaner)
        settings = store.targets["abseil"]["Debug"]
        self.assertEqual(settings["WARNING_CFLAGS"], ["-Wall"])
        self.assertEqual(settings["OTHER_LDFLAGS"], ["-G"])

    def test_missing_project(self):
        cleaner = ProjectFlagCleaner(InMemoryProjectStore(present=False))
        with self.assertRaises(NotFoundError):
            run_quietly(cleaner)

    def test_find_prefixed_flags(self):
        project = make_store().open()
        found = [
            (target.name, config.name, setting, cleaned)
            for target, config, setting, cleaned in find_prefixed_flags(project)
        ]
        self.assertEqual(
            found,
            [
                ("gRPC-Core", "Debug", "OTHER_LDFLAGS", ["$(inherited)", "-ObjC"]),
                ("gRPC-Core", "Debug", "OTHER_CFLAGS", ["-DNDEBUG"]),
                ("BoringSSL-GRPC", "Debug", "OTHER_CFLAGS", ["-DOPENSSL_NO_ASM"]),
            ],
        )


class TestProjectFlagCleanerOnPbxproj(unittest.TestCase):
    """Cleaner behavior against a real project.pbxproj."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.project_path = Path(self.temp_dir) / "Pods.xcodeproj"
        shutil.copytree(FIXTURE_PROJECT, self.project_path)
        self.pbxproj = self.project_path / "project.pbxproj"

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def read(self):
        with open(self.pbxproj, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def test_only_edited_entries_change(self):
        original = self.read()
        report, _ = run_quietly(ProjectFlagCleaner(PbxprojStore(self.project_path)))
        self.assertTrue(report.saved)

        lines = original.splitlines(keepends=True)
        lines.remove('\t\t\t\t\t"-GCC_WARN_INHIBIT_ALL_WARNINGS",\n')
        lines.remove('\t\t\t\t\t"-Gfull",\n')
        # first '"-G",' belongs to gRPC-Core, abseil's must stay
        lines.remove('\t\t\t\t\t"-G",\n')
        expected = "".join(lines).replace(
            'OTHER_CFLAGS = ("-G", "-DOPENSSL_NO_ASM", );',
            'OTHER_CFLAGS = ("-DOPENSSL_NO_ASM", );',
        )
        self.assertEqual(self.read(), expected)

    def test_second_run_leaves_file_untouched(self):
        run_quietly(ProjectFlagCleaner(PbxprojStore(self.project_path)))
        cleaned = self.read()
        mtime = self.pbxproj.stat().st_mtime_ns

        report, _ = run_quietly(ProjectFlagCleaner(PbxprojStore(self.project_path)))
        self.assertFalse(report.saved)
        self.assertEqual(self.read(), cleaned)
        self.assertEqual(self.pbxproj.stat().st_mtime_ns, mtime)

    def test_no_matches_leaves_file_untouched(self):
        original = self.read()
        cleaner = ProjectFlagCleaner(PbxprojStore(self.project_path), prefix="-Xnothing")
        report, _ = run_quietly(cleaner)
        self.assertFalse(report.saved)
        self.assertEqual(self.read(), original)

    def test_malformed_project_propagates(self):
        with open(self.pbxproj, "w", encoding="utf-8") as f:
            f.write("{ objects = {")
        with self.assertRaises(ParseError):
            run_quietly(ProjectFlagCleaner(PbxprojStore(self.project_path)))

    def test_malformed_object_graph_propagates(self):
        original = self.read()
        broken = original.replace(
            "buildConfigurationList = C2000000000000000000000A "
            '/* Build configuration list for PBXNativeTarget "gRPC-Core" */;',
            "buildConfigurationList = { a = b; };",
        )
        self.assertNotEqual(broken, original)
        with open(self.pbxproj, "w", encoding="utf-8", newline="") as f:
            f.write(broken)
        with self.assertRaises(ParseError):
            run_quietly(ProjectFlagCleaner(PbxprojStore(self.project_path)))
        self.assertEqual(self.read(), broken)


if __name__ == "__main__":
    unittest.main()
