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
Tests for the project configuration stores.

Run with: python3 -m pytest podfix/xcode
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from podfix.utils.errors import NotFoundError, ParseError
from podfix.xcode.project import (
    InMemoryProjectStore,
    PbxprojStore,
    resolve_pbxproj_path,
)

FIXTURE_PROJECT = Path(__file__).parent / "testdata" / "Pods.xcodeproj"


class TestResolvePath(unittest.TestCase):

    def test_xcodeproj_bundle(self):
        self.assertEqual(
            resolve_pbxproj_path("ios/Pods/Pods.xcodeproj"),
            Path("ios/Pods/Pods.xcodeproj/project.pbxproj"),
        )

    def test_pbxproj_file(self):
        path = FIXTURE_PROJECT / "project.pbxproj"
        self.assertEqual(resolve_pbxproj_path(path), path)


class TestPbxprojStore(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.project_path = Path(self.temp_dir) / "Pods.xcodeproj"
        shutil.copytree(FIXTURE_PROJECT, self.project_path)
        self.store = PbxprojStore(self.project_path)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def read_pbxproj(self):
        with open(self.store.pbxproj_path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def test_open_builds_model(self):
        project = self.store.open()
        self.assertEqual(project.target_names(), ["BoringSSL-GRPC", "gRPC-Core", "abseil"])
        grpc = project.find_target("gRPC-Core")
        self.assertEqual([c.name for c in grpc.build_configurations], ["Debug", "Release"])
        debug = grpc.build_configurations[0]
        self.assertEqual(
            list(debug.build_settings["OTHER_LDFLAGS"]),
            ["$(inherited)", "-G", "-ObjC", "-Gfull"],
        )
        self.assertEqual(grpc.build_configurations[1].build_settings.get("OTHER_CFLAGS"), "-G")
        self.assertIn("PRODUCT_NAME", debug.build_settings)
        self.assertIsNone(project.find_target("missing"))

    def test_assign_and_save(self):
        original = self.read_pbxproj()
        project = self.store.open()
        debug = project.find_target("gRPC-Core").build_configurations[0]
        debug.build_settings["OTHER_LDFLAGS"] = ["$(inherited)", "-ObjC"]
        self.assertEqual(list(debug.build_settings["OTHER_LDFLAGS"]), ["$(inherited)", "-ObjC"])

        self.store.save(project)
        saved = self.read_pbxproj()
        self.assertNotIn('"-Gfull"', saved)
        self.assertEqual(len(original.splitlines()) - 2, len(saved.splitlines()))

        reopened = self.store.open()
        debug = reopened.find_target("gRPC-Core").build_configurations[0]
        self.assertEqual(list(debug.build_settings["OTHER_LDFLAGS"]), ["$(inherited)", "-ObjC"])

    def test_scalar_setting_cannot_be_assigned(self):
        project = self.store.open()
        release = project.find_target("gRPC-Core").build_configurations[1]
        with self.assertRaises(ValueError):
            release.build_settings["OTHER_CFLAGS"] = []

    def test_string_value_rejected(self):
        project = self.store.open()
        debug = project.find_target("gRPC-Core").build_configurations[0]
        with self.assertRaises(TypeError):
            debug.build_settings["OTHER_LDFLAGS"] = "-ObjC"

    def test_missing_project(self):
        store = PbxprojStore(Path(self.temp_dir) / "Missing.xcodeproj")
        self.assertFalse(store.exists())
        with self.assertRaises(NotFoundError) as ctx:
            store.open()
        self.assertIn("Missing.xcodeproj", str(ctx.exception))

    def test_malformed_project(self):
        with open(self.store.pbxproj_path, "w", encoding="utf-8") as f:
            f.write("{ objects = { ")
        with self.assertRaises(ParseError):
            self.store.open()


class TestInMemoryProjectStore(unittest.TestCase):

    def test_open_returns_copy(self):
        store = InMemoryProjectStore({"gRPC-Core": {"Debug": {"OTHER_LDFLAGS": ["-G"]}}})
        project = store.open()
        project.targets[0].build_configurations[0].build_settings["OTHER_LDFLAGS"] = []
        self.assertEqual(store.targets["gRPC-Core"]["Debug"]["OTHER_LDFLAGS"], ["-G"])

    def test_save_copies_back(self):
        store = InMemoryProjectStore({"gRPC-Core": {"Debug": {"OTHER_LDFLAGS": ["-G"]}}})
        project = store.open()
        project.targets[0].build_configurations[0].build_settings["OTHER_LDFLAGS"] = []
        store.save(project)
        self.assertEqual(store.save_count, 1)
        self.assertEqual(store.targets["gRPC-Core"]["Debug"]["OTHER_LDFLAGS"], [])

    def test_absent(self):
        store = InMemoryProjectStore(present=False)
        with self.assertRaises(NotFoundError):
            store.open()


if __name__ == "__main__":
    unittest.main()
