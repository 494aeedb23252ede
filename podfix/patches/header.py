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
Literal text patch for a generated gRPC-Core header.

Newer clang fails to parse ``Traits::template CheckResultAndRunNext<...>(`` in
``basic_seq.h``; a space after ``::`` is enough to get past it.
"""

import os
from dataclasses import dataclass
from pathlib import Path

HEADER_RELATIVE_PATH = Path("gRPC-Core/src/core/lib/promise/detail/basic_seq.h")
DEFAULT_SEARCH = "Traits::template CheckResultAndRunNext<Wrapped>("
DEFAULT_REPLACE = "Traits:: template CheckResultAndRunNext<Wrapped>("


@dataclass
class HeaderPatchResult:
    path: str
    found: bool = False
    replacements: int = 0
    written: bool = False


class HeaderTextPatcher:
    """Replace one literal substring in a header and write it back."""

    def __init__(
        self,
        path,
        search: str = DEFAULT_SEARCH,
        replace: str = DEFAULT_REPLACE,
        dry_run: bool = False,
    ):
        if not search:
            raise ValueError("search text must not be empty")
        self.path = Path(path)
        self.search = search
        self.replace = replace
        self.dry_run = dry_run

    def run(self) -> HeaderPatchResult:
        result = HeaderPatchResult(path=str(self.path))
        if not os.path.isfile(self.path):
            print(f"ℹ️  Could not find the file at {self.path}, nothing to patch")
            return result
        result.found = True

        with open(self.path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            content = f.read()
        result.replacements = content.count(self.search)
        fixed_content = content.replace(self.search, self.replace)

        if self.dry_run:
            print(f"ℹ️  Dry run: {result.replacements} occurrence(s) would be patched in {self.path.name}")
            return result

        # written even when nothing matched
        with open(self.path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(fixed_content)
        result.written = True

        if result.replacements:
            print(f"✅ Successfully patched the template issue in {self.path.name}")
        else:
            print(f"No occurrences to patch in {self.path.name}, file rewritten unchanged")
        return result
