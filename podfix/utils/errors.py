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

"""Error types raised by podfix."""

from typing import Optional


class PodfixError(Exception):
    """Base class for podfix errors."""


class NotFoundError(PodfixError):
    """A required input file does not exist."""

    def __init__(self, path, what: str = "file"):
        self.path = str(path)
        self.what = what
        super().__init__(f"Could not find {what} at {self.path}")


class ParseError(PodfixError):
    """A configuration or project document is malformed."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        location = self.path or "<string>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
