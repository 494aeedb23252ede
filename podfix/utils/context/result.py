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


# Outcome of a single check: a value on success, an error message otherwise
class CliResult:
    def __init__(self, value=None, error: Optional[str] = None, warnings: Optional[List[str]] = None):
        self.value = value
        self.error = error
        self.warnings = list(warnings or [])

    @classmethod
    def ok(cls, value=None, warnings=None) -> "CliResult":
        return cls(value=value, warnings=warnings)

    @classmethod
    def fail(cls, error: str) -> "CliResult":
        return cls(error=error)

    def is_success(self):
        return self.error is None

    def is_failure(self):
        return self.error is not None

    def get_value(self, default=None):
        if self.is_success():
            return self.value
        else:
            return default

    def get_error(self, default=None):
        if self.is_failure():
            return self.error
        else:
            return default
