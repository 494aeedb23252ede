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
from typing import Optional

from podfix.utils.config import PodfixConfig


# This context data class to save the context of the command
class CliContext:
    def __init__(self, project_dir: Optional[str] = None):
        self.project_dir = project_dir or os.getcwd()
        self.config: Optional[PodfixConfig] = None

    def load_config(self, args) -> PodfixConfig:
        """Load PODFIX.toml for the command and apply its command line overrides."""
        project_dir = getattr(args, "project_dir", None) or self.project_dir
        config = PodfixConfig.load(project_dir, getattr(args, "config", None))
        config.apply_overrides(
            pods_dir=getattr(args, "pods_dir", None),
            project=getattr(args, "project", None),
            header=getattr(args, "header", None),
            targets=getattr(args, "target", None),
            settings=getattr(args, "setting", None),
            prefix=getattr(args, "prefix", None),
        )
        self.config = config
        return config
