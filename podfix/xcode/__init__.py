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

"""Xcode project file support for podfix."""

from .pbxproj import PBXProjDocument, PlistArray, PlistDict, parse, quote
from .project import (
    BuildConfiguration,
    InMemoryProjectStore,
    PbxprojStore,
    ProjectConfiguration,
    ProjectConfigurationStore,
    Target,
)

__all__ = [
    'BuildConfiguration',
    'InMemoryProjectStore',
    'PBXProjDocument',
    'PbxprojStore',
    'PlistArray',
    'PlistDict',
    'ProjectConfiguration',
    'ProjectConfigurationStore',
    'Target',
    'parse',
    'quote',
]
