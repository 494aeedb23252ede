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
Reader/writer for Xcode ``project.pbxproj`` files.

The file is an OpenStep-style ASCII property list. Parsing keeps the source
span of every array so that edits are spliced into the original text: the
rest of the document (comments, ordering, quoting, line endings) is written
back untouched.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from podfix.utils.errors import ParseError

# Characters Xcode writes without quotes
UNQUOTED_PATTERN = re.compile(r"[A-Za-z0-9_$+/:.\-]+")

TARGET_ISAS = ("PBXNativeTarget", "PBXAggregateTarget", "PBXLegacyTarget")

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

_QUOTE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


class PlistDict(dict):
    """Dictionary node remembering where it sits in the source text."""

    def __init__(self, start: int = 0, end: int = 0):
        super().__init__()
        self.start = start
        self.end = end


class PlistArray(list):
    """
    Array node remembering its source span and the source text of each item.

    ``start``/``end`` always refer to the text the document was parsed from,
    so a replacement array keeps the span of the array it replaces.
    """

    def __init__(self, items=(), start: int = 0, end: int = 0, sources=None, multiline=True):
        super().__init__(items)
        self.start = start
        self.end = end
        self.sources = list(sources) if sources is not None else [quote(x) for x in self]
        self.multiline = multiline


def quote(value) -> str:
    """Render a string the way Xcode writes it."""
    value = str(value)
    if value and UNQUOTED_PATTERN.fullmatch(value) and "//" not in value:
        return value
    escaped = "".join(_QUOTE_ESCAPES.get(c, c) for c in value)
    return f'"{escaped}"'


class _Parser:
    def __init__(self, text: str, path: Optional[str] = None):
        self.text = text
        self.path = path
        self.pos = 0
        self.length = len(text)

    def error(self, message: str, pos: Optional[int] = None):
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, min(pos, self.length)) + 1
        raise ParseError(message, path=self.path, line=line)

    def skip(self):
        text = self.text
        while self.pos < self.length:
            c = text[self.pos]
            if c.isspace():
                self.pos += 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    self.error("unterminated comment")
                self.pos = end + 2
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = self.length if end < 0 else end + 1
            else:
                break

    def expect(self, char: str):
        self.skip()
        if self.pos >= self.length or self.text[self.pos] != char:
            found = self.text[self.pos] if self.pos < self.length else "end of file"
            self.error(f"expected '{char}', found '{found}'")
        self.pos += 1

    def parse_document(self) -> PlistDict:
        self.skip()
        if self.pos >= self.length:
            self.error("empty document")
        if self.text[self.pos] != "{":
            self.error("top-level object must be a dictionary")
        root = self.parse_value()
        self.skip()
        if self.pos != self.length:
            self.error("unexpected content after top-level dictionary")
        return root

    def parse_value(self):
        self.skip()
        if self.pos >= self.length:
            self.error("unexpected end of file")
        c = self.text[self.pos]
        if c == "{":
            return self.parse_dict()
        if c == "(":
            return self.parse_array()
        if c == "<":
            return self.parse_data()
        return self.parse_string()

    def parse_dict(self) -> PlistDict:
        result = PlistDict(start=self.pos)
        self.pos += 1
        while True:
            self.skip()
            if self.pos >= self.length:
                self.error("unterminated dictionary", result.start)
            if self.text[self.pos] == "}":
                self.pos += 1
                result.end = self.pos
                return result
            key = self.parse_string()
            self.expect("=")
            value = self.parse_value()
            self.expect(";")
            result[key] = value

    def parse_array(self) -> PlistArray:
        start = self.pos
        self.pos += 1
        items = []
        sources = []
        while True:
            self.skip()
            if self.pos >= self.length:
                self.error("unterminated array", start)
            if self.text[self.pos] == ")":
                self.pos += 1
                break
            item_start = self.pos
            items.append(self.parse_value())
            sources.append(self.text[item_start:self.pos])
            self.skip()
            if self.pos < self.length and self.text[self.pos] == ",":
                self.pos += 1
            elif self.pos < self.length and self.text[self.pos] == ")":
                self.pos += 1
                break
            else:
                self.error("expected ',' or ')' in array")
        multiline = "\n" in self.text[start:self.pos]
        return PlistArray(items, start, self.pos, sources, multiline)

    def parse_data(self) -> bytes:
        start = self.pos
        end = self.text.find(">", self.pos)
        if end < 0:
            self.error("unterminated data block")
        digits = re.sub(r"\s+", "", self.text[start + 1:end])
        try:
            value = bytes.fromhex(digits)
        except ValueError:
            self.error("invalid hex data", start)
        self.pos = end + 1
        return value

    def parse_string(self) -> str:
        self.skip()
        if self.pos >= self.length:
            self.error("unexpected end of file")
        c = self.text[self.pos]
        if c in ('"', "'"):
            return self.parse_quoted(c)
        match = UNQUOTED_PATTERN.match(self.text, self.pos)
        if not match:
            self.error(f"unexpected character '{c}'")
        self.pos = match.end()
        return match.group(0)

    def parse_quoted(self, quote_char: str) -> str:
        start = self.pos
        self.pos += 1
        text = self.text
        chunks = []
        while True:
            if self.pos >= self.length:
                self.error("unterminated string", start)
            c = text[self.pos]
            if c == quote_char:
                self.pos += 1
                return "".join(chunks)
            if c != "\\":
                chunks.append(c)
                self.pos += 1
                continue
            self.pos += 1
            if self.pos >= self.length:
                self.error("unterminated string", start)
            esc = text[self.pos]
            if esc in _ESCAPES:
                chunks.append(_ESCAPES[esc])
                self.pos += 1
            elif esc == "U":
                digits = text[self.pos + 1:self.pos + 5]
                if not re.fullmatch(r"[0-9A-Fa-f]{4}", digits):
                    self.error("invalid \\U escape")
                chunks.append(chr(int(digits, 16)))
                self.pos += 5
            elif esc in "01234567":
                match = re.match(r"[0-7]{1,3}", text[self.pos:self.pos + 3])
                chunks.append(chr(int(match.group(0), 8)))
                self.pos += len(match.group(0))
            else:
                chunks.append(esc)
                self.pos += 1


def parse(text: str, path: Optional[str] = None) -> PlistDict:
    """Parse pbxproj text into ``PlistDict``/``PlistArray``/``str`` nodes."""
    return _Parser(text, path).parse_document()


class PBXProjDocument:
    """A parsed ``project.pbxproj`` together with its pending edits."""

    def __init__(self, text: str, path: Optional[str] = None):
        self.text = text
        self.path = str(path) if path is not None else None
        self.root = parse(text, self.path)
        objects = self.root.get("objects")
        if not isinstance(objects, PlistDict):
            raise ParseError("missing 'objects' dictionary", path=self.path)
        self.objects: Dict[str, PlistDict] = objects
        # array start offset -> (array end offset, replacement text)
        self._edits: Dict[int, Tuple[int, str]] = {}

    @classmethod
    def load(cls, path) -> "PBXProjDocument":
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
        return cls(text, path)

    @property
    def modified(self) -> bool:
        return bool(self._edits)

    def get_object(self, object_id) -> Optional[PlistDict]:
        if object_id is None:
            return None
        if not isinstance(object_id, str):
            raise ParseError(
                f"object reference must be a string, found {type(object_id).__name__}",
                path=self.path,
            )
        obj = self.objects.get(object_id)
        return obj if isinstance(obj, PlistDict) else None

    def targets(self) -> List[Tuple[str, PlistDict]]:
        """All target objects, in document order."""
        return [
            (object_id, obj)
            for object_id, obj in self.objects.items()
            if isinstance(obj, PlistDict) and obj.get("isa") in TARGET_ISAS
        ]

    def build_configurations(self, target: PlistDict) -> List[PlistDict]:
        """The ``XCBuildConfiguration`` objects of a target."""
        config_list = self.get_object(target.get("buildConfigurationList"))
        if config_list is None:
            return []
        config_ids = config_list.get("buildConfigurations", [])
        if not isinstance(config_ids, list):
            raise ParseError("buildConfigurations must be a list", path=self.path)
        configs = []
        for config_id in config_ids:
            config = self.get_object(config_id)
            if config is not None:
                configs.append(config)
        return configs

    def replace_array(self, array: PlistArray, values) -> PlistArray:
        """
        Replace ``array`` with ``values`` and return the new node.

        Items equal to an original item keep their original source text.
        """
        values = list(values)
        available: Dict[str, List[str]] = {}
        for item, source in zip(array, array.sources):
            if isinstance(item, str):
                available.setdefault(item, []).append(source)
        sources = []
        for value in values:
            pool = available.get(value) if isinstance(value, str) else None
            sources.append(pool.pop(0) if pool else quote(value))

        replacement = PlistArray(values, array.start, array.end, sources, array.multiline)
        self._edits[array.start] = (array.end, self._render_array(replacement))
        return replacement

    def _render_array(self, array: PlistArray) -> str:
        if not array.multiline:
            return "(" + "".join(f"{source}, " for source in array.sources) + ")"
        line_start = self.text.rfind("\n", 0, array.start) + 1
        line = self.text[line_start:array.start]
        indent = line[:len(line) - len(line.lstrip(" \t"))]
        newline = "\r\n" if "\r\n" in self.text else "\n"
        body = "".join(f"{indent}\t{source},{newline}" for source in array.sources)
        return f"({newline}{body}{indent})"

    def serialize(self) -> str:
        text = self.text
        for start in sorted(self._edits, reverse=True):
            end, replacement = self._edits[start]
            text = text[:start] + replacement + text[end:]
        return text

    def save(self, path=None):
        path = Path(path or self.path)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(self.serialize())
