# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Decoding of raw document text (JSON, JSON with comments, YAML)."""

import json
import logging
from typing import Any

import yaml

from ..exceptions import DocumentParseError

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = ('.yaml', '.yml')


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals.

    Newlines inside removed comments are kept so decoder error positions still
    match the original text.
    """
    out = []
    i = 0
    length = len(text)
    in_string = False

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == '\\' and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith('//', i):
            end = text.find('\n', i)
            i = length if end == -1 else end
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            if end == -1:
                raise DocumentParseError("Unterminated block comment")
            out.append('\n' * text.count('\n', i, end))
            i = end + 2
        else:
            out.append(ch)
            i += 1

    return ''.join(out)


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede a closing ``}`` or ``]``."""
    out = []
    in_string = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == '\\' and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ',':
            j = i + 1
            while j < length and text[j] in ' \t\r\n':
                j += 1
            if j >= length or text[j] not in '}]':
                out.append(ch)
        else:
            out.append(ch)
        i += 1

    return ''.join(out)


def load_json_from_string(content: str) -> Any:
    """Load JSON or JSON-with-comments content."""
    try:
        return json.loads(strip_trailing_commas(strip_json_comments(content)))
    except json.JSONDecodeError as exc:
        raise DocumentParseError(f"Invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}")


def load_yaml_from_string(content: str) -> Any:
    """Load YAML content, mapping an empty document to an empty mapping."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"Invalid YAML: {exc}")
    if data is None:
        data = {}
    return data


def parse_document(name: str, content: Any) -> Any:
    """Decode ``content`` according to the extension of ``name``.

    Content that is not text is assumed to be decoded already and is returned
    unchanged.

    Raises:
        DocumentParseError: If the text cannot be decoded.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError as exc:
            raise DocumentParseError(f"Failed to parse {name}: not valid UTF-8 ({exc})")

    if not isinstance(content, str):
        return content

    try:
        if name.lower().endswith(YAML_EXTENSIONS):
            return load_yaml_from_string(content)
        return load_json_from_string(content.lstrip('\ufeff'))
    except DocumentParseError as exc:
        logger.debug(f"Failed to parse {name}: {exc}")
        raise DocumentParseError(f"Failed to parse {name}: {exc}") from exc
