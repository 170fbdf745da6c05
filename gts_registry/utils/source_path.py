"""Dot/bracket source paths recorded for GTS references.

A source path locates a value inside an entity's content, e.g. ``contact.gtsIid``
or ``allOf[0].examples[1].id``. The literal ``root`` denotes the content itself.
"""

import re
from typing import Iterable, Union

ROOT_SOURCE_PATH = "root"

_INDEX_RE = re.compile(r"\[(\d+)\]")
# "examples" at the root or directly under a combinator branch is documentation,
# "properties.examples" is a real property named "examples"
_COMBINATOR_EXAMPLES_RE = re.compile(r"(?:^|(?:allOf|anyOf|oneOf)\[\d+\]\.)examples(?:\[|$|\.)")
_ROOT_EXAMPLES_RE = re.compile(r"^examples(?:\[|$|\.)")


def join_source_path(parent: str, key: Union[str, int]) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    if not parent:
        return key
    return f"{parent}.{key}"


def build_source_path(tokens: Iterable[Union[str, int]]) -> str:
    path = ""
    for token in tokens:
        path = join_source_path(path, token)
    return path or ROOT_SOURCE_PATH


def is_in_examples(source_path: str) -> bool:
    """True when the path points into an illustrative ``examples`` region."""
    return bool(_COMBINATOR_EXAMPLES_RE.search(source_path) or _ROOT_EXAMPLES_RE.search(source_path))


def to_instance_path(source_path: str) -> str:
    """Convert a dot/bracket source path into a slash-delimited pointer.

    ``contact.gtsIid`` -> ``/contact/gtsIid``, ``items[2].id`` -> ``/items/2/id``,
    ``root`` -> ``/``.
    """
    if source_path == ROOT_SOURCE_PATH:
        return "/"
    return "/" + _INDEX_RE.sub(r"/\1", source_path.replace(".", "/"))
