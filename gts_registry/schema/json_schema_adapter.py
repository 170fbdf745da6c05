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

"""JSON Schema capability wrapper used by the validation engine.

Compiling a schema meta-validates it and eagerly loads every schema it
references (transitively) through the supplied loader, so an unresolved
``$ref`` anywhere in the graph fails compilation instead of surfacing later
while an instance is being validated.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Set
from urllib.parse import urldefrag

import jsonschema
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from ..exceptions import GtsRegistryError, RegistryConfigurationError, SchemaCompileError
from ..utils.gts_id import decode_gts_id, is_json_schema_meta_uri

logger = logging.getLogger(__name__)

SchemaLoader = Callable[[str], Any]

DEFAULT_VALIDATOR = jsonschema.Draft202012Validator


# keywords whose values are instance data, never subschemas
DATA_KEYWORDS = frozenset({"examples", "const", "enum", "default"})
# keywords whose values map arbitrary names to subschemas
SCHEMA_MAP_KEYWORDS = frozenset({"properties", "patternProperties", "$defs", "definitions", "dependentSchemas"})


def iter_schema_keyword(document: Any, keyword: str) -> Iterator[str]:
    """Yield every string value of ``keyword`` in schema positions of ``document``."""
    if isinstance(document, list):
        for item in document:
            yield from iter_schema_keyword(item, keyword)
        return
    if not isinstance(document, dict):
        return

    for key, value in document.items():
        if key in DATA_KEYWORDS:
            continue
        if key == keyword and isinstance(value, str):
            yield value
        elif key in SCHEMA_MAP_KEYWORDS and isinstance(value, dict):
            for subschema in value.values():
                yield from iter_schema_keyword(subschema, keyword)
        else:
            yield from iter_schema_keyword(value, keyword)


def iter_schema_refs(document: Any) -> Iterator[str]:
    return iter_schema_keyword(document, "$ref")


def embedded_schema_ids(document: Any) -> Set[str]:
    """Normalized ids of every resource declared in ``document``, the root included."""
    ids = set()
    for declared in iter_schema_keyword(document, "$id"):
        uri = urldefrag(declared)[0]
        if uri:
            ids.add(decode_gts_id(uri))
    return ids


class CompiledSchema:
    """Executable validator for one schema document."""

    def __init__(self, validator: Any):
        self._validator = validator
        self.errors: Optional[List[JsonSchemaValidationError]] = None

    @property
    def schema(self) -> Any:
        return self._validator.schema

    def run(self, instance: Any) -> bool:
        """Validate ``instance``; on failure ``errors`` holds every reported error."""
        errors = list(self._validator.iter_errors(instance))
        self.errors = errors or None
        return not errors


class JsonSchemaAdapter:
    """Compiles schema documents into validators, resolving references by id.

    The adapter is permissive: unknown keywords are ignored, the dialect is
    taken from ``$schema`` (2020-12 when absent or unknown) and every error is
    reported rather than the first one.
    """

    def __init__(self, load_schema: SchemaLoader, format_check: bool = True,
                 default_validator: Any = DEFAULT_VALIDATOR):
        if not callable(load_schema):
            raise RegistryConfigurationError("load_schema must be callable")
        self.load_schema = load_schema
        self.format_check = format_check
        self.default_validator = default_validator

    def compile(self, schema_document: Any) -> CompiledSchema:
        """Compile a schema document.

        Raises:
            SchemaCompileError: If the document is not a valid schema, or one of
                the schemas it references cannot be loaded.
        """
        if not isinstance(schema_document, (dict, bool)):
            raise SchemaCompileError(
                f"Schema must be an object or a boolean, got {type(schema_document).__name__}"
            )

        validator_cls = validator_for(schema_document, default=self.default_validator)

        meta_errors = self._meta_validate(validator_cls, schema_document)
        if meta_errors:
            raise SchemaCompileError("Invalid JSON Schema", errors=meta_errors)

        loaded = self._load_references(schema_document)
        registry = Registry(retrieve=self._make_retriever(loaded))

        format_checker = validator_cls.FORMAT_CHECKER if self.format_check else None
        validator = validator_cls(schema_document, registry=registry, format_checker=format_checker)
        return CompiledSchema(validator)

    @staticmethod
    def _meta_validate(validator_cls: Any, schema_document: Any) -> List[JsonSchemaValidationError]:
        meta_cls = validator_for(validator_cls.META_SCHEMA, default=validator_cls)
        meta_validator = meta_cls(validator_cls.META_SCHEMA)
        return list(meta_validator.iter_errors(schema_document))

    def _load_references(self, root: Any) -> Dict[str, Any]:
        """Load the transitive closure of external references of ``root``.

        Every schema id is loaded at most once, so self- and mutually-referencing
        schemas terminate. Ids declared inside a document are never loaded.
        """
        loaded: Dict[str, Any] = {}
        # resources bundled in a document resolve locally
        visited = embedded_schema_ids(root)

        pending = [root]
        while pending:
            document = pending.pop()
            for ref in iter_schema_refs(document):
                uri, _fragment = urldefrag(ref)
                if not uri or is_json_schema_meta_uri(uri):
                    continue
                key = decode_gts_id(uri)
                if key in visited:
                    continue
                visited.add(key)

                try:
                    target = self.load_schema(uri)
                except GtsRegistryError as e:
                    raise SchemaCompileError(str(e), cause=e) from e
                logger.debug(f"Loaded referenced schema {key}")
                loaded[key] = target
                visited.update(embedded_schema_ids(target))
                pending.append(target)
        return loaded

    def _make_retriever(self, loaded: Dict[str, Any]) -> Callable[[str], Resource]:
        def retrieve(uri: str) -> Resource:
            key = decode_gts_id(urldefrag(uri)[0])
            if key in loaded:
                contents = loaded[key]
            else:
                contents = self.load_schema(uri)
                loaded[key] = contents
            return Resource.from_contents(contents, default_specification=DRAFT202012)

        return retrieve
