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

"""Two-phase validation of registered entities.

Phase A checks that every outgoing GTS reference resolves. Phase B runs the
schema adapter: schemas are compiled (meta-validation plus ``$ref`` loading),
objects are validated against the schema they declare. A full pass validates
every schema before any object.
"""

import logging
import re
from typing import Dict, List, Optional, Set, Union

from ..config import RegistryConfig
from ..exceptions import SchemaCompileError
from ..models.entities import EntityKind, JsonEntity, JsonObj, JsonSchema, ValidationIssue, ValidationResult
from ..registry.entity_registry import EntityRegistry
from ..registry.resolver import ReferenceResolver
from ..schema.error_format import format_jsonschema_errors
from ..schema.json_schema_adapter import CompiledSchema, JsonSchemaAdapter
from ..utils.gts_id import normalize_gts_id
from ..utils.source_path import is_in_examples, to_instance_path

logger = logging.getLogger(__name__)

_ERROR_PATH_RE = re.compile(r"data(/[A-Za-z0-9_\-.\[\]/]+)\b")


class ValidationEngine:
    """Validates entities held by an EntityRegistry and attaches the results."""

    def __init__(self, registry: EntityRegistry, resolver: Optional[ReferenceResolver] = None,
                 config: Optional[RegistryConfig] = None, adapter: Optional[JsonSchemaAdapter] = None):
        self.registry = registry
        self.resolver = resolver or ReferenceResolver(registry)
        self.config = config or RegistryConfig()
        self.adapter = adapter or JsonSchemaAdapter(self.resolver.load_schema, format_check=self.config.format_check)

        # per-pass compile results, keyed by schema id
        self._compiled: Dict[str, Union[CompiledSchema, SchemaCompileError]] = {}
        self._missing_ids: Set[str] = set()

    def clear_cache(self):
        self._compiled.clear()

    def validate_entities(self):
        """Validate every registered entity, schemas first."""
        self._compiled.clear()
        self._missing_ids = set()

        schemas = list(self.registry.json_schemas.values())
        objs = list(self.registry.json_objs.values())

        for schema in schemas:
            self.validate_entity(schema)
        for obj in objs:
            self.validate_entity(obj)

        self.registry.prune_absent(self._missing_ids)

        failing = sum(1 for e in schemas + objs if e.validation and e.validation.errors)
        logger.info(
            f"Validated {len(schemas)} schemas and {len(objs)} objects: "
            f"{failing} with errors, {len(self._missing_ids)} missing references"
        )

    def validate_entity(self, entity: JsonEntity) -> ValidationResult:
        """Recompute the validation result of one entity from scratch."""
        entity.validation = ValidationResult()

        entity.validation.extend(self.check_references(entity))

        if self.config.disable_validation:
            return entity.validation

        if entity.kind == EntityKind.SCHEMA:
            self._validate_schema(entity)
        elif entity.kind == EntityKind.OBJECT:
            self._validate_object(entity)
        return entity.validation

    def check_references(self, entity: JsonEntity) -> List[ValidationIssue]:
        """Reference integrity: one issue per unresolved reference outside examples."""
        issues: List[ValidationIssue] = []
        for ref in entity.gts_refs:
            if is_in_examples(ref.source_path):
                continue
            if self.resolver.resolve_entity(ref.id) is not None:
                continue

            self.registry.mark_absent(ref.id)
            self._missing_ids.add(normalize_gts_id(ref.id))
            issues.append(ValidationIssue(
                instance_path=to_instance_path(ref.source_path),
                schema_path="#",
                keyword="",
                message=f"GTS reference not found: {ref.id}",
                params={"gtsId": ref.id, "sourcePath": ref.source_path},
            ))
        return issues

    def _compile(self, schema: JsonSchema) -> CompiledSchema:
        cached = self._compiled.get(schema.id)
        if isinstance(cached, SchemaCompileError):
            raise cached
        if cached is not None:
            return cached

        try:
            compiled = self.adapter.compile(schema.content)
        except SchemaCompileError as e:
            self._compiled[schema.id] = e
            raise
        self._compiled[schema.id] = compiled
        return compiled

    def _validate_schema(self, schema: JsonSchema):
        try:
            self._compile(schema)
        except SchemaCompileError as e:
            schema.validation.extend(self._compile_error_issues(e))
        except Exception as e:
            logger.warning(f"Unexpected error compiling schema {schema.id}: {e}")
            schema.validation.extend(self._compile_error_issues(SchemaCompileError(str(e), cause=e)))

    @staticmethod
    def _compile_error_issues(error: SchemaCompileError) -> List[ValidationIssue]:
        if error.errors:
            issues = format_jsonschema_errors(error.errors)
            for issue in issues:
                issue.keyword = issue.keyword or "schema"
                issue.message = issue.message or "Invalid JSON Schema"
            return issues

        message = str(error) or "Unknown schema error"
        match = _ERROR_PATH_RE.search(message)
        return [ValidationIssue(
            instance_path=match.group(1) if match else "/",
            schema_path="#",
            keyword="schema",
            message=f"Invalid JSON Schema: {message}",
            params={"error": message},
        )]

    def _validate_object(self, obj: JsonObj):
        if not obj.schema_id:
            return

        schema = self.resolver.resolve(obj.schema_id)
        if schema is None:
            id_field = obj.selected_schema_id_field or obj.selected_entity_id_field or "id"
            obj.validation.add(ValidationIssue(
                instance_path=f"/{id_field}",
                schema_path="#",
                keyword="schema",
                message=f"Schema not found: {obj.schema_id}",
                params={"schemaId": obj.schema_id},
            ))
            return

        try:
            compiled = self._compile(schema)
            if not compiled.run(obj.content) and compiled.errors:
                obj.validation.extend(format_jsonschema_errors(compiled.errors))
        except Exception as e:
            logger.debug(f"Validation of {obj.id} against {schema.id} failed: {e}")
            obj.validation.add(ValidationIssue(
                instance_path="/",
                schema_path="#",
                keyword="validation",
                message=f"Validation error: {e}",
                params={"error": str(e)},
            ))
