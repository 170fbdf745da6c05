"""
Tests for gts_registry/validation/validation_engine.py -- the two-phase pass.

Validates:
    - reference errors precede conformance errors
    - results are recomputed from scratch on every pass
    - compiled schemas are reused within a pass
    - schema compile errors without structure are normalized
"""

from gts_registry.config import RegistryConfig
from gts_registry.exceptions import SchemaCompileError
from gts_registry.models.entities import JsonFile, JsonObj, JsonSchema
from gts_registry.parsers.entity_extractor import collect_gts_refs
from gts_registry.registry import EntityRegistry
from gts_registry.validation import ValidationEngine

SCHEMA_ID = "gts.x.test.doc.type.v1~"
OBJ_ID = "gts.x.test.doc.type.v1~x.test.d.one.v1"
MISSING_ID = "gts.x.test.missing.type.v1~x.test.m.v1"


def _setup(obj_content, schema_content=None):
    registry = EntityRegistry()
    schema = JsonSchema(
        id=SCHEMA_ID,
        content=schema_content or {"$id": SCHEMA_ID, "type": "object", "required": ["title"]},
        file=JsonFile("s.json", "s.json", {}),
    )
    obj = JsonObj(
        id=OBJ_ID,
        content=obj_content,
        file=JsonFile("o.json", "o.json", {}),
        schema_id=SCHEMA_ID,
        selected_entity_id_field="id",
        selected_schema_id_field="type",
    )
    registry.register(schema)
    registry.register(obj)
    return registry, schema, obj


class _CountingAdapter:
    def __init__(self, inner):
        self.inner = inner
        self.compiled = []

    def compile(self, document):
        self.compiled.append(document.get("$id"))
        return self.inner.compile(document)


class TestValidationEngine:
    """Tests for ValidationEngine."""

    def test_reference_errors_come_first(self):
        """Phase A issues precede Phase B issues."""
        content = {"id": OBJ_ID, "type": SCHEMA_ID, "ref": MISSING_ID}
        registry, _, obj = _setup(content)
        obj.gts_refs = collect_gts_refs(content, skip_fields=("id", "type"))

        ValidationEngine(registry).validate_entities()
        assert [e.keyword for e in obj.validation.errors] == ["", "required"]
        assert registry.get_absent_entity(MISSING_ID) is not None

    def test_results_are_replaced(self):
        """A second pass starts from an empty result."""
        registry, _, obj = _setup({"id": OBJ_ID})
        engine = ValidationEngine(registry)
        engine.validate_entities()
        first = obj.validation

        obj.content["title"] = "now valid"
        engine.validate_entities()
        assert obj.validation is not first
        assert obj.validation.errors == []

    def test_schema_compiled_once_per_pass(self):
        """Objects sharing a schema reuse its compiled validator."""
        registry, _, _ = _setup({"id": OBJ_ID, "title": "a"})
        registry.register(JsonObj(
            id=f"{SCHEMA_ID}x.test.d.two.v1",
            content={"title": "b"},
            file=JsonFile("o2.json", "o2.json", {}),
            schema_id=SCHEMA_ID,
        ))
        engine = ValidationEngine(registry)
        engine.adapter = _CountingAdapter(engine.adapter)

        engine.validate_entities()
        assert engine.adapter.compiled == [SCHEMA_ID]
        engine.validate_entities()
        assert engine.adapter.compiled == [SCHEMA_ID, SCHEMA_ID]

    def test_disable_validation(self):
        """Phase B is skipped when validation is disabled."""
        registry, _, obj = _setup({"id": OBJ_ID})
        ValidationEngine(registry, config=RegistryConfig(disable_validation=True)).validate_entities()
        assert obj.validation.errors == []

    def test_unstructured_compile_error_path(self):
        """A compile message naming a data path yields that path."""
        issues = ValidationEngine._compile_error_issues(SchemaCompileError("data/properties/x must be object"))
        assert issues[0].instance_path == "/properties/x"
        assert issues[0].keyword == "schema"
        assert issues[0].message == "Invalid JSON Schema: data/properties/x must be object"
        assert issues[0].params == {"error": "data/properties/x must be object"}

    def test_unstructured_compile_error_default_path(self):
        """Without a data path the issue points at the document root."""
        issues = ValidationEngine._compile_error_issues(SchemaCompileError("boom"))
        assert issues[0].instance_path == "/"

    def test_object_without_schema_id(self):
        """Objects that declare no schema only get reference checks."""
        registry = EntityRegistry()
        obj = JsonObj(id="gts.x.test.loose.v1", content={}, file=JsonFile("l.json", "l.json", {}))
        registry.register(obj)
        ValidationEngine(registry).validate_entities()
        assert obj.validation.errors == []
