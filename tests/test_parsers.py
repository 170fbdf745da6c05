"""
Tests for gts_registry/parsers -- document decoding and entity extraction.

Validates:
    - JSON, JSON with comments and YAML decoding
    - parse errors recorded on JsonFile
    - schema / object classification
    - outgoing reference collection
"""

import pytest

from gts_registry.config import GtsConfig
from gts_registry.exceptions import DocumentParseError
from gts_registry.models.entities import EntityKind, GtsRef, JsonFile
from gts_registry.parsers.document_parser import parse_document, strip_json_comments, strip_trailing_commas
from gts_registry.parsers.entity_extractor import collect_gts_refs, create_entity

SCHEMA_ID = "gts.x.test.order.type.v1~"
OBJ_ID = "gts.x.test.order.type.v1~x.test.o.one.v1"
OTHER_ID = "gts.x.test.customer.type.v1~x.test.c.bob.v1"


class TestDocumentParser:
    """Tests for parse_document and its helpers."""

    def test_json(self):
        """Plain JSON text is decoded."""
        assert parse_document("a.json", '{"a": [1, 2]}') == {"a": [1, 2]}

    def test_jsonc(self):
        """Comments and trailing commas are tolerated outside strings."""
        text = '{\n  // note\n  "url": "http://x//y", /* block */\n  "list": [1, 2,],\n}'
        assert parse_document("a.jsonc", text) == {"url": "http://x//y", "list": [1, 2]}

    def test_comment_stripping_keeps_lines(self):
        """Removed block comments keep their newlines."""
        assert strip_json_comments("1 /* a\nb */ 2").count("\n") == 1
        assert strip_trailing_commas('["a,]", 1,]') == '["a,]", 1]'

    def test_unterminated_comment(self):
        """An unterminated block comment is a parse error."""
        with pytest.raises(DocumentParseError):
            parse_document("a.json", '{"a": 1} /* never closed')

    def test_yaml(self):
        """YAML files are decoded by extension; an empty YAML document is an empty mapping."""
        assert parse_document("a.yaml", "a: 1\nb: [x]\n") == {"a": 1, "b": ["x"]}
        assert parse_document("a.YML", "") == {}

    def test_bytes_and_bom(self):
        """Bytes are decoded as UTF-8 and a BOM is ignored."""
        assert parse_document("a.json", '\ufeff{"a": 1}'.encode("utf-8")) == {"a": 1}

    def test_decoded_content_passes_through(self):
        """Content that is already decoded is returned unchanged."""
        content = {"a": 1}
        assert parse_document("a.json", content) is content

    def test_error_message(self):
        """Parse errors name the file and the position."""
        with pytest.raises(DocumentParseError) as excinfo:
            parse_document("bad.json", '{"a": }')
        assert str(excinfo.value).startswith("Failed to parse bad.json: Invalid JSON at line 1 column 7")

    def test_json_file_records_parse_error(self):
        """JsonFile keeps parse failures as data."""
        json_file = JsonFile("bad.yaml", "bad.yaml", "a: [1, 2")
        assert json_file.is_valid is False
        assert json_file.content is None
        assert json_file.validation.errors[0].keyword == "parse"
        assert json_file.validation.errors[0].instance_path == "/"


class TestEntityExtractor:
    """Tests for create_entity and reference collection."""

    def _file(self):
        return JsonFile("f.json", "f.json", {})

    def test_schema(self):
        """A mapping with a dialect $schema and a GTS $id is a schema."""
        content = {"$schema": "https://json-schema.org/draft/2020-12/schema", "$id": f"gts://{SCHEMA_ID}"}
        entity = create_entity(self._file(), None, content)
        assert entity.kind == EntityKind.SCHEMA
        assert entity.id == SCHEMA_ID
        assert entity.selected_entity_id_field == "$id"
        assert entity.gts_refs == []

    def test_schema_without_gts_id(self):
        """A schema whose $id is not a GTS id is not an entity."""
        content = {"$schema": "https://json-schema.org/draft/2020-12/schema", "$id": "https://example.com/s"}
        assert create_entity(self._file(), None, content) is None

    def test_schema_id_only_from_dollar_id(self):
        """Schemas are identified by $id alone."""
        content = {"$schema": "https://json-schema.org/draft/2020-12/schema", "gtsId": SCHEMA_ID}
        assert create_entity(self._file(), None, content) is None

    def test_schema_embedded_ids_are_not_references(self):
        """Bundled resources and references to them are local to the schema."""
        inner = "gts.x.test.line.type.v1~"
        content = {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "$id": f"gts://{SCHEMA_ID}",
            "properties": {"line": {"$ref": f"gts://{inner}"}, "customer": {"const": OTHER_ID}},
            "$defs": {"line": {"$id": f"gts://{inner}", "type": "object"}},
        }
        entity = create_entity(self._file(), None, content)
        assert entity.gts_refs == [GtsRef(OTHER_ID, "properties.customer.const")]

    def test_object(self):
        """An object takes its id and schema id from the first matching fields."""
        content = {"gtsId": OBJ_ID, "gtsType": SCHEMA_ID, "customer": OTHER_ID}
        entity = create_entity(self._file(), 3, content)
        assert entity.kind == EntityKind.OBJECT
        assert (entity.id, entity.schema_id) == (OBJ_ID, SCHEMA_ID)
        assert (entity.selected_entity_id_field, entity.selected_schema_id_field) == ("gtsId", "gtsType")
        assert entity.list_sequence == 3
        assert entity.gts_refs == [GtsRef(OTHER_ID, "customer")]

    def test_object_with_gts_schema_field(self):
        """A GTS id under $schema names the object's schema."""
        entity = create_entity(self._file(), None, {"id": OBJ_ID, "$schema": f"gts://{SCHEMA_ID}"})
        assert entity.kind == EntityKind.OBJECT
        assert entity.schema_id == SCHEMA_ID

    def test_custom_config(self):
        """Only configured fields are probed."""
        cfg = GtsConfig(entity_id_fields=("key",), schema_id_fields=("kind",))
        entity = create_entity(self._file(), None, {"key": OBJ_ID, "kind": SCHEMA_ID, "id": OTHER_ID}, cfg)
        assert entity.id == OBJ_ID
        assert entity.selected_schema_id_field == "kind"
        assert entity.gts_refs == [GtsRef(OTHER_ID, "id")]

    @pytest.mark.parametrize("content", [None, 42, "text", [1, 2], {"name": "no id"}, {"id": "not-gts"}])
    def test_unrecognized(self, content):
        """Elements that are not GTS documents yield no entity."""
        assert create_entity(self._file(), None, content) is None

    def test_collect_refs_order_and_paths(self):
        """References are collected depth-first with dot/bracket paths."""
        content = {"a": {"b": [OTHER_ID, {"c": f"gts://{SCHEMA_ID}"}]}, "id": OBJ_ID}
        assert collect_gts_refs(content, skip_fields=("id",)) == [
            GtsRef(OTHER_ID, "a.b[0]"),
            GtsRef(SCHEMA_ID, "a.b[1].c"),
        ]

    def test_collect_refs_nested_own_id_is_a_reference(self):
        """Only the top-level id field is skipped."""
        assert collect_gts_refs({"id": OBJ_ID, "x": {"id": OBJ_ID}}, skip_fields=("id",)) == [
            GtsRef(OBJ_ID, "x.id"),
        ]

    def test_collect_refs_root(self):
        """A bare GTS id as the content is referenced from root."""
        assert collect_gts_refs(OBJ_ID) == [GtsRef(OBJ_ID, "root")]
