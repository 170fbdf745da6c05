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

"""Default extraction of GTS entities from decoded document elements."""

import logging
from typing import AbstractSet, Any, Iterator, List, Optional, Sequence, Tuple, Union

from ..config import GtsConfig, get_gts_config
from ..models.entities import GtsRef, JsonEntity, JsonFile, JsonObj, JsonSchema
from ..schema.json_schema_adapter import embedded_schema_ids
from ..utils.gts_id import is_gts_id, normalize_gts_id, type_prefix
from ..utils.source_path import build_source_path

logger = logging.getLogger(__name__)

SCHEMA_ID_FIELD = "$id"


def _select_field(content: dict, field_names: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
    """Return the first (field, value) pair whose value is a GTS id."""
    for name in field_names:
        value = content.get(name)
        if is_gts_id(value):
            return name, normalize_gts_id(value)
    return None, None


def _is_schema_document(content: dict) -> bool:
    # an object may name its schema through "$schema", a schema names a dialect
    declared = content.get("$schema")
    return isinstance(declared, str) and not is_gts_id(declared)


def iter_gts_strings(content: Any, path: Tuple[Union[str, int], ...] = ()) -> Iterator[Tuple[Tuple[Union[str, int], ...], str]]:
    """Yield (path tokens, value) for every string value that is a GTS id."""
    if isinstance(content, dict):
        for key, value in content.items():
            yield from iter_gts_strings(value, path + (str(key),))
    elif isinstance(content, list):
        for idx, item in enumerate(content):
            yield from iter_gts_strings(item, path + (idx,))
    elif is_gts_id(content):
        yield path, content


def collect_gts_refs(content: Any, skip_fields: Sequence[str] = (),
                     local_ids: AbstractSet[str] = frozenset()) -> List[GtsRef]:
    """Collect outgoing references in depth-first document order.

    Top-level fields named in ``skip_fields`` are not references (they carry
    the entity's own identity), neither are ids in ``local_ids`` (resources
    declared inside the document itself).
    """
    refs: List[GtsRef] = []
    for tokens, value in iter_gts_strings(content):
        if len(tokens) == 1 and tokens[0] in skip_fields:
            continue
        ref_id = normalize_gts_id(value)
        if ref_id in local_ids:
            continue
        refs.append(GtsRef(id=ref_id, source_path=build_source_path(tokens)))
    return refs


class EntityExtractor:
    """Classifies a document element as a GTS schema, a GTS object or neither."""

    def __init__(self, cfg: Union[GtsConfig, dict, None] = None):
        self.cfg = get_gts_config(cfg)

    def extract(self, file: JsonFile, list_sequence: Optional[int], content: Any) -> Optional[JsonEntity]:
        if not isinstance(content, dict):
            return None

        if _is_schema_document(content):
            return self._extract_schema(file, list_sequence, content)
        return self._extract_object(file, list_sequence, content)

    def _extract_schema(self, file: JsonFile, list_sequence: Optional[int], content: dict) -> Optional[JsonSchema]:
        id_field, entity_id = _select_field(content, (SCHEMA_ID_FIELD,))
        if entity_id is None:
            return None

        logger.debug(f"Extracted schema {entity_id} from {file.path}")
        return JsonSchema(
            id=entity_id,
            content=content,
            file=file,
            list_sequence=list_sequence,
            gts_refs=collect_gts_refs(content, skip_fields=(id_field,), local_ids=embedded_schema_ids(content)),
            selected_entity_id_field=id_field,
        )

    def _extract_object(self, file: JsonFile, list_sequence: Optional[int], content: dict) -> Optional[JsonObj]:
        id_field, entity_id = _select_field(content, self.cfg.entity_id_fields)
        if entity_id is None:
            return None

        schema_field, schema_id = _select_field(content, self.cfg.schema_id_fields)
        if schema_id is None:
            schema_id = type_prefix(entity_id)
            if schema_id is not None:
                schema_field = id_field

        skip = tuple(f for f in (id_field, schema_field) if f)
        logger.debug(f"Extracted object {entity_id} (schema: {schema_id}) from {file.path}")
        return JsonObj(
            id=entity_id,
            content=content,
            file=file,
            list_sequence=list_sequence,
            gts_refs=collect_gts_refs(content, skip_fields=skip),
            selected_entity_id_field=id_field,
            schema_id=schema_id,
            selected_schema_id_field=schema_field,
        )


def create_entity(file: JsonFile, list_sequence: Optional[int], content: Any,
                  cfg: Union[GtsConfig, dict, None] = None) -> Optional[JsonEntity]:
    """Extraction collaborator used by the ingestion pipeline.

    Returns None for elements that are not GTS documents; never raises for
    unrecognized content.
    """
    return EntityExtractor(cfg).extract(file, list_sequence, content)
