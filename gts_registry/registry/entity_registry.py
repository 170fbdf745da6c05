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

import logging
from typing import Dict, List, Optional

from ..models.entities import AbsentEntity, EntityKind, JsonEntity, JsonFile, JsonObj, JsonSchema, create_absent_entity
from ..utils.gts_id import normalize_gts_id

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Authoritative index of files and GTS entities.

    Entities are keyed by normalized id and partitioned by kind. The per-path
    ownership maps record which entities each file contributed so that a file
    can be invalidated without touching entities contributed by other files.
    """

    def __init__(self):
        self.json_schemas: Dict[str, JsonSchema] = {}
        self.json_objs: Dict[str, JsonObj] = {}
        self.json_files: Dict[str, JsonFile] = {}
        self.invalid_files: Dict[str, JsonFile] = {}
        self.json_file_schemas: Dict[str, List[JsonSchema]] = {}
        self.json_file_objs: Dict[str, List[JsonObj]] = {}
        self.absent_gts_entities: Dict[str, AbsentEntity] = {}

    def reset(self):
        """Clear every index."""
        self.json_schemas.clear()
        self.json_objs.clear()
        self.json_files.clear()
        self.invalid_files.clear()
        self.json_file_schemas.clear()
        self.json_file_objs.clear()
        self.absent_gts_entities.clear()
        logger.debug("Registry reset")

    def register_file(self, json_file: JsonFile):
        """Track a file once it has produced a recognized entity."""
        if json_file.path not in self.json_files:
            self.json_files[json_file.path] = json_file

    def register_invalid_file(self, json_file: JsonFile):
        self.invalid_files[json_file.path] = json_file
        logger.warning(f"Invalid file: {json_file.path}")

    def register(self, entity: JsonEntity):
        """Register an entity under its normalized id (last writer wins)."""
        if entity.kind == EntityKind.SCHEMA:
            index, other = self.json_schemas, self.json_objs
            owned = self.json_file_schemas
        elif entity.kind == EntityKind.OBJECT:
            index, other = self.json_objs, self.json_schemas
            owned = self.json_file_objs
        else:
            raise ValueError(f"Cannot register entity of kind {entity.kind.value}: {entity.id}")

        entity_id = entity.id
        previous = index.get(entity_id) or other.get(entity_id)
        if previous is not None and previous is not entity and previous.file_path != entity.file_path:
            logger.warning(
                f"Entity '{entity_id}' from {entity.file_path} replaces the one from {previous.file_path}"
            )

        # one id space across schemas and objects
        other.pop(entity_id, None)
        index[entity_id] = entity

        if entity.file_path is not None:
            owned.setdefault(entity.file_path, []).append(entity)
        logger.info(f"Registered {entity.kind.value}: {entity_id} from {entity.file_path}")

    def invalidate(self, path: str):
        """Remove a file and every entity it contributed."""
        self.json_files.pop(path, None)
        self.invalid_files.pop(path, None)

        if path in self.json_file_objs:
            for obj in self.json_file_objs[path]:
                self._remove_owned(self.json_objs, obj)
            self.json_file_objs[path] = []

        if path in self.json_file_schemas:
            for schema in self.json_file_schemas[path]:
                self._remove_owned(self.json_schemas, schema)
            self.json_file_schemas[path] = []

    @staticmethod
    def _remove_owned(index: Dict[str, JsonEntity], entity: JsonEntity):
        # another file may have re-registered the id since
        if index.get(entity.id) is entity:
            del index[entity.id]
            logger.info(f"Unregistered {entity.kind.value}: {entity.id}")

    def get_schema(self, entity_id: str) -> Optional[JsonSchema]:
        return self.json_schemas.get(normalize_gts_id(entity_id))

    def get_obj(self, entity_id: str) -> Optional[JsonObj]:
        return self.json_objs.get(normalize_gts_id(entity_id))

    def get_entity(self, entity_id: str) -> Optional[JsonEntity]:
        entity_id = normalize_gts_id(entity_id)
        return self.json_schemas.get(entity_id) or self.json_objs.get(entity_id)

    def get_file(self, path: str) -> Optional[JsonFile]:
        return self.json_files.get(path)

    def get_invalid_file(self, path: str) -> Optional[JsonFile]:
        return self.invalid_files.get(path)

    def get_file_entities(self, path: str) -> List[JsonEntity]:
        """Entities currently attributed to ``path``, schemas first."""
        return [*self.json_file_schemas.get(path, []), *self.json_file_objs.get(path, [])]

    def mark_absent(self, entity_id: str) -> AbsentEntity:
        """Return the placeholder for a missing id, creating it on first use."""
        entity_id = normalize_gts_id(entity_id)
        placeholder = self.absent_gts_entities.get(entity_id)
        if placeholder is None:
            placeholder = create_absent_entity(entity_id)
            self.absent_gts_entities[entity_id] = placeholder
        return placeholder

    def get_absent_entity(self, entity_id: str) -> Optional[AbsentEntity]:
        return self.absent_gts_entities.get(normalize_gts_id(entity_id))

    def prune_absent(self, still_missing):
        """Drop placeholders whose ids are no longer missed."""
        for entity_id in list(self.absent_gts_entities):
            if entity_id not in still_missing:
                del self.absent_gts_entities[entity_id]
