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

"""Public entry point of the GTS entity registry."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .config import GtsConfig, RegistryConfig
from .ingestion.document_processor import DocumentProcessor
from .models.entities import AbsentEntity, JsonEntity, JsonFile, JsonObj, JsonSchema
from .registry.entity_registry import EntityRegistry
from .registry.resolver import ReferenceResolver
from .validation.validation_engine import ValidationEngine

logger = logging.getLogger(__name__)


class JsonRegistry:
    """Holds every ingested file and GTS entity together with its validation result.

    ``ingest_files`` returns only after the validation pass has finished, so
    every registered entity carries a ``validation`` result afterwards.
    """

    def __init__(self, config: Optional[RegistryConfig] = None):
        self.config = config or RegistryConfig()
        self.registry = EntityRegistry()
        self.resolver = ReferenceResolver(self.registry)
        self.validation_engine = ValidationEngine(self.registry, self.resolver, self.config)
        self.document_processor = DocumentProcessor(self.registry, self.validation_engine, self.config)
        self._default_file_path: Optional[str] = None

    # Index views

    @property
    def json_schemas(self) -> Dict[str, JsonSchema]:
        return self.registry.json_schemas

    @property
    def json_objs(self) -> Dict[str, JsonObj]:
        return self.registry.json_objs

    @property
    def json_files(self) -> Dict[str, JsonFile]:
        return self.registry.json_files

    @property
    def invalid_files(self) -> Dict[str, JsonFile]:
        return self.registry.invalid_files

    @property
    def json_file_schemas(self) -> Dict[str, List[JsonSchema]]:
        return self.registry.json_file_schemas

    @property
    def json_file_objs(self) -> Dict[str, List[JsonObj]]:
        return self.registry.json_file_objs

    @property
    def absent_gts_entities(self) -> Dict[str, AbsentEntity]:
        return self.registry.absent_gts_entities

    # Mutation

    def ingest_files(self, files: Iterable[Any], cfg: Union[GtsConfig, Mapping[str, Any], None] = None):
        """Ingest ``files`` (records with path, name and content) and revalidate everything."""
        self.document_processor.ingest(files, cfg)

    def invalidate_file(self, path: str):
        """Drop ``path`` and its entities. Remaining results are refreshed on the next ingestion."""
        self.registry.invalidate(path)
        if self._default_file_path == path:
            self._default_file_path = None

    def revalidate(self):
        self.validation_engine.validate_entities()

    def reset(self):
        self.registry.reset()
        self.validation_engine.clear_cache()
        self._default_file_path = None

    # Default file

    def set_default_file(self, path: Optional[str]):
        """Select the preferred file. ``None`` falls back to the first tracked file."""
        if path is None:
            path = next(iter(self.registry.json_files), None)
        self._default_file_path = path

    def get_default_file_path(self) -> Optional[str]:
        return self._default_file_path

    def get_default_file(self) -> Optional[JsonFile]:
        if self._default_file_path is None:
            return None
        return self.registry.get_file(self._default_file_path)

    # Lookups

    def get_schema(self, entity_id: str) -> Optional[JsonSchema]:
        return self.registry.get_schema(entity_id)

    def get_obj(self, entity_id: str) -> Optional[JsonObj]:
        return self.registry.get_obj(entity_id)

    def get_entity(self, entity_id: str) -> Optional[JsonEntity]:
        return self.registry.get_entity(entity_id)

    def get_absent_entity(self, entity_id: str) -> Optional[AbsentEntity]:
        return self.registry.get_absent_entity(entity_id)

    def get_file(self, path: str) -> Optional[JsonFile]:
        return self.registry.get_file(path)

    def get_invalid_file(self, path: str) -> Optional[JsonFile]:
        return self.registry.get_invalid_file(path)

    def get_file_entities(self, path: str) -> List[JsonEntity]:
        return self.registry.get_file_entities(path)

    def get_all_schemas(self) -> List[JsonSchema]:
        return list(self.registry.json_schemas.values())

    def get_all_objs(self) -> List[JsonObj]:
        return list(self.registry.json_objs.values())

    def get_all_files(self) -> List[JsonFile]:
        return list(self.registry.json_files.values())

    def get_all_invalid_files(self) -> List[JsonFile]:
        return list(self.registry.invalid_files.values())

    def validation_summary(self) -> Dict[str, int]:
        entities: List[JsonEntity] = [*self.registry.json_schemas.values(), *self.registry.json_objs.values()]
        invalid = sum(1 for e in entities if e.validation is not None and not e.validation.valid)
        return {
            "schemas": len(self.registry.json_schemas),
            "objects": len(self.registry.json_objs),
            "valid": len(entities) - invalid,
            "invalid": invalid,
            "invalid_files": len(self.registry.invalid_files),
            "absent": len(self.registry.absent_gts_entities),
        }
