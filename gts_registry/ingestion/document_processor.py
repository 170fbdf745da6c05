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
import re
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import GtsConfig, RegistryConfig, get_gts_config
from ..models.entities import JsonEntity, JsonFile
from ..parsers.entity_extractor import create_entity
from ..registry.entity_registry import EntityRegistry
from ..validation.validation_engine import ValidationEngine

logger = logging.getLogger(__name__)

EntityFactory = Callable[[JsonFile, Optional[int], Any, GtsConfig], Optional[JsonEntity]]


def excluded_dir_pattern(dir_name: str) -> "re.Pattern[str]":
    """Pattern matching any path that runs through a directory called ``dir_name``."""
    return re.compile(r"(^|[\\/])" + re.escape(dir_name) + r"[\\/]")


def _file_fields(source: Any) -> Tuple[str, str, Any]:
    # accept plain mappings as well as objects exposing path/name/content
    if isinstance(source, Mapping):
        path = source["path"]
        return path, source.get("name") or path, source.get("content")
    path = source.path
    return path, getattr(source, "name", None) or path, source.content


class DocumentProcessor:
    """Ingests batches of documents into an EntityRegistry.

    Files are handled in input order. A failure while handling one file is
    logged and does not stop the rest of the batch. Once every file has been
    handled, a full validation pass runs before ``ingest`` returns.
    """

    def __init__(self, registry: EntityRegistry, validation_engine: ValidationEngine,
                 config: Optional[RegistryConfig] = None, entity_factory: EntityFactory = create_entity):
        self.registry = registry
        self.validation_engine = validation_engine
        self.config = config or RegistryConfig()
        self.entity_factory = entity_factory
        self._excluded = excluded_dir_pattern(self.config.excluded_dir_name)

    def is_excluded(self, path: str) -> bool:
        return bool(self._excluded.search(path))

    def ingest(self, files: Iterable[Any], cfg: Union[GtsConfig, Mapping[str, Any], None] = None):
        gts_config = get_gts_config(cfg)

        processed = 0
        for source in files:
            try:
                path, name, content = _file_fields(source)
            except (KeyError, AttributeError) as e:
                logger.error(f"Skipping malformed file record {source!r}: {e}")
                continue

            if self.is_excluded(path):
                logger.debug(f"Skipping excluded path: {path}")
                continue

            try:
                self.process_file(path, name, content, gts_config)
                processed += 1
            except Exception as e:
                logger.error(f"Failed to process {path}: {e}", exc_info=True)

        logger.info(f"Processed {processed} files")
        self.validation_engine.validate_entities()

    def process_file(self, path: str, name: str, content: Any, cfg: GtsConfig) -> List[JsonEntity]:
        """Re-ingest a single file and return the entities it now owns.

        Does not run validation.
        """
        self.registry.invalidate(path)

        json_file = JsonFile(path, name, content)
        if not json_file.is_valid:
            self.registry.register_invalid_file(json_file)
            return []

        document = json_file.content
        if isinstance(document, list):
            elements = list(enumerate(document))
        else:
            elements = [(None, document)]

        entities: List[JsonEntity] = []
        for list_sequence, element in elements:
            entity = self.entity_factory(json_file, list_sequence, element, cfg)
            if entity is None or not entity.is_gts_entity():
                continue
            if not entities:
                self.registry.register_file(json_file)
            self.registry.register(entity)
            entities.append(entity)

        if not entities:
            logger.debug(f"No GTS entities found in {path}")
        return entities
