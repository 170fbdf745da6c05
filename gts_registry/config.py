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

"""Configuration management for the GTS entity registry."""

import os
import sys
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Tuple, Union

ENV_PREFIX = "GTS_REGISTRY_"
LOGGER_NAME = "gts_registry"

DEFAULT_ENTITY_ID_FIELDS: Tuple[str, ...] = (
    "$id",
    "gtsId",
    "gtsIid",
    "gtsOid",
    "gtsI",
    "gts_id",
    "gts_oid",
    "gts_iid",
    "id",
)

DEFAULT_SCHEMA_ID_FIELDS: Tuple[str, ...] = (
    "$schema",
    "gtsTid",
    "gtsType",
    "gtsT",
    "gts_t",
    "gts_tid",
    "gts_type",
    "type",
    "schema",
)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RegistryConfig:
    """Runtime configuration of the registry and its validation engine."""
    # Skip schema-capability execution (Phase B); reference checks still run
    disable_validation: bool = False
    # Directory holding the viewer's own metadata, never ingested
    excluded_dir_name: str = ".gts-viewer"
    format_check: bool = True
    log_level: str = "INFO"
    print_level: str = "ERROR"

    @classmethod
    def from_env(cls) -> 'RegistryConfig':
        """Create configuration from environment variables."""
        return cls(
            disable_validation=_env_flag(f'{ENV_PREFIX}DISABLE_VALIDATION', 'false'),
            excluded_dir_name=os.getenv(f'{ENV_PREFIX}EXCLUDED_DIR', '.gts-viewer'),
            format_check=_env_flag(f'{ENV_PREFIX}FORMAT_CHECK', 'true'),
            log_level=os.getenv(f'{ENV_PREFIX}LOG_LEVEL', 'INFO'),
            print_level=os.getenv(f'{ENV_PREFIX}PRINT_LEVEL', 'ERROR'),
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging for the ``gts_registry`` logger hierarchy."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')

        # records below print_level go to stdout, the rest to stderr
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setLevel(logging.DEBUG)
        stdout_handler.addFilter(lambda record: record.levelno < stderr_level)
        stdout_handler.setFormatter(formatter)

        stderr_handler = logging.StreamHandler(stream=sys.stderr)
        stderr_handler.setLevel(stderr_level)
        stderr_handler.setFormatter(formatter)

        registry_logger = logging.getLogger(LOGGER_NAME)
        registry_logger.handlers.clear()
        registry_logger.setLevel(level)
        registry_logger.addHandler(stdout_handler)
        registry_logger.addHandler(stderr_handler)
        return registry_logger


@dataclass(frozen=True)
class GtsConfig:
    """Field selection used when extracting GTS entities from documents."""
    entity_id_fields: Tuple[str, ...] = field(default=DEFAULT_ENTITY_ID_FIELDS)
    schema_id_fields: Tuple[str, ...] = field(default=DEFAULT_SCHEMA_ID_FIELDS)


def get_gts_config(cfg: Union[GtsConfig, Mapping[str, Any], None] = None) -> GtsConfig:
    """Merge a partial configuration with the defaults.

    Accepts an existing GtsConfig (returned as is), a mapping with any subset of
    the GtsConfig fields (camelCase keys from viewer settings are accepted too),
    or None.
    """
    if cfg is None:
        return GtsConfig()
    if isinstance(cfg, GtsConfig):
        return cfg

    aliases = {
        "entityIdFields": "entity_id_fields",
        "schemaIdFields": "schema_id_fields",
    }
    known = {f.name for f in fields(GtsConfig)}
    overrides = {}
    for key, value in cfg.items():
        name = aliases.get(key, key)
        if name not in known or not value:
            continue
        overrides[name] = (value,) if isinstance(value, str) else tuple(value)
    return replace(GtsConfig(), **overrides)

