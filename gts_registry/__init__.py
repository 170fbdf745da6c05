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

from .config import GtsConfig, RegistryConfig, get_gts_config
from .exceptions import (
    DocumentParseError,
    GtsRegistryError,
    RegistryConfigurationError,
    SchemaCompileError,
    SchemaNotFoundError,
)
from .file_filter import is_gts_candidate_file_name
from .json_registry import JsonRegistry
from .models.entities import (
    AbsentEntity,
    EntityKind,
    GtsRef,
    JsonEntity,
    JsonFile,
    JsonObj,
    JsonSchema,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "AbsentEntity",
    "DocumentParseError",
    "EntityKind",
    "GtsConfig",
    "GtsRef",
    "GtsRegistryError",
    "JsonEntity",
    "JsonFile",
    "JsonObj",
    "JsonRegistry",
    "JsonSchema",
    "RegistryConfig",
    "RegistryConfigurationError",
    "SchemaCompileError",
    "SchemaNotFoundError",
    "ValidationIssue",
    "ValidationResult",
    "get_gts_config",
    "is_gts_candidate_file_name",
]
