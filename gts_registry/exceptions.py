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

"""Custom exceptions for the GTS entity registry."""

from typing import Any, List, Optional


class GtsRegistryError(Exception):
    """Base exception for registry related errors."""
    pass


class RegistryConfigurationError(GtsRegistryError):
    """Exception raised when the registry or its schema adapter cannot be set up."""
    pass


class DocumentParseError(GtsRegistryError):
    """Exception raised when a document cannot be decoded into structured content."""
    pass


class SchemaNotFoundError(GtsRegistryError):
    """Exception raised when a schema reference does not resolve against the registry."""

    def __init__(self, schema_id: str):
        super().__init__(f"Schema not found for $ref: {schema_id}")
        self.schema_id = schema_id


class SchemaCompileError(GtsRegistryError):
    """Exception raised when a schema document cannot be compiled into a validator.

    ``errors`` holds the structured meta-validation errors when they are known;
    it stays empty when compilation failed for another reason (for example an
    unresolved ``$ref``), in which case ``cause`` carries the original exception.
    """

    def __init__(self, message: str, errors: Optional[List[Any]] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.errors = list(errors or [])
        self.cause = cause
