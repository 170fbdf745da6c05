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

"""Data shapes shared by the registry, the ingestion pipeline and the validation engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from ..exceptions import DocumentParseError
from ..parsers.document_parser import parse_document
from ..utils.gts_id import normalize_gts_id


class EntityKind(str, Enum):
    SCHEMA = "schema"
    OBJECT = "object"
    ABSENT = "absent"


@dataclass(frozen=True)
class GtsRef:
    """Outgoing reference found at ``source_path`` inside an entity's content."""
    id: str
    source_path: str


class _NoData:
    def __repr__(self) -> str:
        return "NO_DATA"


NO_DATA = _NoData()


@dataclass
class ValidationIssue:
    """One normalized validation error."""
    instance_path: str = "/"
    schema_path: str = "#"
    keyword: str = ""
    message: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    # offending value, when the validator reported one
    data: Any = NO_DATA

    @property
    def has_data(self) -> bool:
        return self.data is not NO_DATA

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "instancePath": self.instance_path,
            "schemaPath": self.schema_path,
            "keyword": self.keyword,
            "message": self.message,
            "params": dict(self.params),
        }
        if self.has_data:
            result["data"] = self.data
        return result


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, issue: ValidationIssue) -> None:
        self.errors.append(issue)

    def extend(self, issues: List[ValidationIssue]) -> None:
        self.errors.extend(issues)


class JsonFile:
    """One ingested document source.

    ``content`` may be raw text or an already decoded document. Decoding
    failures are recorded on ``validation`` instead of being raised.
    """

    def __init__(self, path: str, name: str, content: Any):
        self.path = path
        self.name = name
        self.raw_content = content
        self.content: Any = None
        self.validation = ValidationResult()

        try:
            self.content = parse_document(name or path, content)
        except DocumentParseError as e:
            self.validation.add(ValidationIssue(
                instance_path="/",
                schema_path="#",
                keyword="parse",
                message=str(e),
                params={"error": str(e)},
            ))

    @property
    def is_valid(self) -> bool:
        return self.validation.valid

    def __repr__(self) -> str:
        return f"JsonFile(path={self.path!r}, valid={self.is_valid})"


@dataclass(eq=False)
class JsonEntity:
    """Common capability set of registry entities."""
    kind: ClassVar[EntityKind]

    id: str
    content: Any
    file: Optional[JsonFile] = None
    list_sequence: Optional[int] = None
    gts_refs: List[GtsRef] = field(default_factory=list)
    # None until the entity has been validated at least once
    validation: Optional[ValidationResult] = None
    selected_entity_id_field: Optional[str] = None

    def __post_init__(self):
        self.id = normalize_gts_id(self.id) if self.id else ""

    def is_gts_entity(self) -> bool:
        return bool(self.id)

    @property
    def file_path(self) -> Optional[str]:
        return self.file.path if self.file is not None else None


@dataclass(eq=False)
class JsonSchema(JsonEntity):
    kind: ClassVar[EntityKind] = EntityKind.SCHEMA


@dataclass(eq=False)
class JsonObj(JsonEntity):
    kind: ClassVar[EntityKind] = EntityKind.OBJECT

    schema_id: Optional[str] = None
    selected_schema_id_field: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        if self.schema_id:
            self.schema_id = normalize_gts_id(self.schema_id)
        else:
            self.schema_id = None


@dataclass(eq=False)
class AbsentEntity(JsonEntity):
    """Placeholder for an identifier that is referenced but not registered."""
    kind: ClassVar[EntityKind] = EntityKind.ABSENT

    def is_gts_entity(self) -> bool:
        return False


def create_absent_entity(entity_id: str) -> AbsentEntity:
    return AbsentEntity(id=entity_id, content=None)
