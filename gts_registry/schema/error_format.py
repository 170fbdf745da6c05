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

"""Normalization of schema validation errors.

Errors reported by the schema adapter are first flattened into ``RawError``
records (one per offending property where the validator groups several) and
then mapped onto ``ValidationIssue`` with keyword-specific messages. Both steps
are pure and never drop an error.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Union

from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from ..models.entities import NO_DATA, ValidationIssue

JsonPointer = str


@dataclass(frozen=True)
class RawError:
    keyword: str
    message: str
    instance_path: JsonPointer = ""
    schema_path: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    data: Any = NO_DATA


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _pointer(tokens: Iterable[Any]) -> JsonPointer:
    tokens = list(tokens)
    if not tokens:
        return ""
    return "/" + "/".join(_jp_escape(str(t)) for t in tokens)


def _additional_properties(error: JsonSchemaValidationError) -> List[str]:
    instance = error.instance
    schema = error.schema if isinstance(error.schema, dict) else {}
    properties = schema.get("properties", {}) or {}
    patterns = list((schema.get("patternProperties", {}) or {}).keys())
    extras = []
    for name in instance:
        if name in properties:
            continue
        if any(re.search(p, name) for p in patterns):
            continue
        extras.append(name)
    return extras


def _schema_ref(path: str) -> str:
    if not path:
        return "#"
    if path.startswith("#"):
        return path
    return f"#{path}"


def _params_for(keyword: str, value: Any) -> Dict[str, Any]:
    if keyword == "type":
        return {"type": ",".join(value) if isinstance(value, list) else value}
    if keyword == "pattern":
        return {"pattern": value}
    if keyword == "enum":
        return {"allowedValues": value}
    if keyword == "const":
        return {"allowedValue": value}
    if keyword == "minimum":
        return {"comparison": ">=", "limit": value}
    if keyword == "maximum":
        return {"comparison": "<=", "limit": value}
    if keyword == "exclusiveMinimum":
        return {"comparison": ">", "limit": value}
    if keyword == "exclusiveMaximum":
        return {"comparison": "<", "limit": value}
    if keyword in ("minLength", "maxLength", "minItems", "maxItems", "minProperties", "maxProperties"):
        return {"limit": value}
    if keyword == "format":
        return {"format": value}
    if keyword == "multipleOf":
        return {"multipleOf": value}
    return {}


def raw_errors_from_jsonschema(error: JsonSchemaValidationError) -> List[RawError]:
    """Flatten one jsonschema error into one or more raw errors."""
    keyword = error.validator if error.validator is not None else "false schema"
    instance_path = _pointer(error.absolute_path)
    schema_path = _pointer(error.absolute_schema_path)

    if keyword == "required" and isinstance(error.instance, dict):
        missing = [p for p in (error.validator_value or []) if p not in error.instance]
        chosen = next((p for p in missing if error.message == f"{p!r} is a required property"),
                      missing[0] if missing else None)
        params = {"missingProperty": chosen} if chosen is not None else {}
        return [RawError(keyword, error.message, instance_path, schema_path, params, error.instance)]

    if keyword == "additionalProperties" and isinstance(error.instance, dict):
        extras = _additional_properties(error)
        if extras:
            return [
                RawError(keyword, error.message, instance_path, schema_path,
                         {"additionalProperty": extra}, error.instance)
                for extra in extras
            ]

    return [RawError(keyword, error.message, instance_path, schema_path,
                     _params_for(keyword, error.validator_value), error.instance)]


def _detailed_message(keyword: str, params: Mapping[str, Any], original: str) -> str:
    if keyword == "type":
        return f"must be {params.get('type')}"
    if keyword == "required":
        return f"missing required property '{params.get('missingProperty')}'"
    if keyword == "additionalProperties":
        return f"must NOT have additional property '{params.get('additionalProperty')}'"
    if keyword == "pattern":
        return f'must match pattern "{params.get("pattern")}"'
    if keyword == "enum":
        return f"must be one of: {json.dumps(params.get('allowedValues'), default=str)}"
    if keyword in ("minimum", "maximum"):
        return f"must be {params.get('comparison')} {params.get('limit')}"
    if keyword == "minLength":
        return f"must NOT have fewer than {params.get('limit')} characters"
    if keyword == "maxLength":
        return f"must NOT have more than {params.get('limit')} characters"
    if keyword == "minItems":
        return f"must NOT have fewer than {params.get('limit')} items"
    if keyword == "maxItems":
        return f"must NOT have more than {params.get('limit')} items"
    if keyword in ("anyOf", "oneOf", "allOf"):
        return f"must match {keyword} schema"
    if keyword == "format":
        return f'must match format "{params.get("format")}"'
    return original or "Validation failed"


def format_validation_error(error: Union[RawError, Mapping[str, Any]]) -> ValidationIssue:
    """Map one raw error (or an already camelCased error mapping) to a ValidationIssue."""
    if isinstance(error, Mapping):
        error = RawError(
            keyword=error.get("keyword") or "",
            message=error.get("message") or "",
            instance_path=error.get("instancePath") or "",
            schema_path=error.get("schemaPath") or "",
            params=dict(error.get("params") or {}),
            data=error.get("data", NO_DATA),
        )

    params = dict(error.params or {})
    return ValidationIssue(
        instance_path=error.instance_path or "/",
        schema_path=_schema_ref(error.schema_path),
        keyword=error.keyword,
        message=_detailed_message(error.keyword, params, error.message),
        params=params,
        data=error.data,
    )


def format_validation_errors(errors: Iterable[Union[RawError, Mapping[str, Any]]]) -> List[ValidationIssue]:
    return [format_validation_error(e) for e in errors]


def format_jsonschema_errors(errors: Iterable[JsonSchemaValidationError]) -> List[ValidationIssue]:
    """Normalize jsonschema errors, in the order the validator reported them."""
    raw: List[RawError] = []
    for error in errors:
        raw.extend(raw_errors_from_jsonschema(error))
    return format_validation_errors(raw)
