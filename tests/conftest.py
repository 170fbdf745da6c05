"""
Shared pytest fixtures for the GTS registry test suite.

Provides:
    - gts_config: the default extraction configuration
    - registry: a fresh JsonRegistry
    - event_schema: a schema document requiring ``id`` and ``name``
    - event_obj: an instance of ``event_schema`` satisfying it
    - make_file: builds ``{path, name, content}`` records for ingestion
"""

import copy
import json
import logging

import pytest

from gts_registry import GtsConfig, JsonRegistry, RegistryConfig

DRAFT_2020_12 = "https://json-schema.org/draft/2020-12/schema"

EVENT_SCHEMA_ID = "gts.x.test.event.type.v1~"
EVENT_OBJ_ID = "gts.x.test.event.type.v1~x.test.ev.first.v1.0"
USER_SCHEMA_ID = "gts.x.test.user.type.v1~"
ALICE_ID = "gts.x.test.user.type.v1~x.test.user.alice.v1"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def gts_config():
    """Return the default GtsConfig."""
    return GtsConfig()


@pytest.fixture
def registry():
    """Return an empty JsonRegistry with default runtime configuration."""
    return JsonRegistry(RegistryConfig())


@pytest.fixture
def event_schema():
    """Return a schema document with no outgoing references."""
    return {
        "$schema": DRAFT_2020_12,
        "$id": f"gts://{EVENT_SCHEMA_ID}",
        "type": "object",
        "required": ["id", "name"],
        "properties": {
            "id": {"type": "string"},
            "name": {"type": "string"},
            "count": {"type": "integer", "minimum": 0},
        },
    }


@pytest.fixture
def event_obj():
    """Return an object that declares ``event_schema`` through its ``type`` field."""
    return {
        "id": EVENT_OBJ_ID,
        "type": EVENT_SCHEMA_ID,
        "name": "first",
    }


@pytest.fixture
def make_file():
    """Return a factory for ingestion records; dict content is serialized to JSON text."""
    def _make(path, content, name=None):
        if isinstance(content, (dict, list)):
            content = json.dumps(copy.deepcopy(content))
        return {"path": path, "name": name or path.rsplit("/", 1)[-1], "content": content}
    return _make


@pytest.fixture
def restore_registry_logger():
    """Restore handlers and level of the ``gts_registry`` logger after a test."""
    target = logging.getLogger("gts_registry")
    handlers = list(target.handlers)
    level = target.level
    yield target
    target.handlers[:] = handlers
    target.setLevel(level)
