import logging
from typing import Any, Optional

from ..exceptions import SchemaNotFoundError
from ..models.entities import JsonEntity, JsonSchema
from ..utils.gts_id import decode_gts_id, is_json_schema_meta_uri, normalize_gts_id

from .entity_registry import EntityRegistry

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Resolves identifiers against the current registry state.

    Resolution depends only on the normalized id and on what is registered
    right now; the file an id came from is never consulted.
    """

    def __init__(self, registry: EntityRegistry):
        self.registry = registry

    def resolve(self, identifier: str) -> Optional[JsonSchema]:
        """Return the schema registered under ``identifier``, if any."""
        return self.registry.json_schemas.get(normalize_gts_id(identifier))

    def resolve_entity(self, identifier: str) -> Optional[JsonEntity]:
        """Return the schema or object registered under ``identifier``, if any."""
        return self.registry.get_entity(identifier)

    def load_schema(self, uri: str) -> Any:
        """Loader callback handed to the schema adapter for ``$ref`` resolution.

        Raises:
            SchemaNotFoundError: If ``uri`` names no registered schema.
        """
        if is_json_schema_meta_uri(uri):
            return True

        schema_id = decode_gts_id(uri)
        schema = self.resolve(schema_id)
        if schema is None:
            logger.debug(f"Unresolved $ref: {schema_id}")
            raise SchemaNotFoundError(schema_id)
        return schema.content
