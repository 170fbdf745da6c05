from .entity_registry import EntityRegistry
from .resolver import ReferenceResolver

__all__ = ["EntityRegistry", "ReferenceResolver"]
