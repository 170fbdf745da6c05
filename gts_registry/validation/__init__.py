from .validation_engine import ValidationEngine

__all__ = ["ValidationEngine"]
