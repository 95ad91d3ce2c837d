# ========================
# file: terrain_engine/core/preset/errors.py
# ========================
class PresetError(Exception):
    """Base error for preset system."""


class ValidationError(PresetError):
    """Raised when a preset value has an unusable type."""


class NotFoundError(PresetError):
    """Raised when a preset id or path cannot be resolved."""
