"""
Model base class for data-only configuration objects.

Models are pure data containers with NO logic that mutates them.
Loaded configuration is shared between threads, so models are frozen:
a reload builds a brand new tree instead of editing the old one.

Usage:
    class Reward(Model):
        type: str
        chance: float = 100.0
        min_level: int = Field(default=1, alias="minLevel")
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """
    Base class for all configuration models.

    Models use Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    Fields declare camelCase aliases for the JSON documents; Python code
    may use either the field name or the alias when constructing.
    """

    model_config = ConfigDict(
        # Immutable once loaded
        frozen=True,
        # Accept snake_case names as well as aliases
        populate_by_name=True,
        # Unknown keys are a configuration mistake
        extra='forbid',
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using the JSON aliases."""
        return self.model_dump(mode='json', by_alias=True)

    def clone(self, **changes: Any) -> Model:
        """Create a deep copy of this model, optionally with field changes."""
        return self.model_copy(update=changes, deep=True)
