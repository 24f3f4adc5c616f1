"""
Configuration store.

Handles loading and validation of JSON configuration files: the raw
document is checked against a bundled JSON schema, then parsed into a
frozen pydantic model. Reloading swaps the whole model at once, so
readers always see either the old or the new configuration.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

import jsonschema
from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)

SCHEMA_DIR = Path(__file__).parent / "schemas"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


def load_schema(schema_name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by file name."""
    schema_file = SCHEMA_DIR / schema_name
    try:
        with open(schema_file, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to load schema {schema_file}: {e}") from e


class ConfigStore(Generic[T]):
    """
    Holds the current configuration model for one JSON file.

    Usage:
        store = ConfigStore("config/rewards.json", RewardConfig,
                            "battle_rewards.schema.json", RewardConfig)
        config = store.load()
        ...
        store.reload()
    """

    def __init__(
        self,
        path: Path | str,
        model_type: type[T],
        schema_name: Optional[str] = None,
        default_factory: Optional[Callable[[], T]] = None,
    ):
        self._path = Path(path)
        self._model_type = model_type
        self._schema_name = schema_name
        self._default_factory = default_factory
        self._schema: Optional[dict[str, Any]] = None
        self._current: Optional[T] = None
        self._lock = threading.Lock()

        self.logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_loaded(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> T:
        """The active configuration model."""
        current = self._current
        if current is None:
            raise ConfigError(f"Configuration {self._path} has not been loaded")
        return current

    def load(self) -> T:
        """
        Load configuration from disk.

        A missing file is created from the default factory when one is set.

        Raises:
            ConfigError: the file is unreadable or fails validation
        """
        with self._lock:
            if not self._path.exists():
                if self._default_factory is None:
                    raise ConfigError(f"Configuration file not found: {self._path}")
                self.logger.warning(f"Configuration not found, writing defaults: {self._path}")
                config = self._default_factory()
                self._write(config)
            else:
                config = self._read()

            self._current = config
            self.logger.info(f"Loaded configuration from {self._path}")
            return config

    def reload(self) -> T:
        """
        Re-read configuration from disk.

        On failure the previously loaded configuration stays active.

        Raises:
            ConfigError: the file is unreadable or fails validation
        """
        with self._lock:
            config = self._read()
            self._current = config
            self.logger.info(f"Reloaded configuration from {self._path}")
            return config

    def parse(self, data: Any) -> T:
        """Validate a decoded JSON document and build the model."""
        schema = self._get_schema()
        if schema is not None:
            try:
                jsonschema.validate(instance=data, schema=schema)
            except jsonschema.ValidationError as e:
                location = "/".join(str(p) for p in e.absolute_path) or "<root>"
                raise ConfigError(f"Validation error in {self._path} at {location}: {e.message}") from e

        try:
            return self._model_type.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self._path}: {e}") from e

    def _get_schema(self) -> Optional[dict[str, Any]]:
        if self._schema_name is None:
            return None
        if self._schema is None:
            self._schema = load_schema(self._schema_name)
        return self._schema

    def _read(self) -> T:
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load {self._path}: {e}")
            raise ConfigError(f"Failed to load {self._path}: {e}") from e
        return self.parse(data)

    def _write(self, config: T) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, 'w', encoding='utf-8') as f:
                json.dump(config.model_dump(mode='json', by_alias=True), f, indent=2)
        except OSError as e:
            # Defaults still apply for this run
            self.logger.error(f"Failed to write default configuration {self._path}: {e}")
