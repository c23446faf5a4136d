"""
Engine configuration.

Values come from dataclass defaults, an optional YAML file, and
``DOCSEARCH_*`` environment variables, in increasing order of precedence.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 512
DEFAULT_MAX_CHUNK_SIZE = 800
DEFAULT_TOP_K = 3

ENV_PREFIX = "DOCSEARCH_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class EngineConfig:
    """
    Configuration for the retrieval engine.

    Attributes:
        dimension: Embedding dimension D; fixed for the lifetime of a store
        max_chunk_size: Maximum chunk length in characters (oversized
            sentences are kept whole)
        top_k: Number of passages returned per query
        embed_workers: Thread count for batch embedding (1 = sequential)
        replace_on_reupload: If True, re-uploading a document first removes
            every chunk previously stored under its name
    """
    dimension: int = DEFAULT_DIMENSION
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    top_k: int = DEFAULT_TOP_K
    embed_workers: int = 1
    replace_on_reupload: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        if self.dimension < 1:
            raise ConfigError(f"dimension must be positive, got {self.dimension}")
        if self.max_chunk_size < 1:
            raise ConfigError(f"max_chunk_size must be positive, got {self.max_chunk_size}")
        if self.top_k < 1:
            raise ConfigError(f"top_k must be positive, got {self.top_k}")
        if self.embed_workers < 1:
            raise ConfigError(f"embed_workers must be positive, got {self.embed_workers}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dimension": self.dimension,
            "max_chunk_size": self.max_chunk_size,
            "top_k": self.top_k,
            "embed_workers": self.embed_workers,
            "replace_on_reupload": self.replace_on_reupload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_env(
        cls,
        base: Optional["EngineConfig"] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "EngineConfig":
        """
        Create config from environment variables.

        Args:
            base: Config whose values are used where no variable is set
            environ: Mapping to read instead of os.environ

        Returns:
            New EngineConfig
        """
        env = os.environ if environ is None else environ
        values = (base or cls()).to_dict()

        for key in ("dimension", "max_chunk_size", "top_k", "embed_workers"):
            name = ENV_PREFIX + key.upper()
            if name in env:
                values[key] = _parse_int(name, env[name])

        name = ENV_PREFIX + "REPLACE_ON_REUPLOAD"
        if name in env:
            values["replace_on_reupload"] = _parse_bool(name, env[name])

        return cls(**values)

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path],
        apply_env: bool = True,
    ) -> "EngineConfig":
        """
        Load config from a YAML file.

        The file may hold the settings at top level or under a ``docsearch``
        key. Environment variables override file values unless apply_env is
        False.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        logger.info(f"Loading config from: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

        data = data.get("docsearch", data)
        config = cls.from_dict(data)

        if apply_env:
            config = cls.from_env(base=config)
        return config
