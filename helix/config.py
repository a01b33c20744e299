"""
Helix Configuration System

Pydantic v2-based configuration with YAML/JSON support and environment overrides.

Features:
- Type-safe configuration models
- YAML/JSON file loading
- Environment variable overrides (HELIX_EVOLUTION__POPULATION_SIZE=100)
- Validation with defaults

Author: Helix Team
Python: 3.11+
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from collections.abc import Callable
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from .logging_config import configure_logging


# =============================================================================
# Evolution Configuration
# =============================================================================


class EvolutionConfig(BaseModel):
    """Configuration of the generational loop and its termination."""

    # Population
    population_size: int = Field(
        default=50,
        ge=1,
        description="Number of individuals in the population",
    )

    survival_rate: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Fraction of the next generation drawn as survivors",
    )

    # Termination
    max_generations: int = Field(
        default=100,
        ge=1,
        description="Stop after this many generations",
    )

    target_fitness: float | None = Field(
        default=None,
        description="Stop once an individual reaches this fitness",
    )

    steady_generations: int | None = Field(
        default=None,
        ge=1,
        description="Stop when the best fitness is unchanged for this many generations",
    )

    time_limit: float | None = Field(
        default=None,
        gt=0.0,
        description="Stop after this many seconds of evolution",
    )

    objective: Literal["maximize", "minimize"] = Field(
        default="maximize",
        description="Whether higher or lower fitness is better",
    )

    seed: int | None = Field(
        default=None,
        description="Seed of the engine random generator (None for entropy)",
    )


# =============================================================================
# Selection Configuration
# =============================================================================


SelectorKind = Literal["tournament", "roulette", "random"]


class SelectionConfig(BaseModel):
    """Configuration of parent and survivor selection."""

    parent_selector: SelectorKind = Field(
        default="tournament",
        description="Selector used to pick parents",
    )

    survivor_selector: SelectorKind = Field(
        default="tournament",
        description="Selector used to pick survivors",
    )

    tournament_size: int = Field(
        default=3,
        ge=1,
        description="Contestants per tournament",
    )

    sorted: bool = Field(
        default=False,
        description="Sort the population before roulette selection",
    )


# =============================================================================
# Evaluation Configuration
# =============================================================================


class EvaluationConfig(BaseModel):
    """Configuration of fitness evaluation."""

    parallel: bool = Field(
        default=False,
        description="Evaluate individuals on a thread pool",
    )

    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Thread pool size",
    )

    seed: int | None = Field(
        default=None,
        description="Root seed of per-evaluation random substreams",
    )

    @field_validator("seed")
    @classmethod
    def validate_seed(cls, v: int | None, info) -> int | None:
        """Substreams are only handed out by the parallel evaluator."""
        if v is not None and not info.data.get("parallel", False):
            raise ValueError("evaluation seed requires parallel evaluation")
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Configuration of loguru sinks and progress reporting."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file",
    )

    serialize: bool = Field(
        default=False,
        description="Emit JSON log records",
    )

    progress: bool = Field(
        default=True,
        description="Log generation progress during evolution",
    )

    progress_every: int = Field(
        default=10,
        ge=1,
        description="Log one progress line per this many generations",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def apply(self) -> None:
        """Configure loguru with these settings."""
        configure_logging(
            log_level=self.level,
            log_file=self.log_file,
            serialize=self.serialize,
        )


# =============================================================================
# Main Configuration
# =============================================================================


class HelixConfig(BaseModel):
    """Complete Helix configuration."""

    project_name: str = Field(
        default="helix",
        description="Name of the experiment",
    )

    evolution: EvolutionConfig = Field(
        default_factory=EvolutionConfig,
        description="Evolution configuration",
    )

    selection: SelectionConfig = Field(
        default_factory=SelectionConfig,
        description="Selection configuration",
    )

    evaluation: EvaluationConfig = Field(
        default_factory=EvaluationConfig,
        description="Evaluation configuration",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> HelixConfig:
        """
        Load configuration from a YAML (``.yaml``/``.yml``) or JSON file.

        An empty YAML document yields the defaults.

        Args:
            path: Configuration file

        Returns:
            HelixConfig instance
        """
        path = Path(path)
        return cls._load_as(path, _suffix(path))

    def save(self, path: str | Path) -> None:
        """Write configuration to a YAML or JSON file chosen by suffix."""
        path = Path(path)
        self._save_as(path, _suffix(path))

    @classmethod
    def from_yaml(cls, path: str | Path) -> HelixConfig:
        return cls._load_as(path, ".yaml")

    @classmethod
    def from_json(cls, path: str | Path) -> HelixConfig:
        return cls._load_as(path, ".json")

    def to_yaml(self, path: str | Path) -> None:
        self._save_as(path, ".yaml")

    def to_json(self, path: str | Path) -> None:
        self._save_as(path, ".json")

    @classmethod
    def _load_as(cls, path: str | Path, suffix: str) -> HelixConfig:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        reader, _ = _CODECS[suffix]
        data = reader(path.read_text()) or {}
        logger.info("Loaded configuration", path=str(path), format=suffix.lstrip("."))
        return cls.model_validate(data)

    def _save_as(self, path: str | Path, suffix: str) -> None:
        path = Path(path)
        _, writer = _CODECS[suffix]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(writer(self.model_dump(mode="json")))
        logger.info("Saved configuration", path=str(path), format=suffix.lstrip("."))

    # -------------------------------------------------------------------------
    # Environment
    # -------------------------------------------------------------------------

    @classmethod
    def from_env(cls, prefix: str = "HELIX_") -> HelixConfig:
        """
        Build configuration from environment variables.

        Nested fields are separated by a double underscore:
        ``HELIX_EVOLUTION__POPULATION_SIZE=100`` sets
        ``evolution.population_size``. Values are parsed as booleans, integers
        or floats where possible. Unset fields keep their defaults.

        Args:
            prefix: Environment variable prefix

        Returns:
            HelixConfig instance
        """
        overrides = {
            name[len(prefix):].lower(): value
            for name, value in os.environ.items()
            if name.startswith(prefix)
        }
        data: dict[str, Any] = {}
        for dotted, raw in sorted(overrides.items()):
            *sections, leaf = dotted.split("__")
            target = data
            for section in sections:
                target = target.setdefault(section, {})
            target[leaf] = _parse_env_value(raw)

        logger.info("Loaded configuration from environment", prefix=prefix, overrides=len(overrides))
        return cls.model_validate(data)


def _parse_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for parse in (int, float):
        try:
            return parse(value)
        except ValueError:
            continue
    return value


def _dump_yaml(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def _dump_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2)


_CODECS: dict[str, tuple[Callable[[str], Any], Callable[[dict[str, Any]], str]]] = {
    ".yaml": (yaml.safe_load, _dump_yaml),
    ".yml": (yaml.safe_load, _dump_yaml),
    ".json": (json.loads, _dump_json),
}


def _suffix(path: Path) -> str:
    if path.suffix not in _CODECS:
        raise ValueError(f"Unknown config format: {path.suffix}")
    return path.suffix


# =============================================================================
# Configuration Factory
# =============================================================================


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "HELIX_",
) -> HelixConfig:
    """
    Load configuration from a file, or from the environment when no file is given.

    Args:
        config_path: YAML or JSON configuration file
        env_prefix: Environment variable prefix

    Returns:
        HelixConfig instance
    """
    if config_path:
        return HelixConfig.load(config_path)
    return HelixConfig.from_env(env_prefix)


__all__ = [
    "EvolutionConfig",
    "SelectionConfig",
    "EvaluationConfig",
    "LoggingConfig",
    "HelixConfig",
    "load_config",
]
