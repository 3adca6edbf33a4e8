"""Configuration management for trajclust.

Supports loading configuration from:
1. CLI arguments (highest priority)
2. Config file (YAML)
3. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class ClusteringConfig(BaseModel):
    """Hierarchical clustering configuration."""

    linkage: Literal["complete", "average", "single"] = Field(
        default="complete",
        description="Linkage criterion used when cutting a distance matrix",
    )
    n_clusters: int = Field(default=3, ge=2, description="Default cluster count k")


class SlopeConfig(BaseModel):
    """Slope distance configuration."""

    weighting: Literal["none", "duration"] = Field(
        default="none",
        description="Weight squared slope differences by segment duration",
    )


class FrechetConfig(BaseModel):
    """Fréchet distance configuration."""

    max_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads used for pairwise Fréchet rows",
    )


class SenatorConfig(BaseModel):
    """Representative sampling configuration."""

    n_senators: int = Field(default=100, ge=2, description="Number of senators N")
    seed: int | None = Field(
        default=None,
        description="Seed for the medoid search; must be set to use senators",
    )
    n_samples: int = Field(default=5, ge=1, description="Number of CLARA subsamples")
    sample_size: int | None = Field(
        default=None,
        ge=2,
        description="Subsample size (defaults to 40 + 2N)",
    )
    max_iter: int = Field(default=100, ge=1, description="Maximum FasterPAM iterations")
    max_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads used for the nearest-medoid assignment",
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    formats: list[Literal["json", "csv", "png"]] = Field(default=["json", "csv", "png"])
    dpi: int = Field(default=150, ge=72, description="Image DPI for PNG output")


class Config(BaseModel):
    """Root configuration model."""

    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    slope: SlopeConfig = Field(default_factory=SlopeConfig)
    frechet: FrechetConfig = Field(default_factory=FrechetConfig)
    senators: SenatorConfig = Field(default_factory=SenatorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# Default config paths to search (in order)
CONFIG_SEARCH_PATHS = [
    Path("./trajclust_config.yaml"),
    Path("./trajclust_config.yml"),
    Path.home() / ".trajclust" / "config.yaml",
]


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from file or return defaults.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.

    Returns:
        Config object with loaded or default values.
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return _load_config_from_file(path)

    for search_path in CONFIG_SEARCH_PATHS:
        if search_path.exists():
            return _load_config_from_file(search_path)

    return Config()


def _load_config_from_file(path: Path) -> Config:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return Config(**data)


def merge_cli_overrides(
    config: Config, **overrides: str | int | float | bool | None
) -> Config:
    """Merge CLI argument overrides into configuration.

    Args:
        config: Base configuration object.
        **overrides: Key-value pairs to override, using double underscores for
                     nested keys (e.g., "clustering__linkage", "senators__seed").
                     None values are ignored.

    Returns:
        New Config object with overrides applied.
    """
    config_dict = config.model_dump()

    for key, value in overrides.items():
        if value is None:
            continue

        parts = key.split("__")
        if len(parts) == 1:
            if key in config_dict:
                config_dict[key] = value
        elif len(parts) == 2:
            section, field = parts
            if section in config_dict and field in config_dict[section]:
                config_dict[section][field] = value

    return Config(**config_dict)
