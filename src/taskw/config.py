"""taskw.yaml loading.

Relative paths in the config are resolved against the directory holding the
config file (the project root), not the process working directory.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, PrivateAttr
from pydantic import ValidationError as PydanticValidationError

from taskw.errors import ConfigError
from taskw.settings import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_DEPENDENCIES_FILE,
    DEFAULT_ROUTES_FILE,
    ENV_CONFIG,
)

logger = structlog.get_logger(__name__)


class ProjectConfig(BaseModel):
    module: str = Field(default="", description="Go module path from go.mod")


class PathsConfig(BaseModel):
    scan_dirs: list[str] = Field(default_factory=lambda: ["."])
    output_dir: str = "."


class OutputConfig(BaseModel):
    enabled: bool = True
    output_file: str


class GenerationConfig(BaseModel):
    routes: OutputConfig = Field(
        default_factory=lambda: OutputConfig(output_file=DEFAULT_ROUTES_FILE)
    )
    dependencies: OutputConfig = Field(
        default_factory=lambda: OutputConfig(
            output_file=DEFAULT_DEPENDENCIES_FILE
        )
    )


class Config(BaseModel):
    version: str = "1.0"
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    _root: Path = PrivateAttr(default_factory=Path.cwd)

    @property
    def root(self) -> Path:
        return self._root

    def with_root(self, root: Path) -> Config:
        self._root = root.resolve()
        return self

    def resolve(self, rel: str | Path) -> Path:
        path = Path(rel)
        return path if path.is_absolute() else (self._root / path)

    @property
    def output_dir(self) -> Path:
        return self.resolve(self.paths.output_dir)

    @property
    def output_package(self) -> str:
        """Go package name of the generated files: the output dir's name."""
        return self.output_dir.resolve().name

    @property
    def routes_output_path(self) -> Path:
        return self.output_dir / self.generation.routes.output_file

    @property
    def dependencies_output_path(self) -> Path:
        return self.output_dir / self.generation.dependencies.output_file

    def save(self, path: Path | None = None) -> Path:
        target = path or (self._root / DEFAULT_CONFIG_FILE)
        data = self.model_dump(mode="json")
        try:
            target.write_text(
                yaml.safe_dump(data, sort_keys=False), encoding="utf-8"
            )
        except OSError as e:
            raise ConfigError(f"error writing config file {target}: {e}") from e
        return target


def detect_go_module(root: Path) -> str:
    """Read the module path from ``root/go.mod``; empty if there is none."""
    go_mod = root / "go.mod"
    try:
        content = go_mod.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
    except OSError as e:
        raise ConfigError(f"could not read {go_mod}: {e}") from e

    for line in content.splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line[len("module ") :].strip().strip('"')
    raise ConfigError(f"could not detect Go module name from {go_mod}")


def default_config_path() -> Path:
    return Path(os.environ.get(ENV_CONFIG, DEFAULT_CONFIG_FILE))


def load_config(path: Path | None = None) -> Config:
    """Load taskw.yaml, falling back to defaults when it does not exist."""
    config_path = path or default_config_path()
    root = config_path.resolve().parent

    data: dict = {}
    if config_path.is_file():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"error reading config file {config_path}: {e}"
            ) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        data = loaded or {}
        logger.debug("loaded config", path=str(config_path))
    else:
        logger.debug("no config file, using defaults", path=str(config_path))

    try:
        config = Config.model_validate(data).with_root(root)
    except PydanticValidationError as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e

    if not config.project.module:
        config.project.module = detect_go_module(root)
    return config
