"""
Generator settings.

Settings come from an optional `ddsl.yaml` file and from DDSL_* environment
variables, which win over the file. CLI flags are applied last by the
command that runs the generation.

    # ddsl.yaml
    design_dir: design
    libraries:
      - ../shared/design
    out_dir: generated
    workers: 4
    targets: [server, client]
    log_level: INFO
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE_NAME = "ddsl.yaml"
TARGET_NAMES = ("server", "client")


class GeneratorSettings(BaseSettings):
    design_dir: Optional[Path] = None
    libraries: List[Path] = []
    out_dir: Path = Path("generated")
    workers: int = 1
    targets: List[str] = list(TARGET_NAMES)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="DDSL_", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # environment before file values, which arrive as init kwargs
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("workers")
    @classmethod
    def _check_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("workers must be at least 1")
        return value

    @field_validator("targets")
    @classmethod
    def _check_targets(cls, value: List[str]) -> List[str]:
        unknown = [t for t in value if t not in TARGET_NAMES]
        if unknown:
            raise ValueError(f"unknown target(s): {', '.join(unknown)}")
        return value


def _resolve_paths(values: dict, base: Path) -> dict:
    """Paths in a config file are relative to the file's directory."""
    resolved = dict(values)
    for key in ("design_dir", "out_dir"):
        if resolved.get(key):
            resolved[key] = base / resolved[key]
    if resolved.get("libraries"):
        resolved["libraries"] = [base / p for p in resolved["libraries"]]
    return resolved


def load_settings(path=None) -> GeneratorSettings:
    """
    Load settings from a YAML file (if given or present in the working
    directory) and the environment.
    """
    if path is None and Path(CONFIG_FILE_NAME).is_file():
        path = CONFIG_FILE_NAME
    if path is None:
        return GeneratorSettings()

    config_path = Path(path)
    with open(config_path, "r", encoding="utf-8") as f:
        values = yaml.safe_load(f) or {}
    if not isinstance(values, dict):
        raise ValueError(f"{config_path}: expected a mapping at the top level")
    return GeneratorSettings(**_resolve_paths(values, config_path.parent))
