"""
Unit tests for generator settings and logging configuration.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from design_dsl.api.gen_logging import get_logger, resolve_level
from design_dsl.config import GeneratorSettings, load_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("DESIGN_DIR", "LIBRARIES", "OUT_DIR", "WORKERS", "TARGETS", "LOG_LEVEL"):
        monkeypatch.delenv(f"DDSL_{name}", raising=False)
    return monkeypatch


class TestSettings:
    """Test settings defaults, files and environment overrides."""

    def test_defaults(self, clean_env):
        settings = GeneratorSettings()
        assert settings.design_dir is None
        assert settings.out_dir == Path("generated")
        assert settings.workers == 1
        assert settings.targets == ["server", "client"]

    def test_file_paths_are_relative_to_file(self, clean_env, temp_output_dir):
        config = temp_output_dir / "ddsl.yaml"
        config.write_text(
            "design_dir: design\n"
            "libraries:\n"
            "  - ../shared\n"
            "workers: 4\n"
            "targets: [server]\n",
            encoding="utf-8",
        )
        settings = load_settings(config)
        assert settings.design_dir == temp_output_dir / "design"
        assert settings.libraries == [temp_output_dir / "../shared"]
        assert settings.out_dir == Path("generated")
        assert settings.workers == 4
        assert settings.targets == ["server"]

    def test_environment_wins_over_file(self, clean_env, temp_output_dir):
        config = temp_output_dir / "ddsl.yaml"
        config.write_text("workers: 4\nlog_level: INFO\n", encoding="utf-8")
        clean_env.setenv("DDSL_WORKERS", "8")
        clean_env.setenv("DDSL_LOG_LEVEL", "DEBUG")
        settings = load_settings(config)
        assert settings.workers == 8
        assert settings.log_level == "DEBUG"

    def test_config_in_working_directory(self, clean_env, temp_output_dir):
        (temp_output_dir / "ddsl.yaml").write_text("workers: 3\n", encoding="utf-8")
        clean_env.chdir(temp_output_dir)
        assert load_settings().workers == 3

    def test_no_config_file(self, clean_env, temp_output_dir):
        clean_env.chdir(temp_output_dir)
        assert load_settings() == GeneratorSettings()

    def test_invalid_values(self, clean_env):
        with pytest.raises(ValidationError, match="workers must be at least 1"):
            GeneratorSettings(workers=0)
        with pytest.raises(ValidationError, match="unknown target"):
            GeneratorSettings(targets=["mobile"])

    def test_non_mapping_file(self, clean_env, temp_output_dir):
        config = temp_output_dir / "ddsl.yaml"
        config.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_settings(config)


class TestLogging:
    """Test logger naming and level resolution."""

    def test_logger_hierarchy(self):
        assert get_logger().name == "ddsl.gen"
        assert get_logger("design_dsl.api.resolvers.relationships").name == "ddsl.gen.relationships"
        assert get_logger("entity-files").name == "ddsl.gen.entity-files"

    def test_flags_win_over_level_name(self):
        assert resolve_level(verbose=True, level_name="ERROR") == logging.DEBUG
        assert resolve_level(quiet=True) == logging.WARNING
        assert resolve_level(level_name="error") == logging.ERROR
        assert resolve_level(level_name="nonsense") == logging.INFO
