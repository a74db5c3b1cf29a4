"""Tests for configuration management module."""

from pathlib import Path

import pytest

from harmonic_seasonality.utils.config import DEFAULTS, Config, load_config


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_valid_config(self, tmp_config: Path) -> None:
        """Valid YAML should produce a Config with all sections."""
        config = load_config(str(tmp_config))
        assert isinstance(config, Config)
        assert "seed" in config.simulation
        assert "alpha" in config.analysis
        assert "level" in config.logging

    def test_config_simulation_values(self, tmp_config: Path) -> None:
        """Simulation section should carry the file's parameters."""
        config = load_config(str(tmp_config))
        assert config.simulation["n_years"] == 3
        assert config.simulation["seed"] == 7

    def test_config_analysis_values(self, tmp_config: Path) -> None:
        """Analysis section should have the covariates and threshold."""
        config = load_config(str(tmp_config))
        assert config.analysis["covariates"] == ["rainfall"]
        assert config.analysis["alpha"] == 0.05
        assert config.analysis["max_lag"] == 10

    def test_partial_config_uses_defaults(self, tmp_path: Path) -> None:
        """Omitted sections and keys should fall back to defaults."""
        path = tmp_path / "partial.yaml"
        path.write_text("analysis:\n  alpha: 0.01\n")
        config = load_config(str(path))
        assert config.analysis["alpha"] == 0.01
        assert config.analysis["period"] == DEFAULTS["analysis"]["period"]
        assert config.simulation == DEFAULTS["simulation"]

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """An empty YAML file should load as the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(str(path))
        assert config.logging == DEFAULTS["logging"]

    def test_defaults_not_mutated(self, tmp_path: Path) -> None:
        """Loading a config should not change the module defaults."""
        path = tmp_path / "seed.yaml"
        path.write_text("simulation:\n  seed: 123\n")
        load_config(str(path))
        assert DEFAULTS["simulation"]["seed"] == 42

    def test_invalid_alpha_raises(self, tmp_path: Path) -> None:
        """Alpha outside (0, 1) should be rejected."""
        path = tmp_path / "alpha.yaml"
        path.write_text("analysis:\n  alpha: 1.5\n")
        with pytest.raises(ValueError, match="alpha"):
            load_config(str(path))

    def test_unknown_section_raises(self, tmp_path: Path) -> None:
        """Unknown top-level sections should be rejected."""
        path = tmp_path / "extra.yaml"
        path.write_text("models:\n  lookback: 28\n")
        with pytest.raises(ValueError, match="Unknown"):
            load_config(str(path))

    def test_missing_config_raises(self, tmp_path: Path) -> None:
        """Loading a nonexistent file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nonexistent.yaml"))

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Malformed YAML should raise an error."""
        bad_file = tmp_path / "bad.yaml"
        bad_file.write_text("analysis:\n  covariates: [unterminated")
        with pytest.raises(Exception):
            load_config(str(bad_file))

    def test_default_config_path(self) -> None:
        """Default config path should load configs/config.yaml."""
        config = load_config()
        assert isinstance(config, Config)
        assert config.logging["level"] == "INFO"
        assert config.simulation["n_years"] == 19
