"""Unit tests for configuration loading and validation."""

import pytest

from standardizer.config import (
    AppConfig,
    ConfigurationError,
    load_config,
    load_environment_config,
    validate_config_file,
)
from standardizer.config.environment import DEFAULT_DATABASE_URL
from standardizer.config.validators import check_for_warnings


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every variable the loader reads."""
    for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def write_config(tmp_path, content):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


class TestConfigurationLoading:
    """Test load_config()."""

    def test_load_full_config(self, tmp_path, clean_env):
        """Test that every section is read."""
        config_file = write_config(
            tmp_path,
            """
matching:
  library_fuzzy_floor: 0.8
  review_threshold: 85
  batch_workers: 4
headers:
  acceptance_floor: 0.6
  extra_synonyms:
    role: [" Funktion ", "funktion", ""]
import_context:
  industry: SaaS
  region: US
  auto_confirm_threshold: 90
logging:
  level: DEBUG
  format: json
""",
        )

        app_config, env_config = load_config(config_file)

        assert app_config.matching.library_fuzzy_floor == 0.8
        assert app_config.matching.review_threshold == 85
        assert app_config.matching.batch_workers == 4
        assert app_config.matching.exact_accept_threshold == 90
        assert app_config.headers.acceptance_floor == 0.6
        assert app_config.headers.extra_synonyms == {"role": ["funktion"]}
        assert app_config.import_context.industry == "SaaS"
        assert app_config.import_context.auto_confirm_threshold == 90
        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert env_config.database_url == DEFAULT_DATABASE_URL

    def test_empty_file_uses_defaults(self, tmp_path, clean_env):
        """Test that every setting has a default."""
        app_config, _ = load_config(write_config(tmp_path, ""))

        assert app_config == AppConfig()
        assert app_config.import_context.region == "EU"
        assert app_config.import_context.auto_confirm_threshold is None

    def test_no_file_uses_defaults(self, tmp_path, clean_env):
        """Test the fallback when no config file is found."""
        clean_env.chdir(tmp_path)
        app_config, _ = load_config()
        assert app_config == AppConfig()

    def test_default_location_is_discovered(self, tmp_path, clean_env):
        """Test that ./config.yaml is picked up."""
        write_config(tmp_path, "matching:\n  review_threshold: 70\n")
        clean_env.chdir(tmp_path)
        app_config, _ = load_config()
        assert app_config.matching.review_threshold == 70

    def test_explicit_missing_file(self, tmp_path, clean_env):
        """Test that a named but missing file is an error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_syntax(self, tmp_path, clean_env):
        """Test YAML syntax errors."""
        config_file = write_config(tmp_path, "matching: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(config_file)

    def test_top_level_must_be_mapping(self, tmp_path, clean_env):
        """Test that a list at the top level is rejected."""
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(write_config(tmp_path, "- a\n- b\n"))


class TestConfigurationValidation:
    """Test model-level validation."""

    def test_floor_out_of_range(self, tmp_path, clean_env):
        """Test range checks on similarity floors."""
        config_file = write_config(tmp_path, "matching:\n  taxonomy_fuzzy_floor: 1.5\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)
        assert any("taxonomy_fuzzy_floor" in error for error in exc_info.value.errors)

    def test_exact_threshold_cannot_go_below_exact_floor(self, tmp_path, clean_env):
        """Test that the exact tier cannot accept below its minimum confidence."""
        config_file = write_config(tmp_path, "matching:\n  exact_accept_threshold: 50\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file)

    def test_auto_confirm_below_review_threshold(self):
        """Test that results needing review cannot be learned automatically."""
        with pytest.raises(ValueError, match="auto_confirm_threshold"):
            AppConfig.model_validate(
                {"matching": {"review_threshold": 80}, "import_context": {"auto_confirm_threshold": 70}}
            )

    def test_invalid_log_format(self, tmp_path, clean_env):
        """Test enum validation."""
        config_file = write_config(tmp_path, "logging:\n  format: xml\n")
        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            load_config(config_file)

    def test_blank_context_values_become_none(self):
        """Test that blank context strings are dropped."""
        config = AppConfig.model_validate({"import_context": {"industry": "  ", "region": ""}})
        assert config.import_context.industry is None
        assert config.import_context.region is None

    def test_error_message_lists_errors_and_suggestions(self):
        """Test ConfigurationError rendering."""
        error = ConfigurationError("Broken", errors=["first", "second"], suggestions=["fix it"])
        message = str(error)
        assert "Broken" in message
        assert "  1. first" in message
        assert "  2. second" in message
        assert "  - fix it" in message


class TestConfigurationWarnings:
    """Test check_for_warnings()."""

    def test_extreme_floors_warn(self):
        """Test warnings for floors that disable or loosen fuzzy matching."""
        warnings = check_for_warnings({"matching": {"library_fuzzy_floor": 0.99, "taxonomy_fuzzy_floor": 0.3}})
        assert len(warnings) == 2

    def test_unknown_header_field_warns(self):
        """Test that extra synonyms for unknown fields are reported."""
        warnings = check_for_warnings(
            {"headers": {"extra_synonyms": {"role": ["x"], "costCenter": ["y"]}}},
            known_fields=["role"],
        )
        assert len(warnings) == 1
        assert "costCenter" in warnings[0]

    def test_loader_emits_warnings(self, tmp_path, clean_env):
        """Test that load_config surfaces warnings as UserWarning."""
        config_file = write_config(tmp_path, "matching:\n  batch_workers: 16\n")
        with pytest.warns(UserWarning, match="batch_workers"):
            load_config(config_file)

    def test_clean_config_has_no_warnings(self):
        """Test the default configuration."""
        assert check_for_warnings({}) == []


class TestEnvironmentVariables:
    """Test load_environment_config()."""

    def test_defaults(self, clean_env):
        """Test that all variables are optional."""
        env_config = load_environment_config()
        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.log_level is None
        assert env_config.environment == "local"

    def test_values_are_read(self, clean_env):
        """Test reading every variable."""
        clean_env.setenv("DATABASE_URL", "sqlite:///:memory:")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("ENVIRONMENT", "staging")

        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:///:memory:"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"

    def test_invalid_values_are_collected(self, clean_env):
        """Test that every invalid variable is reported at once."""
        clean_env.setenv("DATABASE_URL", "not-a-url")
        clean_env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert len(exc_info.value.errors) == 2


class TestValidateConfigFile:
    """Test the standalone validation helper."""

    def test_valid_file(self, tmp_path, capsys):
        """Test success output."""
        assert validate_config_file(write_config(tmp_path, "matching:\n  batch_workers: 2\n"))
        assert "is valid" in capsys.readouterr().out

    def test_invalid_file(self, tmp_path, capsys):
        """Test failure output."""
        assert not validate_config_file(write_config(tmp_path, "matching:\n  batch_workers: 0\n"))
        assert "validation failed" in capsys.readouterr().out
