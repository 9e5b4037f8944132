"""Tests for configuration module."""
import pytest
from pathlib import Path


class TestSettings:
    """Test settings loading and validation."""

    def test_settings_loads(self):
        """Ensure settings module loads without error."""
        from matchday.config.settings import settings
        assert settings is not None

    def test_default_values(self):
        """Test default settings values."""
        from matchday.config.settings import AppSettings

        settings = AppSettings()

        assert settings.log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        assert settings.live_poll_seconds == 60
        assert settings.page_size == 12
        assert settings.recent_rounds == 2
        assert settings.default_model == "openai/gpt-5.2"

    def test_log_dir_is_path(self):
        """Test log_dir is a Path object."""
        from matchday.config.settings import settings
        assert isinstance(settings.log_dir, Path)

    def test_log_level_normalised(self):
        """Test lowercase log level is upper-cased."""
        from matchday.config.settings import AppSettings

        settings = AppSettings(log_level="debug")
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test invalid log level is rejected."""
        from matchday.config.settings import AppSettings

        with pytest.raises(ValueError):
            AppSettings(log_level="LOUD")

    def test_page_size_must_be_positive(self):
        """Test zero page size is rejected."""
        from matchday.config.settings import AppSettings

        with pytest.raises(ValueError):
            AppSettings(page_size=0)

    def test_backend_env_prefix(self, monkeypatch):
        """Test backend settings read BACKEND_ variables."""
        from matchday.config.settings import BackendSettings

        monkeypatch.setenv("BACKEND_BASE_URL", "https://dash.example.com")
        monkeypatch.setenv("BACKEND_AUTH_COOKIE", "s3cret")

        backend = BackendSettings()
        assert backend.base_url == "https://dash.example.com"
        assert backend.auth_cookie.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(backend)

    def test_workflow_not_configured_by_default(self, monkeypatch):
        """Test workflow settings report missing webhook URL."""
        from matchday.config.settings import WorkflowSettings

        monkeypatch.delenv("WORKFLOW_PREDICTION_WEBHOOK_URL", raising=False)
        workflow = WorkflowSettings(_env_file=None)
        assert workflow.is_configured() is False
        assert workflow.timeout_seconds == 300.0

    def test_model_list(self):
        """Test selectable models have id, name and provider."""
        from matchday.config.settings import AI_MODELS

        assert AI_MODELS[0]["id"] == "openai/gpt-5.2"
        for model in AI_MODELS:
            assert {"id", "name", "provider"} <= set(model)


class TestFactorConfig:
    """Test factor system loading."""

    def test_load_factor_systems(self):
        """Test both factor systems are present."""
        from matchday.config.settings import load_factor_config

        config = load_factor_config()

        assert set(config) == {"A-F", "A-I"}
        assert len(config["A-F"]) == 6
        assert len(config["A-I"]) == 9

    def test_current_system_weights(self):
        """Test A-F weights."""
        from matchday.config.settings import load_factor_config

        config = load_factor_config()
        weights = [f["weight"] for f in config["A-F"].values()]

        assert weights == [24, 22, 11, 20, 13, 10]

    def test_legacy_system_weights(self):
        """Test A-I weights."""
        from matchday.config.settings import load_factor_config

        config = load_factor_config()
        weights = [f["weight"] for f in config["A-I"].values()]

        assert weights == [18, 16, 14, 10, 12, 10, 5, 8, 7]

    def test_weights_must_sum_to_100(self, tmp_path):
        """Test a system whose weights do not cover the index is rejected."""
        from matchday.config.settings import load_factor_config

        path = tmp_path / "factors.yaml"
        path.write_text(
            "A-F:\n"
            "  A_base_strength: {label: Base, weight: 60}\n"
            "  B_form: {label: Form, weight: 30}\n"
        )

        with pytest.raises(ValueError, match="sum to 90"):
            load_factor_config(path)

    def test_missing_file(self, tmp_path):
        """Test missing factor file raises."""
        from matchday.config.settings import load_factor_config

        with pytest.raises(FileNotFoundError):
            load_factor_config(tmp_path / "missing.yaml")

    def test_unparseable_file(self, tmp_path):
        """Test broken YAML raises RuntimeError."""
        from matchday.config.settings import load_factor_config

        path = tmp_path / "factors.yaml"
        path.write_text("A-F: [unclosed\n")

        with pytest.raises(RuntimeError):
            load_factor_config(path)


class TestStreamlitSecrets:
    """Test Streamlit secrets are copied into the environment."""

    def test_flat_backend_key_with_workflow_section(self):
        """Test a flat BACKEND_BASE_URL is read even when a workflow section exists."""
        import os
        from unittest.mock import patch

        from matchday.config import load_streamlit_secrets

        secrets = {
            "BACKEND_BASE_URL": "https://matchday.example.com",
            "workflow": {"prediction_webhook_url": "https://hooks.example.com/predict"},
        }
        with patch.dict(os.environ, {}), patch("streamlit.secrets", secrets):
            os.environ.pop("BACKEND_BASE_URL", None)
            os.environ.pop("WORKFLOW_PREDICTION_WEBHOOK_URL", None)

            load_streamlit_secrets()

            assert os.environ["BACKEND_BASE_URL"] == "https://matchday.example.com"
            assert os.environ["WORKFLOW_PREDICTION_WEBHOOK_URL"] == "https://hooks.example.com/predict"

    def test_backend_section(self):
        """Test the nested backend section is read."""
        import os
        from unittest.mock import patch

        from matchday.config import load_streamlit_secrets

        secrets = {"backend": {"base_url": "https://nested.example.com", "auth_cookie": "abc"}}
        with patch.dict(os.environ, {}), patch("streamlit.secrets", secrets):
            os.environ.pop("BACKEND_BASE_URL", None)
            os.environ.pop("BACKEND_AUTH_COOKIE", None)

            load_streamlit_secrets()

            assert os.environ["BACKEND_BASE_URL"] == "https://nested.example.com"
            assert os.environ["BACKEND_AUTH_COOKIE"] == "abc"
