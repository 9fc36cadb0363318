"""
Tests for YAML configuration with environment overrides.
"""
import pytest

import constants
from config_loader import Config

ENV_VARS = (
    "PORT", "ENV", "ALLOWED_ORIGINS", "EMBEDDING_PROVIDER", "EMBEDDING_TIMEOUT",
    "RETRIEVAL_TOP_K", "CONFIDENCE_THRESHOLD", "KNOWLEDGE_BASE_PATH", "EMBEDDINGS_PATH",
    "LOG_LEVEL", "LOG_FILE", "GOOGLE_API_KEY", "GEMINI_API_KEY"
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 8080\n"
        "  env: production\n"
        "cors:\n"
        "  allowed_origins:\n"
        "    - https://example.com\n"
        "embeddings:\n"
        "  provider: Local\n"
        "retrieval:\n"
        "  top_k: 5\n"
        "  confidence_threshold: 0.6\n",
        encoding="utf-8"
    )
    return path


class TestConfig:

    def test_defaults_when_file_missing(self, tmp_path):
        config = Config(str(tmp_path / "missing.yaml"))
        assert config.server_port == 3000
        assert config.env == 'development'
        assert config.is_production is False
        assert config.allowed_origins == ['*']
        assert config.embedding_provider == 'gemini'
        assert config.retrieval_top_k == constants.DEFAULT_TOP_K
        assert config.confidence_threshold == constants.CONFIDENCE_THRESHOLD
        assert config.embedding_timeout == float(constants.EMBEDDING_TIMEOUT)
        assert config.knowledge_base_path == constants.KNOWLEDGE_BASE_PATH
        assert config.log_file is None

    def test_defaults_are_not_shared(self, tmp_path):
        first = Config(str(tmp_path / "missing.yaml"))
        first._config['server']['port'] = 1
        assert Config(str(tmp_path / "missing.yaml")).server_port == 3000

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed\n", encoding="utf-8")
        assert Config(str(path)).server_port == 3000

    def test_yaml_values(self, config_file):
        config = Config(str(config_file))
        assert config.server_port == 8080
        assert config.is_production is True
        assert config.allowed_origins == ['https://example.com']
        assert config.embedding_provider == 'local'
        assert config.retrieval_top_k == 5
        assert config.confidence_threshold == 0.6

    def test_missing_keys_use_default(self, config_file):
        config = Config(str(config_file))
        assert config.get('data.embeddings_path', 'fallback.json') == 'fallback.json'
        assert config.get('server.port.nested', 'x') == 'x'
        assert config.max_query_length == 1000

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("RETRIEVAL_TOP_K", "1")
        monkeypatch.setenv("CONFIDENCE_THRESHOLD", "0.75")
        monkeypatch.setenv("EMBEDDING_PROVIDER", "NONE")
        monkeypatch.setenv("ENV", "staging")

        config = Config(str(config_file))
        assert config.server_port == 9000
        assert config.retrieval_top_k == 1
        assert config.confidence_threshold == 0.75
        assert config.embedding_provider == 'none'
        assert config.is_production is False

    def test_env_bool_conversion(self, config_file, monkeypatch):
        monkeypatch.setenv("LOG_FILE", "True")
        assert Config(str(config_file)).get_with_env('logging.file', 'LOG_FILE') is True

    def test_env_list(self, config_file, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")
        assert Config(str(config_file)).allowed_origins == ['https://a.example', 'https://b.example']

    def test_api_key_fallback(self, config_file, monkeypatch):
        config = Config(str(config_file))
        assert config.google_api_key is None
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert config.google_api_key == "gemini-key"
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert config.google_api_key == "google-key"

    @pytest.mark.parametrize("value", ["off", "no", "false", "Off"])
    def test_provider_yaml_boolean_means_none(self, tmp_path, value):
        path = tmp_path / "config.yaml"
        path.write_text(f"embeddings:\n  provider: {value}\n", encoding="utf-8")
        assert Config(str(path)).embedding_provider == 'none'

    def test_provider_env_false_means_none(self, config_file, monkeypatch):
        monkeypatch.setenv("EMBEDDING_PROVIDER", "false")
        assert Config(str(config_file)).embedding_provider == 'none'
