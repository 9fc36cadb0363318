"""
Configuration Loader
Loads configuration from config.yaml and environment variables
Environment variables take precedence over config file
"""
import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List

import constants
from structured_logger import get_logger


class Config:
    """Centralized configuration management"""

    def __init__(self, config_file: str = "config.yaml"):
        """
        Initialize configuration

        Args:
            config_file: Path to YAML config file
        """
        self.config_file = Path(config_file)
        self._config = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from YAML file, falling back to defaults"""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    self._config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                get_logger().warning("config_load_failed", path=str(self.config_file), error=str(e))
                self._config = self._get_defaults()
        else:
            self._config = self._get_defaults()

    def _get_defaults(self) -> Dict:
        """Get default configuration"""
        return copy.deepcopy({
            'server': {
                'host': '0.0.0.0',
                'port': 3000,
                'env': 'development'
            },
            'cors': {
                'allowed_origins': ['*']
            },
            'embeddings': {
                'provider': 'gemini',
                'model': constants.GEMINI_EMBEDDING_MODEL,
                'local_model': constants.LOCAL_EMBEDDING_MODEL,
                'timeout_seconds': constants.EMBEDDING_TIMEOUT,
                'max_concurrent_requests': constants.MAX_CONCURRENT_REQUESTS,
                'max_retries': 3
            },
            'retrieval': {
                'top_k': constants.DEFAULT_TOP_K,
                'confidence_threshold': constants.CONFIDENCE_THRESHOLD
            },
            'data': {
                'knowledge_base_path': constants.KNOWLEDGE_BASE_PATH,
                'embeddings_path': constants.EMBEDDINGS_PATH
            },
            'logging': {
                'level': 'INFO',
                'file': None
            },
            'validation': {
                'max_query_length': 1000
            }
        })

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation

        Args:
            key_path: Dot-separated path (e.g., 'server.port')
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_with_env(self, key_path: str, env_var: Optional[str] = None, default: Any = None) -> Any:
        """
        Get configuration value, checking environment variable first

        Args:
            key_path: Dot-separated path in config file
            env_var: Environment variable name (optional)
            default: Default value if not found

        Returns:
            Configuration value (env var takes precedence)
        """
        if env_var and os.getenv(env_var):
            env_value = os.getenv(env_var)
            if env_value.lower() in ('true', 'false'):
                return env_value.lower() == 'true'
            try:
                return int(env_value)
            except ValueError:
                try:
                    return float(env_value)
                except ValueError:
                    return env_value

        return self.get(key_path, default)

    def get_list(self, key_path: str, env_var: Optional[str] = None, default: Optional[List] = None) -> List:
        """
        Get list configuration value

        Args:
            key_path: Dot-separated path
            env_var: Environment variable (comma-separated)
            default: Default list

        Returns:
            List of values
        """
        if default is None:
            default = []

        if env_var and os.getenv(env_var):
            env_value = os.getenv(env_var)
            return [item.strip() for item in env_value.split(',') if item.strip()]

        value = self.get(key_path, default)
        if isinstance(value, list):
            return value
        elif isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return default

    # Convenience properties
    @property
    def server_host(self) -> str:
        return self.get('server.host', '0.0.0.0')

    @property
    def server_port(self) -> int:
        return self.get_with_env('server.port', 'PORT', 3000)

    @property
    def env(self) -> str:
        return str(self.get_with_env('server.env', 'ENV', 'development'))

    @property
    def is_production(self) -> bool:
        return self.env.lower() == 'production'

    @property
    def allowed_origins(self) -> List[str]:
        return self.get_list('cors.allowed_origins', 'ALLOWED_ORIGINS', ['*'])

    @property
    def google_api_key(self) -> Optional[str]:
        return os.getenv('GOOGLE_API_KEY') or os.getenv('GEMINI_API_KEY')

    @property
    def embedding_provider(self) -> str:
        provider = self.get_with_env('embeddings.provider', 'EMBEDDING_PROVIDER', 'gemini')
        # YAML reads bare off/no/false as a boolean
        if provider is False or str(provider).lower() in ('false', 'no'):
            return 'none'
        return str(provider).lower()

    @property
    def embedding_model(self) -> str:
        return self.get('embeddings.model', constants.GEMINI_EMBEDDING_MODEL)

    @property
    def local_embedding_model(self) -> str:
        return self.get('embeddings.local_model', constants.LOCAL_EMBEDDING_MODEL)

    @property
    def embedding_timeout(self) -> float:
        return float(self.get_with_env('embeddings.timeout_seconds', 'EMBEDDING_TIMEOUT', constants.EMBEDDING_TIMEOUT))

    @property
    def max_concurrent_requests(self) -> int:
        return int(self.get('embeddings.max_concurrent_requests', constants.MAX_CONCURRENT_REQUESTS))

    @property
    def max_retries(self) -> int:
        return int(self.get('embeddings.max_retries', 3))

    @property
    def retrieval_top_k(self) -> int:
        return int(self.get_with_env('retrieval.top_k', 'RETRIEVAL_TOP_K', constants.DEFAULT_TOP_K))

    @property
    def confidence_threshold(self) -> float:
        return float(self.get_with_env('retrieval.confidence_threshold', 'CONFIDENCE_THRESHOLD',
                                       constants.CONFIDENCE_THRESHOLD))

    @property
    def knowledge_base_path(self) -> str:
        return self.get_with_env('data.knowledge_base_path', 'KNOWLEDGE_BASE_PATH', constants.KNOWLEDGE_BASE_PATH)

    @property
    def embeddings_path(self) -> str:
        return self.get_with_env('data.embeddings_path', 'EMBEDDINGS_PATH', constants.EMBEDDINGS_PATH)

    @property
    def max_query_length(self) -> int:
        return int(self.get('validation.max_query_length', 1000))

    @property
    def log_level(self) -> str:
        return str(self.get_with_env('logging.level', 'LOG_LEVEL', 'INFO'))

    @property
    def log_file(self) -> Optional[str]:
        return self.get_with_env('logging.file', 'LOG_FILE', None)

# Global config instance
_config_instance: Optional[Config] = None

def get_config() -> Config:
    """Get global config instance (singleton)"""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance
