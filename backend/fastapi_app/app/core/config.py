"""
Configuration loader for the ShieldNav safety backend.

This module loads configuration from config.yaml and provides
easy access to all system parameters.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

SECRET_ENV_VARS = {
    "providers.weather.api_key": "OPENWEATHER_API_KEY",
}


class Config:
    """Configuration manager for the application."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config.yaml. If None, looks for config.yaml
                        in the project root.
        """
        if config_path is None:
            # Navigate up to project root (from backend/fastapi_app/app/core/)
            current_dir = Path(__file__).resolve()
            project_root = current_dir.parent.parent.parent.parent.parent
            config_path = project_root / "config.yaml"

        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Please create config.yaml from config.example.yaml"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Secrets listed in SECRET_ENV_VARS are read from the environment first.

        Args:
            key: Configuration key in dot notation (e.g., 'scoring.score_floor')
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        env_name = SECRET_ENV_VARS.get(key)
        if env_name and os.getenv(env_name):
            return os.getenv(env_name)

        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    @property
    def providers(self) -> Dict[str, Any]:
        """Get geocoding/routing/weather provider configuration."""
        return self._config.get('providers', {})

    @property
    def sampling(self) -> Dict[str, Any]:
        """Get route sampling configuration."""
        return self._config.get('sampling', {})

    @property
    def proximity(self) -> Dict[str, Any]:
        """Get proximity radius configuration."""
        return self._config.get('proximity', {})

    @property
    def scoring(self) -> Dict[str, Any]:
        """Get risk scoring configuration."""
        return self._config.get('scoring', {})

    @property
    def alerts(self) -> Dict[str, Any]:
        """Get live alert configuration."""
        return self._config.get('alerts', {})

    @property
    def navigation(self) -> Dict[str, Any]:
        """Get navigation session configuration."""
        return self._config.get('navigation', {})

    @property
    def hotspots(self) -> Dict[str, Any]:
        """Get hotspot store configuration."""
        return self._config.get('hotspots', {})

    @property
    def backend(self) -> Dict[str, Any]:
        """Get backend configuration."""
        return self._config.get('backend', {})


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> None:
    """Reload configuration from file."""
    global _config
    _config = None
    get_config()
