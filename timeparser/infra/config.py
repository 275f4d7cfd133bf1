"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (YAML, env vars, defaults)
- Easy to test with different configurations
"""

import os
from pathlib import Path
from typing import List, Optional
import yaml

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseModel):
    """Connection to the text-generation backend (Ollama)."""
    backend: str = Field(default="ollama", description="Completion backend")
    base_url: str = "http://127.0.0.1:11434"
    model: str = "gemma3:4b"
    timeout: Optional[float] = Field(
        default=None,
        description="Seconds to wait for a completion; None waits indefinitely"
    )


class ServerSettings(BaseModel):
    """HTTP surface"""
    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseSettings):
    """
    Application settings with multiple sources:
    1. Default values (hardcoded)
    2. YAML config file
    3. Environment variables (highest priority)
    """
    model_config = SettingsConfigDict(
        env_prefix='TIMEPARSER_',
        env_file='.env',
        env_file_encoding='utf-8',
        env_nested_delimiter='__'
    )

    # Application paths
    app_name: str = "TimeParser"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    # Database
    database_url: Optional[str] = None

    # Catalog source, read once at startup
    catalog_path: Path = Path("config/catalog.json")
    clear_entries_on_startup: bool = False

    log_level: str = "INFO"

    llm: LLMSettings = LLMSettings()
    server: ServerSettings = ServerSettings()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        self._load_yaml_config()

    def _init_paths(self):
        """Initialize default paths based on OS"""
        if self.config_dir is None:
            if os.name == 'nt':  # Windows
                base = Path(os.getenv('APPDATA'))
            else:  # Linux/Mac
                base = Path.home() / '.config'
            self.config_dir = base / self.app_name.lower()

        if self.data_dir is None:
            if os.name == 'nt':  # Windows
                base = Path(os.getenv('APPDATA'))
            else:  # Linux/Mac
                base = Path.home() / '.local' / 'share'
            self.data_dir = base / self.app_name.lower()

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _load_yaml_config(self):
        """Load the llm/server sections from a YAML file"""
        # First check in workspace config folder
        config_file = Path("config/settings.yaml")
        if not config_file.exists():
            # Then check in user's config directory
            config_file = self.config_dir / "settings.yaml"

        if config_file.exists():
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
            if config_data:
                # Keys set by env or kwargs win over the file, key by key
                if config_data.get('llm'):
                    self.llm = LLMSettings(**{
                        **config_data['llm'],
                        **self.llm.model_dump(exclude_unset=True),
                    })
                if config_data.get('server'):
                    self.server = ServerSettings(**{
                        **config_data['server'],
                        **self.server.model_dump(exclude_unset=True),
                    })
                if 'catalog_path' in config_data and 'catalog_path' not in self.model_fields_set:
                    self.catalog_path = Path(config_data['catalog_path'])

    def get_db_url(self) -> str:
        """Get database URL, creating default if not set"""
        if self.database_url:
            return self.database_url

        db_path = self.data_dir / 'timeparser.db'
        return f"sqlite+aiosqlite:///{db_path}"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from file"""
    global _settings
    _settings = Settings()
    return _settings
