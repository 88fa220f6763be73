"""
Configuration management for twixter.

Uses Pydantic for validation and pydantic-settings for environment variable support.
"""

import os
from pathlib import Path
from string import Formatter
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from twixter.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "twixter" / "config.yaml"


class TwtxtConfig(BaseModel):
    """Identity and timeline settings of the local user.

    Hook commands are templates formatted with the other values of this
    section, e.g. ``scp {twtfile} example.org:/var/www/twtxt.txt``.
    """

    nick: str = Field(..., min_length=1, description="Nickname shown on own posts")
    twtfile: str = Field(..., min_length=1, description="Local feed file path")
    twturl: str = Field(..., min_length=1, description="Public URL of the local feed")
    limit_timeline: int = Field(..., ge=0, description="Number of entries shown in the timeline")
    use_abs_time: bool = Field(default=False, description="Show absolute timestamps")
    pre_tweet_hook: str = Field(default="", description="Shell command run before posting")
    post_tweet_hook: str = Field(default="", description="Shell command run after posting")

    @field_validator("twtfile")
    @classmethod
    def expand_user(cls, v: str) -> str:
        """Expand ``~`` in the feed path."""
        return os.path.expanduser(v)

    @model_validator(mode="after")
    def format_hooks(self) -> "TwtxtConfig":
        """Substitute section values into the hook templates."""
        values = {
            "nick": self.nick,
            "twtfile": self.twtfile,
            "twturl": self.twturl,
            "limit_timeline": self.limit_timeline,
            "use_abs_time": self.use_abs_time,
        }
        for name in ("pre_tweet_hook", "post_tweet_hook"):
            template = getattr(self, name)
            if not template:
                continue
            fields = {field for _, field, _, _ in Formatter().parse(template) if field}
            unknown = fields - values.keys()
            if unknown:
                raise ValueError(f"Unknown placeholder(s) in {name}: {sorted(unknown)}")
            setattr(self, name, template.format(**values))
        return self


class FetcherConfig(BaseSettings):
    """Feed fetcher configuration."""

    model_config = SettingsConfigDict(env_prefix="FETCHER_")

    timeout_seconds: float = Field(default=10.0, gt=0, le=300, description="Request timeout")
    user_agent: str = Field(
        default="twixter/0.1.0 (+https://github.com/twixter/twixter)",
        description="User-Agent header"
    )
    follow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=10, ge=0, le=20)
    max_workers: int = Field(default=8, ge=1, le=64, description="Maximum concurrent fetches")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Log format"
    )

    # File logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_path: str = Field(default="~/.cache/twixter/twixter.log", description="Log file path")
    rotation: str = Field(default="10 MB", description="Log rotation size")
    retention: str = Field(default="7 days", description="Log retention period")

    # Console logging
    console_enabled: bool = Field(default=True, description="Enable console logging")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v

    @field_validator("file_path")
    @classmethod
    def expand_user(cls, v: str) -> str:
        """Expand ``~`` in the log file path."""
        return os.path.expanduser(v)


class Config(BaseSettings):
    """Main application configuration.

    ``twtxt`` and ``following`` come from the configuration file and are
    required before a timeline can be produced or a post written. The
    ambient sections have defaults and honour environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="TWIXTER_",
        case_sensitive=False,
    )

    twtxt: Optional[TwtxtConfig] = Field(default=None, description="Local user settings")
    following: Optional[dict[str, str]] = Field(default=None, description="Followed nick -> URL")

    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("following", mode="before")
    @classmethod
    def normalize_following(cls, v):
        """Coerce nicks and URLs to strings."""
        if v is None:
            return v
        if not isinstance(v, dict):
            raise ValueError("following must be a mapping of nick to URL")
        return {str(nick): str(url) for nick, url in v.items()}

    def require_twtxt(self) -> TwtxtConfig:
        """Return the ``twtxt`` section or raise ConfigError."""
        if self.twtxt is None:
            raise ConfigError("Missing [twtxt] section in configuration")
        return self.twtxt

    def require_following(self) -> dict[str, str]:
        """Return the ``following`` section or raise ConfigError."""
        if self.following is None:
            raise ConfigError("Missing [following] section in configuration")
        return self.following


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config) -> Config:
    """Install ``config`` as the global configuration instance."""
    global _config
    _config = config
    return _config


def resolve_config_path(path: Optional[str] = None) -> Path:
    """Pick the configuration file: explicit path, $TWIXTER_CONFIG, then default."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get("TWIXTER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config_from_yaml(yaml_path: str) -> Config:
    """Load configuration from a YAML file.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        Config instance loaded from the file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid, or lacks
            the ``twtxt`` or ``following`` section.
    """
    import yaml

    yaml_file = Path(yaml_path).expanduser()
    if not yaml_file.exists():
        raise ConfigError(f"Configuration file not found: {yaml_file}")

    try:
        with yaml_file.open("r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read configuration file {yaml_file}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError(f"Configuration file {yaml_file} must contain a mapping")

    # An empty `following:` section means no followings, not a missing one.
    if "following" in config_dict and config_dict["following"] is None:
        config_dict["following"] = {}

    # Nested settings are built explicitly so their env vars still apply.
    config_classes = {
        "fetcher": FetcherConfig,
        "logging": LoggingConfig,
    }

    try:
        for key, config_class in config_classes.items():
            config_dict[key] = config_class(**(config_dict.get(key) or {}))
        config = Config(**config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {yaml_file}:\n{e}") from e

    config.require_twtxt()
    config.require_following()
    return config


def reload_config(yaml_path: Optional[str] = None) -> Config:
    """Reload configuration from the YAML file and install it globally."""
    return set_config(load_config_from_yaml(str(resolve_config_path(yaml_path))))
