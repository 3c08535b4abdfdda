"""framefit configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration value is unusable.

    Example:
        >>> raise ConfigError("PROBE_MAX_ATTEMPTS", "must be >= 1")
        Traceback (most recent call last):
        ...
        ConfigError: Invalid PROBE_MAX_ATTEMPTS: must be >= 1
    """

    def __init__(self, key_name: str, problem: str) -> None:
        """Initialize configuration error.

        Args:
            key_name: Name of the offending setting.
            problem: Short description of what is wrong with it.
        """
        self.key_name = key_name
        self.problem = problem
        super().__init__(f"Invalid {key_name}: {problem}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Retry / timeout controller
    PROBE_MAX_ATTEMPTS: int = 3
    PROBE_DEADLINE_MS: int = 15000  # Hard wall-clock ceiling per analysis
    PROBE_BASE_DELAY_MS: int = 1000  # Backoff: base * 2**attempt

    # Default HTTP prober
    PROBE_REQUEST_TIMEOUT_S: float = 10.0
    PROBE_ORIGIN: str = "http://localhost"  # Sent as Origin in cross-origin mode
    PROBE_USER_AGENT: str = "framefit/0.1"

    # Render frame
    TARGET_WIDTH: int = 375  # Mobile viewport width, 16:9 frame


# Singleton instance for import convenience
settings = Settings()
