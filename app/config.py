"""Application configuration management."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    These settings are automatically loaded from the .env file or environment variables.
    The API token should be stored in the environment, not hardcoded.

    Attributes:
        bria_api_token: Bria API token sent with every request
        bria_base_url: Root of the Bria v2 API
        request_delay: Seconds to wait after each submission (10 per minute)
        poll_interval: Seconds between job status checks
        max_poll_attempts: Status checks before a job times out
        request_timeout: HTTP timeout per request in seconds
        max_variations: Largest sweep a single run may contain
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        run_integration_tests: Whether to run integration tests
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    # API
    bria_api_token: str = ""
    bria_base_url: str = "https://engine.prod.bria-api.com/v2"

    # Rate limiting and polling
    request_delay: float = 6.0
    poll_interval: float = 2.0
    max_poll_attempts: int = 60
    request_timeout: float = 60.0

    # Dataset
    max_variations: int = 100

    log_level: str = "INFO"

    # Testing
    run_integration_tests: bool = False

    def validate_required_keys(self) -> None:
        """Validate that required API keys are present.

        Raises:
            ValueError: If the API token is missing
        """
        if not self.bria_api_token:
            raise ValueError(
                "BRIA_API_TOKEN is required. "
                "Please set it in your .env file or environment variables."
            )


# Global settings instance
settings = Settings()
