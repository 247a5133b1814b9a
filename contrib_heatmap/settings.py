from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required identity or credential is missing."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    gh_username: str | None = None
    gitlab_username: str | None = None
    gh_pat: str | None = None
    github_token: str | None = None
    github_graphql_url: str = "https://api.github.com/graphql"
    gitlab_base_url: str = "https://gitlab.com"
    output_path: Path = Path("public/contrib.svg")
    window_days: int = 365
    http_timeout_seconds: float | None = 20.0
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def github_access_token(self) -> str:
        """Return the first non-empty of GH_PAT and GITHUB_TOKEN."""

        for candidate in (self.gh_pat, self.github_token):
            if candidate and candidate.strip():
                return candidate.strip()
        return ""

    def validate_credentials(self) -> None:
        """Fail before any network call when identities or token are missing.

        Raises:
            ConfigurationError: If a username or the GitHub token is empty.
        """

        if not (self.gh_username or "").strip() or not (
            self.gitlab_username or ""
        ).strip():
            raise ConfigurationError("Missing GH_USERNAME or GITLAB_USERNAME env vars.")

        if not self.github_access_token:
            raise ConfigurationError(
                "Missing GitHub token (GH_PAT / GITHUB_TOKEN). Aborting to avoid 403."
            )
