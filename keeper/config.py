from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Jira settings
    JIRA_BASE_URL: str | None = None
    JIRA_EMAIL: str | None = None
    JIRA_API_TOKEN: str | None = None

    # Bitbucket settings
    BITBUCKET_BASE_URL: str = "https://api.bitbucket.org/2.0"
    BITBUCKET_WORKSPACE: str | None = None
    BITBUCKET_USERNAME: str | None = None
    BITBUCKET_APP_PASSWORD: str | None = None
    BITBUCKET_REPOSITORIES: str = ""  # comma-separated repo slugs scanned for commits

    # Confluence settings
    CONFLUENCE_BASE_URL: str | None = None
    CONFLUENCE_SPACE_KEY: str = "LEGACY"

    # =================================================================
    # SCAN / WORKFLOW SETTINGS
    # =================================================================
    ATLASSIAN_REQUEST_TIMEOUT: float = 30.0
    MAX_ACTIVE_USERS: int = 100
    MAX_INTERVIEW_COMMITS: int = 5
    PHASE_TIMEOUT_SECONDS: float | None = None  # None = bounded only by the host
    ORG_SCAN_INTERVAL_MINUTES: int = 1440  # once a day

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def atlassian_configured(self) -> bool:
        """True when every Atlassian credential needed by the REST clients is present."""
        return all(
            [
                self.JIRA_BASE_URL,
                self.JIRA_EMAIL,
                self.JIRA_API_TOKEN,
                self.BITBUCKET_WORKSPACE,
                self.BITBUCKET_USERNAME,
                self.BITBUCKET_APP_PASSWORD,
            ]
        )

    def jira_auth(self) -> tuple[str, str]:
        """Basic-auth pair for Jira and Confluence (same Atlassian account)."""
        return (self.JIRA_EMAIL or "", self.JIRA_API_TOKEN or "")

    def bitbucket_auth(self) -> tuple[str, str]:
        return (self.BITBUCKET_USERNAME or "", self.BITBUCKET_APP_PASSWORD or "")

    def bitbucket_repositories(self) -> list[str]:
        return [slug.strip() for slug in self.BITBUCKET_REPOSITORIES.split(",") if slug.strip()]

    def confluence_base_url(self) -> str:
        """
        Confluence base URL with fallback.

        Atlassian Cloud serves Confluence from the Jira site under /wiki.
        """
        if self.CONFLUENCE_BASE_URL:
            return self.CONFLUENCE_BASE_URL.rstrip("/")
        base = (self.JIRA_BASE_URL or "").rstrip("/")
        return f"{base}/wiki"


settings = Settings()
