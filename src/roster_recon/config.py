"""Reconciliation configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ReconConfig(BaseSettings):
    """Runtime configuration loaded from environment variables.

    Every field can be set with a ROSTER_RECON_ prefixed variable, e.g.
    ROSTER_RECON_CLASSROOM_TOKEN. For local development, create a .env file
    in the project root.
    """

    # Google Classroom (OAuth token is issued elsewhere; we only consume it)
    classroom_token: str = Field(
        default="",
        description="OAuth access token with classroom.rosters.readonly scope",
    )
    classroom_base_url: str = Field(
        default="https://classroom.googleapis.com/v1",
        description="Google Classroom REST API base URL",
    )
    page_size: int = Field(
        default=100,
        description="Page size for paginated course and student listings",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request HTTP timeout in seconds",
    )

    # Matching
    allow_swapped_names: bool = Field(
        default=False,
        description="Also match names whose first/last parts are swapped",
    )

    # Paths
    state_dir: str = Field(
        default="data/state",
        description="Directory for the saved roster, history and last comparison",
    )
    out_dir: str = Field(
        default="out",
        description="Directory that receives reconciliation reports",
    )
    max_history: int = Field(
        default=10,
        description="Number of roster extraction snapshots kept in history",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "ROSTER_RECON_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ReconConfig | None = None


def get_config() -> ReconConfig:
    """Get the reconciliation configuration singleton.

    Returns:
        ReconConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = ReconConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads env."""
    global _config
    _config = None
