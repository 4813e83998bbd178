"""
Warden - Configuration Module
=============================

Centralized configuration management with environment variable validation.

DESIGN:
    Single source of truth for configuration, loaded from environment
    variables at startup.

    Key patterns:
    - Singleton via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - All missing required variables are reported together

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone used for log timestamps."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Application configuration loaded from environment variables.

    DESIGN:
        Required fields raise ConfigValidationError if missing.
        Optional fields have defaults suitable for local development.

    Attributes:
        discord_token: Discord bot authentication token.
        session_secrets: Cookie signing secrets. The first one signs,
            every one verifies, so secrets can be rotated.
        discord_client_id: OAuth2 application client ID.
        discord_client_secret: OAuth2 application client secret.
        public_url: Externally visible base URL of the web service.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str
    discord_client_id: str
    discord_client_secret: str

    # -------------------------------------------------------------------------
    # Required: Sessions
    # -------------------------------------------------------------------------

    session_secrets: List[str]

    # -------------------------------------------------------------------------
    # Optional: Web
    # -------------------------------------------------------------------------

    public_url: str = "http://localhost:8081"
    oauth_scopes: List[str] = field(default_factory=lambda: ["identify", "email"])
    production: bool = False

    # -------------------------------------------------------------------------
    # Optional: Storage
    # -------------------------------------------------------------------------

    database_path: Path = Path("data") / "warden.db"

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None

    @property
    def oauth_redirect_uri(self) -> str:
        """Callback URL registered with the identity provider."""
        return f"{self.public_url.rstrip('/')}/discord-oauth"


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_list(value: Optional[str], sep: str = ",") -> List[str]:
    """
    Split a separated string into non-empty stripped parts.

    Args:
        value: Raw environment value (e.g., "a, b,c").
        sep: Separator character.

    Returns:
        List of parts, empty if input is None or empty.
    """
    if not value:
        return []
    return [part.strip() for part in value.split(sep) if part.strip()]


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from warden.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    DESIGN:
        Validates all required variables upfront before creating the
        Config object, so a misconfigured deployment fails at startup
        with the complete list of what is missing.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing.
    """
    missing = []

    # -------------------------------------------------------------------------
    # Collect Required Variables
    # -------------------------------------------------------------------------

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    discord_client_id = os.getenv("DISCORD_CLIENT_ID")
    if not discord_client_id:
        missing.append("DISCORD_CLIENT_ID")

    discord_client_secret = os.getenv("DISCORD_CLIENT_SECRET")
    if not discord_client_secret:
        missing.append("DISCORD_CLIENT_SECRET")

    session_secrets = _parse_list(os.getenv("SESSION_SECRET"))
    if not session_secrets:
        missing.append("SESSION_SECRET")

    # -------------------------------------------------------------------------
    # Fail Fast on Missing Required
    # -------------------------------------------------------------------------

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    # -------------------------------------------------------------------------
    # Build Config Object
    # -------------------------------------------------------------------------

    scopes = _parse_list(os.getenv("DISCORD_SCOPES"), sep=" ")

    return Config(
        discord_token=discord_token,
        discord_client_id=discord_client_id,
        discord_client_secret=discord_client_secret,
        session_secrets=session_secrets,
        public_url=os.getenv("PUBLIC_URL", "http://localhost:8081"),
        oauth_scopes=scopes or ["identify", "email"],
        production=os.getenv("ENVIRONMENT", "development").lower() == "production",
        database_path=Path(os.getenv("DATABASE_PATH", str(Path("data") / "warden.db"))),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Replace the global configuration (None forces a reload)."""
    global _config
    _config = config


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> Config:
    """
    Validate configuration and log results at startup.

    Returns:
        The loaded Config.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from warden.core.logger import logger

    config = get_config()

    if not config.error_webhook_url:
        logger.info("Optional config not set: ERROR_WEBHOOK_URL")

    logger.tree("Configuration Validated", [
        ("Required", "✅ All required variables set"),
        ("Public URL", config.public_url),
        ("OAuth Scopes", " ".join(config.oauth_scopes)),
        ("Signing Secrets", str(len(config.session_secrets))),
        ("Secure Cookies", "✅" if config.production else "❌"),
        ("Database", str(config.database_path)),
    ], emoji="⚙️")

    return config


__all__ = [
    "Config",
    "ConfigValidationError",
    "NY_TZ",
    "get_config",
    "set_config",
    "load_config",
    "validate_and_log_config",
]
