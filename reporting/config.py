"""
Configuration for the lot map analytics service.

Settings are read once from the environment (and a `.env` file, if present)
into an immutable `Settings` object. The Flask app and the query layer receive
that object explicitly instead of reading environment variables ad hoc.

Usage:
    from reporting.config import load_settings

    settings = load_settings()
    print(settings.property_id)
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_LOOKBACK_DAYS = 28
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigurationError(Exception):
    """
    Raised when configuration is invalid or incomplete.

    Attributes:
        message: Human-readable description of the error
        fix: Actionable instructions to resolve the issue
    """

    def __init__(self, message: str, fix: str = ""):
        self.message = message
        self.fix = fix
        super().__init__(message)

    def describe(self) -> str:
        """Message plus fix instructions, for console output."""
        if not self.fix:
            return self.message
        return f"{self.message}\n\nHOW TO FIX:\n{self.fix}"


@dataclass(frozen=True)
class Settings:
    """
    Immutable configuration container.

    Attributes:
        property_id: GA4 property ID (numbers only)
        credentials_base64: Base64-encoded service account JSON key
        client_email: Service account email (used when no base64 key is set)
        private_key: Service account private key (PEM)
        lookback_days: Default report window when no start date is given
        log_level: Logging level name (DEBUG, INFO, ...)
        host: Address the development server binds to
        port: Port the development server listens on
        debug: Whether Flask debug mode is enabled
    """

    property_id: Optional[str] = None
    credentials_base64: Optional[str] = None
    client_email: Optional[str] = None
    private_key: Optional[str] = None
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False

    @property
    def has_credentials(self) -> bool:
        if not self.property_id:
            return False
        if self.credentials_base64:
            return True
        return bool(self.client_email and self.private_key)

    def normalized_private_key(self) -> Optional[str]:
        if self.private_key and "\\n" in self.private_key:
            return self.private_key.replace("\\n", "\n")
        return self.private_key

    def service_account_info(self) -> Dict[str, Any]:
        """
        Resolve the service account info dict used to build credentials.

        The base64 blob wins when present; otherwise the discrete email and
        key pair is used.

        Raises:
            ConfigurationError: If the blob does not decode or neither source
                is fully configured.
        """
        if self.credentials_base64:
            return decode_service_account(self.credentials_base64)

        if not self.client_email or not self.private_key:
            raise ConfigurationError(
                "GA4 credentials not configured",
                fix=(
                    "Set GOOGLE_SERVICE_ACCOUNT_BASE64 to the base64-encoded service account JSON key,\n"
                    "or set both GA4_CLIENT_EMAIL and GA4_PRIVATE_KEY."
                ),
            )

        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.normalized_private_key(),
            "token_uri": "https://oauth2.googleapis.com/token",
        }


def decode_service_account(blob: str) -> Dict[str, Any]:
    try:
        info = json.loads(base64.b64decode(blob).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ConfigurationError(
            "Invalid GOOGLE_SERVICE_ACCOUNT_BASE64 format",
            fix="Encode the key file with: base64 -w0 service-account.json",
        ) from exc
    if not isinstance(info, dict):
        raise ConfigurationError("Invalid GOOGLE_SERVICE_ACCOUNT_BASE64 format")
    return info


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {name} value '{raw}'. Expected an integer.",
            fix=f"Set {name} to a whole number in your .env file.",
        )


def _read_str(env: Mapping[str, str], name: str) -> Optional[str]:
    value = (env.get(name) or "").strip()
    return value or None


def settings_from_env(env: Mapping[str, str]) -> Settings:
    lookback_days = _read_int(env, "REPORT_LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS)
    if lookback_days < 1:
        raise ConfigurationError(
            f"REPORT_LOOKBACK_DAYS must be positive, got {lookback_days}.",
            fix="Use a value such as REPORT_LOOKBACK_DAYS=28.",
        )

    return Settings(
        property_id=_read_str(env, "GA4_PROPERTY_ID"),
        credentials_base64=_read_str(env, "GOOGLE_SERVICE_ACCOUNT_BASE64"),
        client_email=_read_str(env, "GA4_CLIENT_EMAIL"),
        private_key=_read_str(env, "GA4_PRIVATE_KEY"),
        lookback_days=lookback_days,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        host=env.get("APP_HOST", "127.0.0.1"),
        port=_read_int(env, "APP_PORT", 5000),
        debug=env.get("FLASK_DEBUG", "0") == "1",
    )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from a `.env` file (if present) and the process environment.

    Variables already present in the environment take precedence over the
    `.env` file.
    """
    candidates = [env_file] if env_file else [Path.cwd() / ".env", PROJECT_ROOT / ".env"]
    for env_path in candidates:
        if env_path is not None and env_path.exists():
            load_dotenv(env_path)
            break
    return settings_from_env(os.environ)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
