"""Centralized configuration management for benefits2ofx.

This module provides a Pydantic Settings-based configuration system that
gathers provider credentials, OFX output options and logging settings from
environment variables and ``.env`` files, with type validation and clear
error messages.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from dotenv import dotenv_values
from ofxtools.models.i18n import CURRENCY_CODES
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

PROFILE_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

Provider = Literal["caju", "flash"]

# Plain variable names accepted for backward compatibility with older .env files
_LEGACY_CAJU_VARS = {
    "BASE_URL": "base_url",
    "BEARER_TOKEN": "bearer_token",
    "REFRESH_TOKEN": "refresh_token",
    "USER_ID": "user_id",
    "EMPLOYEE_ID": "employee_id",
}
_LEGACY_FLASH_VARS = {
    "FLASH_USERNAME": "username",
    "FLASH_PASSWORD": "password",
    "FLASH_COMPANY_ID": "company_id",
    "FLASH_AUTH_OVERRIDE_TOKEN": "override_token",
    "EMPLOYEE_ID": "employee_id",
}


class CajuConfig(BaseModel):
    """Caju API credentials.

    The bearer and refresh tokens can be captured with a MITM proxy while
    opening the Caju mobile app.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="https://apigw.caju.com.br", description="Base URL of the Caju API"
    )
    bearer_token: SecretStr | None = Field(
        default=None, description="Existing Caju bearer token"
    )
    refresh_token: SecretStr | None = Field(
        default=None, description="Caju refresh token"
    )
    user_id: str | None = Field(default=None, description="Caju user id")
    employee_id: str | None = Field(default=None, description="Caju employee id")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended with a slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Caju base URL must start with http:// or https://")
        return v.rstrip("/")


class FlashConfig(BaseModel):
    """Flash API credentials."""

    model_config = ConfigDict(frozen=True)

    username: str | None = Field(default=None, description="Flash login")
    password: SecretStr | None = Field(default=None, description="Flash password")
    company_id: str | None = Field(default=None, description="Flash company id")
    employee_id: str | None = Field(default=None, description="Flash employee id")
    override_token: SecretStr | None = Field(
        default=None,
        description="Already issued Flash token; skips the SMS login when set",
    )


class OfxConfig(BaseModel):
    """Options for the generated OFX document."""

    model_config = ConfigDict(frozen=True)

    currency: str = Field(default="BRL", min_length=3, max_length=3)
    language: str = Field(default="POR", min_length=3, max_length=3)
    account_type: Literal["CREDITCARD", "CHECKING"] = Field(
        default="CREDITCARD",
        description="Emit a credit card statement or a checking account statement",
    )
    version: Literal[102, 220] = Field(
        default=220, description="OFX version: 102 (SGML header) or 220 (XML)"
    )

    @field_validator("currency", "language")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        """ISO codes are written in upper case in OFX."""
        return v.upper()

    @field_validator("currency")
    @classmethod
    def known_currency(cls, v: str) -> str:
        """Only ISO 4217 currencies are accepted by the OFX writer."""
        if v not in CURRENCY_CODES:
            raise ValueError(f"Unknown ISO 4217 currency code: {v}")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")
    log_file_path: Path = Field(
        default=Path("logs/benefits2ofx.log"), description="Path to log file"
    )
    max_file_size_mb: int = Field(
        default=10, ge=1, le=1000, description="Maximum log file size in MB"
    )
    backup_count: int = Field(
        default=3, ge=1, le=50, description="Number of log file backups to keep"
    )


def env_file_for_profile(profile: str) -> Path:
    """Return the ``.env`` file used by a profile.

    ``.env.{profile}`` wins when it exists; otherwise the plain ``.env`` file
    is used.
    """
    profile_env_file = Path(f".env.{profile}")
    if profile_env_file.exists():
        return profile_env_file
    return Path(".env")


def plain_environment(profile: str) -> dict[str, str]:
    """Merge the profile's ``.env`` file under the process environment.

    The file is only read; ``os.environ`` is left untouched.
    """
    values = {
        key: value
        for key, value in dotenv_values(env_file_for_profile(profile)).items()
        if value is not None
    }
    values.update(os.environ)
    return values


def _legacy_section(
    mapping: dict[str, str], environ: dict[str, str]
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, field_name in mapping.items():
        value = environ.get(env_name)
        if value:
            values[field_name] = value
    return values


class Benefits2OfxSettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the BENEFITS2OFX_ prefix.
    For nested configs, use double underscores: BENEFITS2OFX_CAJU__USER_ID

    The unprefixed names used by earlier versions of the tool (BEARER_TOKEN,
    FLASH_USERNAME, EMPLOYEE_ID, ...) are still honoured and take precedence
    over the prefixed ones.
    """

    caju: CajuConfig = Field(default_factory=CajuConfig)
    flash: FlashConfig = Field(default_factory=FlashConfig)
    ofx: OfxConfig = Field(default_factory=OfxConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    profile: str = Field(
        default="default",
        description="Profile name, selects the .env.{profile} file",
    )

    @field_validator("profile")
    @classmethod
    def validate_profile_name(cls, v: str) -> str:
        """Ensure profile name is safe for use as a filename."""
        if not v:
            raise ValueError("Profile name cannot be empty")
        if not PROFILE_PATTERN.match(v):
            raise ValueError(
                "Profile name must contain only alphanumeric characters, "
                "dashes, and underscores"
            )
        return v

    def __init__(self, **kwargs: Any):
        """Initialize settings, folding in the legacy environment variables.

        Args:
            **kwargs: Additional configuration overrides
        """
        environ = plain_environment(kwargs.get("profile", "default"))
        # Plain dicts are deep-merged with the prefixed sources by pydantic-settings
        for section, mapping in (
            ("caju", _LEGACY_CAJU_VARS),
            ("flash", _LEGACY_FLASH_VARS),
        ):
            if section in kwargs:
                continue
            legacy = _legacy_section(mapping, environ)
            if legacy:
                kwargs[section] = legacy

        super().__init__(**kwargs)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Load the profile-specific env file instead of the static one."""
        init_dict = init_settings.init_kwargs if init_settings else {}
        profile = init_dict.get("profile", "default")  # type: ignore[reportUnknownMemberType]

        from pydantic_settings import DotEnvSettingsSource

        custom_dotenv = DotEnvSettingsSource(
            settings_cls,
            env_file=str(env_file_for_profile(profile)),
            env_file_encoding="utf-8",
        )

        # Earlier sources override later ones
        return (
            init_settings,
            env_settings,
            custom_dotenv,
            file_secret_settings,
        )

    model_config = SettingsConfigDict(
        env_file=".env",  # Overridden by settings_customise_sources
        env_file_encoding="utf-8",
        env_prefix="BENEFITS2OFX_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    def missing_credentials(self, provider: Provider) -> list[str]:
        """List the environment variables still needed to export ``provider``."""
        missing: list[str] = []

        if provider == "caju":
            if not self.caju.bearer_token:
                missing.append("BEARER_TOKEN")
            if not self.caju.refresh_token:
                missing.append("REFRESH_TOKEN")
            if not self.caju.user_id:
                missing.append("USER_ID")
            if not self.caju.employee_id:
                missing.append("EMPLOYEE_ID")
        elif provider == "flash":
            if not self.flash.override_token:
                if not self.flash.username:
                    missing.append("FLASH_USERNAME")
                if not self.flash.password:
                    missing.append("FLASH_PASSWORD")
            if not self.flash.company_id:
                missing.append("FLASH_COMPANY_ID")
            if not self.flash.employee_id:
                missing.append("EMPLOYEE_ID")
        else:
            raise ConfigurationError(f"Unknown provider: {provider}")

        return missing

    def validate_required_credentials(self, provider: Provider) -> None:
        """Validate that the credentials needed for ``provider`` are present.

        Raises:
            ConfigurationError: Naming every missing variable at once
        """
        missing = self.missing_credentials(provider)
        if missing:
            raise ConfigurationError(
                f"Missing required configuration for {provider}: {', '.join(missing)}"
            )

    def redacted(self) -> dict[str, Any]:
        """Return the settings as a dict with secrets masked."""
        return self.model_dump(mode="json")


# Global settings instances - lazy loaded per profile
_settings_cache: dict[str, Benefits2OfxSettings] = {}
_current_profile: str = "default"


def get_settings(profile: str | None = None) -> Benefits2OfxSettings:
    """Get the settings instance for the specified profile.

    Settings are loaded once per profile and cached. The profile's ``.env``
    file is read for both the prefixed and the legacy variable names.

    Args:
        profile: Profile name. Defaults to the current profile.

    Returns:
        Benefits2OfxSettings: The configuration instance for the profile

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if profile is None:
        profile = _current_profile

    if profile in _settings_cache:
        return _settings_cache[profile]

    try:
        settings = Benefits2OfxSettings(profile=profile)
    except ValueError as e:
        raise ConfigurationError(
            f"Configuration error for profile '{profile}': {e}"
        ) from e

    _settings_cache[profile] = settings
    return settings


def set_current_profile(profile: str) -> None:
    """Set the current active profile.

    Raises:
        ConfigurationError: If profile name contains invalid characters
    """
    global _current_profile

    if not profile:
        raise ConfigurationError("Profile name cannot be empty")

    if not PROFILE_PATTERN.match(profile):
        raise ConfigurationError(
            f"Invalid profile: {profile}. "
            "Profile name must contain only alphanumeric characters, dashes, and underscores"
        )

    _current_profile = profile


def get_current_profile() -> str:
    """Get the current active profile name."""
    return _current_profile


def reload_settings(profile: str | None = None) -> Benefits2OfxSettings:
    """Reload settings from the environment, discarding the cached copy."""
    if profile is None:
        profile = _current_profile

    _settings_cache.pop(profile, None)
    return get_settings(profile)


def clear_settings_cache() -> None:
    """Forget every cached settings object."""
    _settings_cache.clear()
