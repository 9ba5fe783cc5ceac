"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from debridplay.domain.entities.quality import (
    ANY,
    parse_resolution_label,
    parse_source_quality_label,
)
from debridplay.domain.entities.streaming import QualityRange

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
DuplicatePolicy = Literal["ignore", "supersede"]


def _normalize_bound(value: Any, parse: Any, axis: str) -> str:
    """Canonicalize a range bound label; "any" (or empty) means unbounded."""
    if value is None:
        return ANY
    text = str(getattr(value, "value", value)).strip()
    if not text or text.lower() == ANY:
        return ANY
    parsed = parse(text)
    if parsed is None:
        raise ValueError(f"Unknown {axis} label: {text!r}")
    return parsed.value


class QualityRangeConfig(BaseModel):
    """Custom quality range (YAML section: streaming.custom_range).

    ``max_*`` is the best tier admitted, ``min_*`` the worst. Inverted
    ranges are accepted and simply match nothing on that axis.
    """

    min_resolution: str = Field(default=ANY, description="Worst resolution admitted.")
    max_resolution: str = Field(default=ANY, description="Best resolution admitted.")
    min_source_quality: str = Field(
        default=ANY, description="Worst source quality admitted."
    )
    max_source_quality: str = Field(
        default=ANY, description="Best source quality admitted."
    )

    @field_validator("min_resolution", "max_resolution", mode="before")
    @classmethod
    def _validate_resolution(cls, v: Any) -> str:
        return _normalize_bound(v, parse_resolution_label, "resolution")

    @field_validator("min_source_quality", "max_source_quality", mode="before")
    @classmethod
    def _validate_source_quality(cls, v: Any) -> str:
        return _normalize_bound(v, parse_source_quality_label, "source quality")

    def to_range(self) -> QualityRange:
        return QualityRange(
            min_resolution=self.min_resolution,
            max_resolution=self.max_resolution,
            min_source_quality=self.min_source_quality,
            max_source_quality=self.max_source_quality,
        )


class StreamingConfig(BaseModel):
    """Configuration for source selection and playback hand-off.

    All values configurable via YAML (streaming section) or ENV vars.
    """

    profile_id: str = Field(
        default="balanced",
        description="Quality profile id, or 'custom' to use custom_range.",
    )
    custom_range: QualityRangeConfig = Field(default_factory=QualityRangeConfig)

    allow_uncached: bool = Field(
        default=False,
        description="Play uncached sources without confirmation.",
    )
    auto_play: bool = Field(
        default=True,
        description="Start playback as soon as an eligible source is found.",
    )

    duplicate_policy: DuplicatePolicy = Field(
        default="ignore",
        description=(
            "What a second play action for an already-resolving title does: "
            "'ignore' drops it, 'supersede' restarts and discards the old result."
        ),
    )

    max_concurrent_addons: int = Field(
        default=5,
        description="Max parallel addon queries per resolution.",
    )
    addon_timeout_seconds: float = Field(
        default=30.0,
        description="Per-addon timeout in seconds for candidate gathering.",
    )

    @field_validator("profile_id", mode="before")
    @classmethod
    def _validate_profile_id(cls, v: Any) -> str:
        return str(v).strip().lower()

    @field_validator("max_concurrent_addons")
    @classmethod
    def _validate_max_concurrent(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_addons must be >= 1")
        return v

    @field_validator("addon_timeout_seconds")
    @classmethod
    def _validate_addon_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("addon_timeout_seconds must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (logging/streaming).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="debridplay", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Streaming (YAML section: streaming.*)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "logging": {"level": self.log_level, "format": self.log_format},
            "streaming": self.streaming.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Supported env var examples (flat, explicit):
    - DEBRIDPLAY_LOG_LEVEL
    - DEBRIDPLAY_STREAMING_PROFILE_ID
    - DEBRIDPLAY_STREAMING_ALLOW_UNCACHED
    - DEBRIDPLAY_STREAMING_DUPLICATE_POLICY
    """

    model_config = SettingsConfigDict(
        env_prefix="DEBRIDPLAY_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    streaming_profile_id: Optional[str] = None
    streaming_allow_uncached: Optional[bool] = None
    streaming_auto_play: Optional[bool] = None
    streaming_duplicate_policy: Optional[DuplicatePolicy] = None
    streaming_max_concurrent_addons: Optional[int] = None
    streaming_addon_timeout_seconds: Optional[float] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
