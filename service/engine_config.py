"""Environment-driven configuration and logging setup for the caption engine."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Mapping

from domain.caption_style import (
    INVALID_CONFIG_CODE,
    CaptionRenderRequest,
    CaptionValidationError,
    LayoutMode,
)
from domain.safe_area import DEFAULT_SAFE_AREA_ID, SAFE_AREA_PROFILES
from service.fit_engine import DEFAULT_FIT_CACHE_SIZE, FitCache
from service.text_metrics import PillowTextMeasurer

FONTS_DIR_ENV = "CAPTION_ENGINE_FONTS_DIR"
FIT_CACHE_SIZE_ENV = "CAPTION_ENGINE_FIT_CACHE_SIZE"
SAFE_AREA_PROFILE_ENV = "CAPTION_ENGINE_SAFE_AREA_PROFILE"
LOG_LEVEL_ENV = "CAPTION_ENGINE_LOG_LEVEL"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings for measurers, caching and logging."""

    fonts_dir: Path | None = None
    fit_cache_size: int = DEFAULT_FIT_CACHE_SIZE
    safe_area_profile_id: str = DEFAULT_SAFE_AREA_ID
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.fit_cache_size <= 0:
            raise CaptionValidationError(
                INVALID_CONFIG_CODE, "fit_cache_size must be positive"
            )
        if self.safe_area_profile_id not in SAFE_AREA_PROFILES:
            raise CaptionValidationError(
                INVALID_CONFIG_CODE,
                f"unknown safe area profile: {self.safe_area_profile_id}",
            )
        if self.log_level not in LOG_LEVELS:
            raise CaptionValidationError(
                INVALID_CONFIG_CODE, f"unsupported log level: {self.log_level}"
            )


def parse_positive_int(raw_value: str, field_name: str) -> int:
    """Parse a positive integer from a string."""
    try:
        parsed = int(raw_value)
    except ValueError as exc:
        raise CaptionValidationError(
            INVALID_CONFIG_CODE, f"{field_name} must be an integer"
        ) from exc
    if parsed <= 0:
        raise CaptionValidationError(
            INVALID_CONFIG_CODE, f"{field_name} must be positive"
        )
    return parsed


def read_env_int(
    env: Mapping[str, str], key: str, field_name: str, fallback: int
) -> int:
    """Read an integer from the environment."""
    raw_value = env.get(key, "").strip()
    if not raw_value:
        return fallback
    return parse_positive_int(raw_value, field_name)


def resolve_optional_path(raw_value: str | None) -> Path | None:
    """Resolve a filesystem path from an optional value."""
    if raw_value is None or not raw_value.strip():
        return None
    return Path(raw_value.strip())


def load_engine_config(env: Mapping[str, str]) -> EngineConfig:
    """Load engine configuration from environment variables."""
    return EngineConfig(
        fonts_dir=resolve_optional_path(env.get(FONTS_DIR_ENV)),
        fit_cache_size=read_env_int(
            env, FIT_CACHE_SIZE_ENV, "fit_cache_size", DEFAULT_FIT_CACHE_SIZE
        ),
        safe_area_profile_id=env.get(SAFE_AREA_PROFILE_ENV, "").strip()
        or DEFAULT_SAFE_AREA_ID,
        log_level=env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO",
    )


def configure_logging(env: Mapping[str, str]) -> None:
    """Configure logging from environment."""
    level_name = env.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    logging.basicConfig(
        level=LOG_LEVELS.get(level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_measurer(config: EngineConfig) -> PillowTextMeasurer:
    """Build the Pillow measurer for the configured fonts directory."""
    if config.fonts_dir is None:
        return PillowTextMeasurer()
    return PillowTextMeasurer(str(config.fonts_dir))


def build_fit_cache(config: EngineConfig) -> FitCache:
    """Build a fit cache sized from configuration."""
    return FitCache(max_entries=config.fit_cache_size)


def build_template_request(
    config: EngineConfig,
    preset_id: str,
    container_width_px: float,
    layout_mode: LayoutMode = LayoutMode.TITLE,
) -> CaptionRenderRequest:
    """Build an empty request carrying the configured safe-area profile."""
    return CaptionRenderRequest(
        preset_id=preset_id,
        headline_text="",
        container_width_px=container_width_px,
        safe_area_profile_id=config.safe_area_profile_id,
        layout_mode=layout_mode,
    )
