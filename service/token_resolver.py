"""Preset and safe-area lookup with logged fallbacks."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, TypeVar

from domain.caption_tokens import (
    ANIMATION_TOKENS,
    BACKGROUND_TOKENS,
    CAPTION_PRESETS,
    COLOR_TOKENS,
    DEFAULT_ANIMATION_ID,
    DEFAULT_BACKGROUND_ID,
    DEFAULT_COLOR_ID,
    DEFAULT_PRESET_ID,
    DEFAULT_TYPOGRAPHY_ID,
    TYPOGRAPHY_TOKENS,
    AnimationToken,
    BackgroundToken,
    CaptionPreset,
    ColorToken,
    TypographyToken,
)
from domain.safe_area import DEFAULT_SAFE_AREA_ID, SAFE_AREA_PROFILES, SafeAreaProfile

LOGGER = logging.getLogger("caption_engine.tokens")

UNKNOWN_PRESET_CODE = "caption_engine.tokens.unknown_preset"
UNKNOWN_TOKEN_CODE = "caption_engine.tokens.unknown_token"
UNKNOWN_SAFE_AREA_CODE = "caption_engine.tokens.unknown_safe_area"

TokenT = TypeVar("TokenT")


@dataclass(frozen=True)
class ResolvedTokens:
    """Preset plus the concrete tokens it references."""

    preset: CaptionPreset
    typography: TypographyToken
    colors: ColorToken
    background: BackgroundToken
    animation: AnimationToken


def _lookup(
    table: Dict[str, TokenT], token_id: str, default_id: str, kind: str
) -> TokenT:
    token = table.get(token_id)
    if token is not None:
        return token
    LOGGER.warning(
        "%s: %s %r not found, using %r", UNKNOWN_TOKEN_CODE, kind, token_id, default_id
    )
    return table[default_id]


def resolve_preset(preset_id: str) -> CaptionPreset:
    """Return the preset for an id, falling back to the default preset."""
    preset = CAPTION_PRESETS.get(preset_id)
    if preset is not None:
        return preset
    LOGGER.warning(
        "%s: %r not found, using %r", UNKNOWN_PRESET_CODE, preset_id, DEFAULT_PRESET_ID
    )
    return CAPTION_PRESETS[DEFAULT_PRESET_ID]


def resolve_tokens(
    preset_id: str, animation_id: str = DEFAULT_ANIMATION_ID
) -> ResolvedTokens:
    """Resolve a preset id into its tokens. Never raises for unknown ids."""
    preset = resolve_preset(preset_id)
    return ResolvedTokens(
        preset=preset,
        typography=_lookup(
            TYPOGRAPHY_TOKENS, preset.typography_id, DEFAULT_TYPOGRAPHY_ID, "typography"
        ),
        colors=_lookup(COLOR_TOKENS, preset.color_id, DEFAULT_COLOR_ID, "color"),
        background=_lookup(
            BACKGROUND_TOKENS, preset.background_id, DEFAULT_BACKGROUND_ID, "background"
        ),
        animation=_lookup(
            ANIMATION_TOKENS, animation_id, DEFAULT_ANIMATION_ID, "animation"
        ),
    )


def resolve_safe_area(profile_id: str) -> SafeAreaProfile:
    """Return the safe-area profile for an id, falling back to universal."""
    profile = SAFE_AREA_PROFILES.get(profile_id)
    if profile is not None:
        return profile
    LOGGER.warning(
        "%s: %r not found, using %r",
        UNKNOWN_SAFE_AREA_CODE,
        profile_id,
        DEFAULT_SAFE_AREA_ID,
    )
    return SAFE_AREA_PROFILES[DEFAULT_SAFE_AREA_ID]
