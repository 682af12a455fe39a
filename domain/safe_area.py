"""Platform safe-area profiles and caption geometry.

Insets are expressed in pixels on a 1080x1920 reference frame and scaled to
the actual frame size. Percent-based safe zones are used by
calculate_caption_geometry for composition/viewport mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from domain.caption_style import INVALID_REQUEST_CODE, CaptionValidationError

BASE_WIDTH = 1080
BASE_HEIGHT = 1920
DEFAULT_SAFE_AREA_ID = "universal"


@dataclass(frozen=True)
class SafeAreaInsets:
    """Margins reserved for host-app UI chrome."""

    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class SafeAreaProfile:
    """Named set of safe-area margins."""

    profile_id: str
    name: str
    description: str
    insets: SafeAreaInsets
    caption_bottom_offset: float


SAFE_AREA_PROFILES: Dict[str, SafeAreaProfile] = {
    "universal": SafeAreaProfile(
        profile_id="universal",
        name="Universal",
        description="Safe for all platforms",
        insets=SafeAreaInsets(top=100, bottom=340, left=60, right=60),
        caption_bottom_offset=80,
    ),
    "tiktok": SafeAreaProfile(
        profile_id="tiktok",
        name="TikTok",
        description="Optimized for TikTok's UI overlay",
        insets=SafeAreaInsets(top=120, bottom=350, left=60, right=60),
        caption_bottom_offset=80,
    ),
    "instagram_reels": SafeAreaProfile(
        profile_id="instagram_reels",
        name="Instagram Reels",
        description="Optimized for Reels UI overlay",
        insets=SafeAreaInsets(top=100, bottom=330, left=60, right=60),
        caption_bottom_offset=70,
    ),
    "youtube_shorts": SafeAreaProfile(
        profile_id="youtube_shorts",
        name="YouTube Shorts",
        description="Optimized for Shorts UI overlay",
        insets=SafeAreaInsets(top=80, bottom=280, left=60, right=60),
        caption_bottom_offset=60,
    ),
}


def caption_max_width(profile: SafeAreaProfile, video_width: float = BASE_WIDTH) -> float:
    """Return the usable caption width once side insets are removed."""
    scale = video_width / BASE_WIDTH
    return max(
        0.0,
        video_width - profile.insets.left * scale - profile.insets.right * scale,
    )


def caption_safe_y(profile: SafeAreaProfile, video_height: float = BASE_HEIGHT) -> float:
    """Return the y coordinate of the caption baseline."""
    scale = video_height / BASE_HEIGHT
    return (
        video_height
        - profile.insets.bottom * scale
        + profile.caption_bottom_offset * scale
    )


@dataclass(frozen=True)
class CaptionGeometry:
    """Composition-space caption area and its viewport mapping."""

    composition_width: float
    composition_height: float
    safe_area_left: float
    safe_area_right: float
    safe_area_top: float
    safe_area_bottom: float
    available_caption_width: float
    caption_bottom_y: float
    viewport_scale: float
    viewport_caption_width: float
    viewport_padding: float


def calculate_caption_geometry(
    composition_width: float = BASE_WIDTH,
    composition_height: float = BASE_HEIGHT,
    safe_zone_left_percent: float = 5,
    safe_zone_right_percent: float = 5,
    safe_zone_top_percent: float = 10,
    safe_zone_bottom_percent: float = 15,
    viewport_scale: float = 0.4,
) -> CaptionGeometry:
    """Compute the caption area for a composition and its on-screen preview."""
    if composition_width <= 0 or composition_height <= 0:
        raise CaptionValidationError(
            INVALID_REQUEST_CODE, "composition dimensions must be positive"
        )
    if viewport_scale <= 0:
        raise CaptionValidationError(
            INVALID_REQUEST_CODE, "viewport_scale must be positive"
        )
    for percent in (
        safe_zone_left_percent,
        safe_zone_right_percent,
        safe_zone_top_percent,
        safe_zone_bottom_percent,
    ):
        if percent < 0 or percent >= 50:
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "safe zone percentages must be in [0, 50)"
            )

    safe_left = composition_width * safe_zone_left_percent / 100.0
    safe_right = composition_width * safe_zone_right_percent / 100.0
    safe_top = composition_height * safe_zone_top_percent / 100.0
    safe_bottom = composition_height * safe_zone_bottom_percent / 100.0
    available_width = composition_width - safe_left - safe_right

    return CaptionGeometry(
        composition_width=composition_width,
        composition_height=composition_height,
        safe_area_left=safe_left,
        safe_area_right=safe_right,
        safe_area_top=safe_top,
        safe_area_bottom=safe_bottom,
        available_caption_width=available_width,
        caption_bottom_y=composition_height - safe_bottom,
        viewport_scale=viewport_scale,
        viewport_caption_width=available_width * viewport_scale,
        viewport_padding=safe_left * viewport_scale,
    )
