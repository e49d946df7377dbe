"""
Pydantic models for Veo video generation.

These models provide type-safe, validated data structures for:
- Video generation configuration (VeoConfig)
- Operation polling bounds (PollPolicy)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..core.config import Config


# ============================================================================
# Enums
# ============================================================================

class AspectRatio(str, Enum):
    """Valid aspect ratios for Veo video generation."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    """Valid resolutions for Veo video generation."""
    HD = "720p"
    FULL_HD = "1080p"


class ModelVariant(str, Enum):
    """Veo model variants with different price/speed tradeoffs."""
    STANDARD = "standard"  # higher quality
    FAST = "fast"          # faster generation

    @property
    def model_name(self) -> str:
        if self == ModelVariant.FAST:
            return "veo-3.1-fast-generate-preview"
        return "veo-3.1-generate-preview"


# ============================================================================
# Configuration Models
# ============================================================================

class VeoConfig(BaseModel):
    """
    Configuration for Veo video generation.

    Defaults match the cinematic preset: one 1080p landscape clip on the
    fast model.
    """
    aspect_ratio: AspectRatio = Field(
        default=AspectRatio.LANDSCAPE,
        description="Video aspect ratio: 16:9 (landscape) or 9:16 (portrait)"
    )
    resolution: Resolution = Field(
        default=Resolution.FULL_HD,
        description="Output resolution: 720p or 1080p"
    )
    number_of_videos: int = Field(default=1, ge=1, le=4)
    negative_prompt: Optional[str] = Field(
        default="blurry, low quality, distorted, deformed, ugly, bad anatomy",
        description="Content to avoid in generation"
    )
    model_variant: ModelVariant = Field(
        default=ModelVariant.FAST,
        description="Model variant: standard or fast"
    )

    @classmethod
    def from_config(cls) -> "VeoConfig":
        return cls(model_variant=ModelVariant(Config.VEO_MODEL_VARIANT))


class PollPolicy(BaseModel):
    """
    How long to wait on a Veo long-running operation.

    The operation is re-checked every interval_seconds; exceeding
    timeout_seconds aborts the wait.
    """
    interval_seconds: float = Field(default=5.0, gt=0)
    timeout_seconds: float = Field(default=600.0, gt=0)

    @model_validator(mode="after")
    def check_interval_within_timeout(self) -> "PollPolicy":
        if self.interval_seconds > self.timeout_seconds:
            raise ValueError("interval_seconds cannot exceed timeout_seconds")
        return self

    @classmethod
    def from_config(cls) -> "PollPolicy":
        return cls(
            interval_seconds=Config.VEO_POLL_INTERVAL_SECONDS,
            timeout_seconds=Config.VEO_TIMEOUT_SECONDS,
        )
