"""
Capability bundle injected into the GenerationController.

Each capability is an async callable wrapping one remote generation
endpoint. The controller only depends on these signatures, so tests can
pass AsyncMocks and the app passes the real Gemini / Veo services.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from ..core.models import MediaAttachment, ResearchResult, StrategyResult

StrategyFn = Callable[[str, str, List[MediaAttachment]], Awaitable[StrategyResult]]
ResearchFn = Callable[[str], Awaitable[ResearchResult]]
ImageFn = Callable[[str, Optional[MediaAttachment]], Awaitable[Optional[str]]]
VideoFn = Callable[[str], Awaitable[Optional[str]]]


@dataclass
class Capabilities:
    """
    The four generation capabilities.

    Attributes:
        strategy: (prompt, context_summary, attachments) -> StrategyResult
        research: (query) -> ResearchResult
        image: (prompt, reference) -> image data URI, or None if nothing was generated
        video: (prompt) -> video path/URL, or None if nothing was generated
    """
    strategy: StrategyFn
    research: ResearchFn
    image: ImageFn
    video: VideoFn

    @classmethod
    def from_services(cls, gemini, veo) -> "Capabilities":
        """
        Wire the capabilities to live services.

        Args:
            gemini: GeminiService instance
            veo: VeoService instance
        """
        return cls(
            strategy=gemini.generate_strategy,
            research=gemini.conduct_research,
            image=gemini.generate_image,
            video=veo.generate_video,
        )

    @classmethod
    def create(cls, api_key: Optional[str] = None) -> "Capabilities":
        """Build the live capability set from configuration."""
        from .gemini_service import GeminiService
        from .veo_service import VeoService

        return cls.from_services(GeminiService(api_key=api_key), VeoService(api_key=api_key))
