"""
GeminiService - copywriting, market research and image generation on Google Gemini.

Handles all Gemini API interactions with rate-limit retries.
"""

import asyncio
import base64
import logging
from typing import Any, Callable, List, Optional

from google import genai
from google.genai import errors, types

from ..core.config import Config
from ..core.models import MediaAttachment, ResearchResult, Source, StrategyResult
from .exceptions import CapabilityError, RateLimitExceeded

logger = logging.getLogger(__name__)


STRATEGY_SYSTEM_PROMPT = """You are a world-class Creative Director and PR Strategist at a top-tier agency.
Your goal is to provide cinematic, high-impact, and emotionally resonant copy and strategy.
You analyze market trends deeply.
If the user asks for suggestions, provide them in a structured, persuasive format.
Context: {context}"""

RESEARCH_PROMPT = (
    "Find the latest high-performing campaigns, trends, or competitors related to: {query}. "
    "Summarize the key visual and textual elements that made them successful."
)

IMAGE_REFERENCE_PROMPT = "Use the attached image as a stylistic reference or composition guide. "

IMAGE_PROMPT = (
    "Create a high-end, award-winning photography or cinematic render. "
    "Photorealistic, dramatic lighting, 4k. Prompt: {prompt}"
)

NO_CONTENT_TEXT = "No content generated."
NO_RESEARCH_TEXT = "No research found."


def _is_rate_limit_error(error: Exception) -> bool:
    if isinstance(error, errors.APIError):
        return error.code == 429

    error_str = str(error)
    return "429" in error_str or "RESOURCE_EXHAUSTED" in error_str or "rate limit" in error_str.lower()


class GeminiService:
    """
    Service for Gemini text, search-grounded and image generation.

    Features:
    - Strategy copy with a Creative Director persona and thinking budget
    - Google Search grounded research with ordered sources
    - High-end image generation with optional reference image
    - Exponential backoff on rate limit errors
    """

    def __init__(self, api_key: Optional[str] = None, max_retries: Optional[int] = None):
        """
        Initialize Gemini service.

        Args:
            api_key: Gemini API key (if None, uses Config.GEMINI_API_KEY)
            max_retries: Retries on rate limit errors (if None, uses Config.MAX_RETRIES)

        Raises:
            ValueError: If API key not found
        """
        self.api_key = api_key or Config.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY not found in environment")

        self.client = genai.Client(api_key=self.api_key)
        self.max_retries = Config.MAX_RETRIES if max_retries is None else max_retries

        logger.info("GeminiService initialized")

    async def _call_with_retries(self, call: Callable[[], Any], label: str) -> Any:
        """
        Run a blocking client call off the event loop, retrying rate limits.

        Backoff is 15s, 30s, 60s, ... Any other error is wrapped in
        CapabilityError and raised immediately.
        """
        retry_count = 0

        while True:
            try:
                return await asyncio.to_thread(call)

            except Exception as e:
                if not _is_rate_limit_error(e):
                    logger.error(f"Error during {label}: {e}")
                    raise CapabilityError(f"{label} failed: {e}") from e

                retry_count += 1
                if retry_count > self.max_retries:
                    logger.error(f"Max retries exceeded for {label}")
                    raise RateLimitExceeded(self.max_retries, e) from e

                retry_delay = 15 * (2 ** (retry_count - 1))
                logger.warning(f"Rate limit hit. Retry {retry_count}/{self.max_retries} after {retry_delay}s...")
                await asyncio.sleep(retry_delay)

    # ========================================================================
    # Text & Strategy
    # ========================================================================

    async def generate_strategy(
        self,
        prompt: str,
        context_summary: str,
        attachments: Optional[List[MediaAttachment]] = None
    ) -> StrategyResult:
        """
        Generate copy or strategy as the agency Creative Director.

        Args:
            prompt: User request
            context_summary: Project context line (brand, industry, tone)
            attachments: Optional files sent as inline parts before the prompt

        Returns:
            StrategyResult with the generated prose
        """
        parts = [
            types.Part.from_bytes(data=att.to_bytes(), mime_type=att.mime_type)
            for att in attachments or []
        ]
        parts.append(types.Part.from_text(text=prompt))

        model = Config.get_model("strategy")
        config = types.GenerateContentConfig(
            system_instruction=STRATEGY_SYSTEM_PROMPT.format(context=context_summary),
            thinking_config=types.ThinkingConfig(thinking_budget=Config.STRATEGY_THINKING_BUDGET),
        )

        logger.debug(f"Generating strategy with {model} ({len(parts) - 1} attachments)")
        response = await self._call_with_retries(
            lambda: self.client.models.generate_content(model=model, contents=parts, config=config),
            "strategy generation",
        )

        return StrategyResult(text=response.text or NO_CONTENT_TEXT)

    # ========================================================================
    # Market Research (Grounding)
    # ========================================================================

    async def conduct_research(self, query: str) -> ResearchResult:
        """
        Research campaigns and trends with Google Search grounding.

        Args:
            query: Research topic

        Returns:
            ResearchResult with the summary and web sources in citation order
        """
        model = Config.get_model("research")
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )

        logger.debug(f"Conducting research with {model}: {query[:50]}...")
        response = await self._call_with_retries(
            lambda: self.client.models.generate_content(
                model=model,
                contents=RESEARCH_PROMPT.format(query=query),
                config=config,
            ),
            "research",
        )

        sources = self._extract_sources(response)
        logger.info(f"Research complete with {len(sources)} sources")
        return ResearchResult(text=response.text or NO_RESEARCH_TEXT, sources=sources)

    @staticmethod
    def _extract_sources(response: Any) -> List[Source]:
        """Pull web grounding chunks from the first candidate, keeping order."""
        if not response.candidates:
            return []

        metadata = getattr(response.candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []

        sources = []
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            if web and web.uri:
                sources.append(Source(uri=web.uri, title=web.title or ""))
        return sources

    # ========================================================================
    # Image Generation
    # ========================================================================

    async def generate_image(
        self,
        prompt: str,
        reference: Optional[MediaAttachment] = None
    ) -> Optional[str]:
        """
        Generate a cinematic image.

        Args:
            prompt: Scene description
            reference: Optional image used as a style/composition guide

        Returns:
            data: URI of the generated image, or None if the model returned no image
        """
        parts = []
        if reference is not None:
            parts.append(types.Part.from_bytes(data=reference.to_bytes(), mime_type=reference.mime_type))
            parts.append(types.Part.from_text(text=IMAGE_REFERENCE_PROMPT))
        parts.append(types.Part.from_text(text=IMAGE_PROMPT.format(prompt=prompt)))

        model = Config.get_model("image")
        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(
                aspect_ratio=Config.IMAGE_ASPECT_RATIO,
                image_size=Config.IMAGE_SIZE,
            ),
        )

        logger.debug(f"Generating image with prompt: {prompt[:50]}...")
        response = await self._call_with_retries(
            lambda: self.client.models.generate_content(model=model, contents=parts, config=config),
            "image generation",
        )

        image_uri = self._extract_image(response)
        if image_uri is None:
            logger.warning("No image found in Gemini response")
        return image_uri

    @staticmethod
    def _extract_image(response: Any) -> Optional[str]:
        if not response.candidates:
            return None

        content = response.candidates[0].content
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline and inline.data:
                mime_type = inline.mime_type or "image/png"
                encoded = base64.b64encode(inline.data).decode("utf-8")
                logger.info(f"Image generated successfully ({len(inline.data)} bytes)")
                return f"data:{mime_type};base64,{encoded}"
        return None
