"""
VeoService - Google Veo 3.1 video generation.

Starts a Veo long-running operation, polls it until done (bounded by a
PollPolicy timeout), downloads the first clip and stores it locally.

Documentation: https://ai.google.dev/gemini-api/docs/video
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Optional

from google import genai
from google.genai import types

from ..core.config import Config
from .exceptions import CapabilityError, VideoGenerationTimeout
from .veo_models import PollPolicy, VeoConfig

logger = logging.getLogger(__name__)


CINEMATIC_PREFIX = "Cinematic shot, movie quality, high production value."


class VeoService:
    """
    Service for Google Veo 3.1 video generation.

    Outcomes of generate_video():
    - path to the saved .mp4 when a clip was produced
    - None when the operation finished without a clip (or reported an error)
    - CapabilityError for transport/auth failures and poll timeouts
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[VeoConfig] = None,
        poll_policy: Optional[PollPolicy] = None,
        output_dir: Optional[str] = None
    ):
        """
        Initialize Veo service.

        The client is created per generation so a key selected after start-up
        is picked up.

        Args:
            api_key: Gemini API key (if None, uses Config.GEMINI_API_KEY at call time)
            config: Video settings (default: VeoConfig.from_config())
            poll_policy: Poll interval/timeout (default: PollPolicy.from_config())
            output_dir: Where clips are written (default: Config.VIDEO_OUTPUT_DIR)
        """
        self._api_key = api_key
        self.config = config or VeoConfig.from_config()
        self.poll_policy = poll_policy or PollPolicy.from_config()
        self.output_dir = Path(output_dir or Config.VIDEO_OUTPUT_DIR)

        logger.info(
            f"VeoService initialized (model={self.config.model_variant.model_name}, "
            f"poll={self.poll_policy.interval_seconds}s, timeout={self.poll_policy.timeout_seconds}s)"
        )

    def ensure_api_key(self) -> str:
        """
        Resolve the key to use for this generation.

        Raises:
            CapabilityError: If no key is configured
        """
        api_key = self._api_key or Config.GEMINI_API_KEY
        if not api_key:
            raise CapabilityError("GEMINI_API_KEY not found in environment; select a key before generating video")
        return api_key

    def _create_client(self) -> genai.Client:
        return genai.Client(api_key=self.ensure_api_key())

    def _build_generate_config(self) -> types.GenerateVideosConfig:
        veo_config = types.GenerateVideosConfig(
            number_of_videos=self.config.number_of_videos,
            resolution=self.config.resolution.value,
            aspect_ratio=self.config.aspect_ratio.value,
        )
        if self.config.negative_prompt:
            veo_config.negative_prompt = self.config.negative_prompt
        return veo_config

    async def generate_video(self, prompt: str) -> Optional[str]:
        """
        Generate a cinematic clip.

        Args:
            prompt: Scene description

        Returns:
            Local path of the saved video, or None if no video was produced

        Raises:
            CapabilityError: On API failure
            VideoGenerationTimeout: If the operation outlives the poll policy
        """
        client = self._create_client()
        full_prompt = f"{CINEMATIC_PREFIX} {prompt}"
        model_name = self.config.model_variant.model_name

        start_time = time.monotonic()
        try:
            logger.info(f"Starting Veo generation with {model_name}")
            operation = await asyncio.to_thread(
                lambda: client.models.generate_videos(
                    model=model_name,
                    prompt=full_prompt,
                    config=self._build_generate_config()
                )
            )
        except Exception as e:
            raise CapabilityError(f"Failed to start video generation: {e}") from e

        operation = await self._wait_for_operation(client, operation, start_time)

        if getattr(operation, "error", None):
            logger.error(f"Veo operation finished with error: {operation.error}")
            return None

        response = operation.response
        if not response or not response.generated_videos:
            logger.warning("Veo operation finished without a video")
            return None

        video = response.generated_videos[0].video
        if video is None:
            logger.warning("Veo returned an empty video entry")
            return None

        path = await self._save_video(client, video)
        logger.info(f"Video generation completed in {time.monotonic() - start_time:.1f}s: {path}")
        return str(path)

    async def _wait_for_operation(self, client: genai.Client, operation: Any, start_time: float) -> Any:
        """Poll until the operation reports done, or the policy times out."""
        name = getattr(operation, "name", "") or ""
        timeout = self.poll_policy.timeout_seconds

        while not operation.done:
            elapsed = time.monotonic() - start_time
            if elapsed >= timeout:
                raise VideoGenerationTimeout(timeout, name)

            logger.debug(f"Waiting for video generation... {name} ({elapsed:.0f}s elapsed)")
            # Never sleep past the timeout
            await asyncio.sleep(min(self.poll_policy.interval_seconds, timeout - elapsed))

            try:
                operation = await asyncio.to_thread(lambda: client.operations.get(operation))
            except Exception as e:
                raise CapabilityError(f"Failed to poll video operation {name}: {e}") from e

        return operation

    async def _save_video(self, client: genai.Client, video: Any) -> Path:
        try:
            video_data = await asyncio.to_thread(lambda: client.files.download(file=video))
        except Exception as e:
            raise CapabilityError(f"Failed to download generated video: {e}") from e

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{uuid.uuid4().hex}.mp4"
        await asyncio.to_thread(path.write_bytes, video_data)
        return path
