"""
GenerationController - one request lifecycle per submission.

IDLE -> VALIDATING -> DISPATCHED -> (PLACEHOLDER_SHOWN ->) RECONCILING -> IDLE

Every accepted submission appends exactly one user record and exactly one
terminal assistant record (a result or a fixed-text failure) to the
ConversationStore, and always releases the busy flag. Capability errors
never escape submit().
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

import logfire

from ..core.models import (
    ContentType,
    GenerationMode,
    MediaAttachment,
    Message,
    MessageMetadata,
    PLACEHOLDER_MESSAGE_ID,
    ProjectContext,
    Role,
)
from .capabilities import Capabilities
from .conversation_store import Composer, ConversationStore

logger = logging.getLogger(__name__)


IMAGE_FAILED_TEXT = "Failed to generate image. Please try again."
VIDEO_FAILED_TEXT = "Video generation failed or was cancelled."
GENERIC_FAULT_TEXT = (
    "An error occurred while processing your request. "
    "Please check your API configuration."
)
VIDEO_PLACEHOLDER_TEXT = "Producing cinematic video... This may take a minute."


class LifecycleState(str, Enum):
    """Where the controller is within the current submission."""
    IDLE = "idle"
    VALIDATING = "validating"
    DISPATCHED = "dispatched"
    PLACEHOLDER_SHOWN = "placeholder_shown"
    RECONCILING = "reconciling"


Handler = Callable[
    ["GenerationController", str, Optional[MediaAttachment], ProjectContext],
    Awaitable[Message]
]


class GenerationController:
    """
    Routes a submission to the capability for the active mode and
    reconciles the outcome into the store.

    The controller keeps no conversation state of its own; mode and context
    are supplied per call.
    """

    # Filled in below the class body; every GenerationMode must be present.
    _HANDLERS: Dict[GenerationMode, Handler] = {}

    def __init__(self, store: ConversationStore, capabilities: Capabilities):
        self._store = store
        self._capabilities = capabilities
        self._state = LifecycleState.IDLE

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def state(self) -> LifecycleState:
        return self._state

    # ========================================================================
    # Public API
    # ========================================================================

    async def submit(
        self,
        raw_input: str,
        attachment: Optional[MediaAttachment] = None,
        *,
        mode: GenerationMode,
        context: ProjectContext
    ) -> bool:
        """
        Run one request lifecycle.

        Args:
            raw_input: Prompt text as typed
            attachment: Optional file to send along
            mode: Active generation mode
            context: Project context (used by copywriting)

        Returns:
            True if the submission was accepted, False if it was ignored
            (empty input with no attachment, or a request already in flight)
        """
        # A busy store belongs to another lifecycle; leave its state alone.
        if self._store.is_busy:
            logger.debug("Submission ignored: request already in flight")
            return False

        self._state = LifecycleState.VALIDATING
        if not raw_input.strip() and attachment is None:
            self._state = LifecycleState.IDLE
            return False

        await self._run_lifecycle(raw_input, attachment, mode, context)
        return True

    async def submit_from(
        self,
        composer: Composer,
        *,
        mode: GenerationMode,
        context: ProjectContext
    ) -> bool:
        """
        Submit the composer's contents, consuming them only when accepted.
        """
        if self._store.is_busy or composer.is_empty:
            return False

        raw_input, attachment = composer.take()
        return await self.submit(raw_input, attachment, mode=mode, context=context)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def _run_lifecycle(
        self,
        raw_input: str,
        attachment: Optional[MediaAttachment],
        mode: GenerationMode,
        context: ProjectContext
    ) -> None:
        self._store.mark_busy()
        try:
            user_message = self._build_user_message(raw_input, attachment)
            self._store.append(user_message)

            with logfire.span(
                "generation_lifecycle",
                mode=mode.value,
                message_id=user_message.id,
                has_attachment=attachment is not None,
            ):
                self._state = LifecycleState.DISPATCHED
                handler = self._HANDLERS[mode]

                try:
                    result = await handler(self, raw_input, attachment, context)
                except Exception:
                    logger.exception(f"{mode.value} request failed")
                    result = self._assistant_text(GENERIC_FAULT_TEXT)

                self._state = LifecycleState.RECONCILING
                self._store.append(result)
                logger.info(f"{mode.value} request settled: {result.type.value} message {result.id}")
        finally:
            self._store.mark_idle()
            self._state = LifecycleState.IDLE

    def _build_user_message(self, raw_input: str, attachment: Optional[MediaAttachment]) -> Message:
        content = raw_input
        if attachment is not None:
            content += f"\n[Attached: {attachment.display_name}]"

        return Message(
            role=Role.USER,
            content=content,
            type=ContentType.TEXT,
            attachments=[attachment] if attachment is not None else None,
            timestamp=self._store.now_ms(),
        )

    def _assistant_text(self, content: str, **kwargs) -> Message:
        return Message.assistant_text(content, timestamp=self._store.now_ms(), **kwargs)

    # ========================================================================
    # Mode handlers
    # ========================================================================

    async def _run_copywriting(
        self,
        text: str,
        attachment: Optional[MediaAttachment],
        context: ProjectContext
    ) -> Message:
        attachments = [attachment] if attachment is not None else []
        result = await self._capabilities.strategy(text, context.to_prompt_context(), attachments)
        return self._assistant_text(result.text)

    async def _run_research(
        self,
        text: str,
        attachment: Optional[MediaAttachment],
        context: ProjectContext
    ) -> Message:
        result = await self._capabilities.research(text)
        return Message(
            role=Role.ASSISTANT,
            content=result.text,
            type=ContentType.RESEARCH,
            metadata=MessageMetadata(sources=list(result.sources)),
            timestamp=self._store.now_ms(),
        )

    async def _run_visual(
        self,
        text: str,
        attachment: Optional[MediaAttachment],
        context: ProjectContext
    ) -> Message:
        reference = attachment if attachment is not None and attachment.is_image else None
        image_url = await self._capabilities.image(text, reference)

        if not image_url:
            return self._assistant_text(IMAGE_FAILED_TEXT)

        return Message(
            role=Role.ASSISTANT,
            content=f'Generated concept based on: "{text}"',
            type=ContentType.IMAGE,
            metadata=MessageMetadata(image_url=image_url),
            timestamp=self._store.now_ms(),
        )

    async def _run_video(
        self,
        text: str,
        attachment: Optional[MediaAttachment],
        context: ProjectContext
    ) -> Message:
        self._store.append(self._assistant_text(
            VIDEO_PLACEHOLDER_TEXT,
            id=PLACEHOLDER_MESSAGE_ID,
            metadata=MessageMetadata(thinking=True),
        ))
        self._state = LifecycleState.PLACEHOLDER_SHOWN

        try:
            video_url = await self._capabilities.video(text)
        finally:
            self._store.remove_by_id(PLACEHOLDER_MESSAGE_ID)

        if not video_url:
            return self._assistant_text(VIDEO_FAILED_TEXT)

        return Message(
            role=Role.ASSISTANT,
            content=f'Render complete for scene: "{text}"',
            type=ContentType.VIDEO,
            metadata=MessageMetadata(video_url=video_url),
            timestamp=self._store.now_ms(),
        )


GenerationController._HANDLERS = {
    GenerationMode.COPYWRITING: GenerationController._run_copywriting,
    GenerationMode.RESEARCH: GenerationController._run_research,
    GenerationMode.VISUAL: GenerationController._run_visual,
    GenerationMode.VIDEO: GenerationController._run_video,
}

_missing_modes = set(GenerationMode) - set(GenerationController._HANDLERS)
if _missing_modes:
    raise TypeError(
        f"No handler for generation modes: {', '.join(sorted(m.value for m in _missing_modes))}"
    )
