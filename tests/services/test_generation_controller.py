"""
Tests for GenerationController - routing, placeholder handling, failure
reconciliation and the single-flight busy gate.

All capabilities are AsyncMocks; no network calls are made.
"""

import base64

import pytest
from unittest.mock import AsyncMock

from omnicreative.core.models import (
    ContentType,
    GenerationMode,
    MediaAttachment,
    PLACEHOLDER_MESSAGE_ID,
    ProjectContext,
    ResearchResult,
    Role,
    Source,
    StrategyResult,
)
from omnicreative.services.capabilities import Capabilities
from omnicreative.services.conversation_store import Composer, ConversationStore
from omnicreative.services.exceptions import CapabilityError, VideoGenerationTimeout
from omnicreative.services.generation_controller import (
    GENERIC_FAULT_TEXT,
    GenerationController,
    IMAGE_FAILED_TEXT,
    LifecycleState,
    VIDEO_FAILED_TEXT,
)

IMAGE_URI = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()


@pytest.fixture
def capabilities():
    return Capabilities(
        strategy=AsyncMock(return_value=StrategyResult(text="Bold copy")),
        research=AsyncMock(return_value=ResearchResult(
            text="Trends summary",
            sources=[Source(uri="https://a.example", title="A"), Source(uri="https://b.example", title="B")],
        )),
        image=AsyncMock(return_value=IMAGE_URI),
        video=AsyncMock(return_value="generated_videos/clip.mp4"),
    )


@pytest.fixture
def store():
    return ConversationStore.with_welcome()


@pytest.fixture
def controller(store, capabilities):
    return GenerationController(store, capabilities)


@pytest.fixture
def context():
    return ProjectContext()


@pytest.fixture
def png_attachment():
    return MediaAttachment.from_bytes(b"ref-image", "image/png", name="ref.png")


# ============================================================================
# Per-mode outcomes
# ============================================================================

class TestCopywriting:

    @pytest.mark.asyncio
    async def test_appends_user_and_strategy_text(self, controller, store, capabilities, context):
        accepted = await controller.submit("Write a launch tagline", mode=GenerationMode.COPYWRITING, context=context)

        assert accepted is True
        user, reply = store.messages[-2:]
        assert user.role == Role.USER
        assert user.content == "Write a launch tagline"
        assert reply.role == Role.ASSISTANT
        assert reply.type == ContentType.TEXT
        assert reply.content == "Bold copy"

    @pytest.mark.asyncio
    async def test_passes_context_summary_and_attachment(self, controller, capabilities, png_attachment):
        context = ProjectContext(brand_name="Acme", industry="Retail", tone="Bold")
        await controller.submit("Tagline", png_attachment, mode=GenerationMode.COPYWRITING, context=context)

        capabilities.strategy.assert_awaited_once_with(
            "Tagline", "Brand: Acme, Industry: Retail, Tone: Bold", [png_attachment]
        )

    @pytest.mark.asyncio
    async def test_no_attachment_passes_empty_list(self, controller, capabilities, context):
        await controller.submit("Tagline", mode=GenerationMode.COPYWRITING, context=context)
        assert capabilities.strategy.await_args.args[2] == []


class TestResearch:

    @pytest.mark.asyncio
    async def test_research_message_keeps_source_order(self, controller, store, context):
        """Scenario: grounded research returns two sources in citation order."""
        await controller.submit("Q3 sneaker trends", mode=GenerationMode.RESEARCH, context=context)

        reply = store.messages[-1]
        assert reply.type == ContentType.RESEARCH
        assert reply.content == "Trends summary"
        assert [s.uri for s in reply.metadata.sources] == ["https://a.example", "https://b.example"]

    @pytest.mark.asyncio
    async def test_empty_sources_still_research(self, controller, store, capabilities, context):
        capabilities.research.return_value = ResearchResult(text="Nothing notable")
        await controller.submit("obscure", mode=GenerationMode.RESEARCH, context=context)

        reply = store.messages[-1]
        assert reply.type == ContentType.RESEARCH
        assert reply.metadata.sources == []


class TestVisual:

    @pytest.mark.asyncio
    async def test_image_message_with_reference(self, controller, store, capabilities, context, png_attachment):
        """Scenario: image generation with a reference attachment."""
        await controller.submit("neon skyline", png_attachment, mode=GenerationMode.VISUAL, context=context)

        capabilities.image.assert_awaited_once_with("neon skyline", png_attachment)
        user, reply = store.messages[-2:]
        assert user.attachments == [png_attachment]
        assert "[Attached: ref.png]" in user.content
        assert reply.type == ContentType.IMAGE
        assert reply.metadata.image_url == IMAGE_URI
        assert reply.content == 'Generated concept based on: "neon skyline"'

    @pytest.mark.asyncio
    async def test_non_image_attachment_not_used_as_reference(self, controller, capabilities, context):
        pdf = MediaAttachment.from_bytes(b"%PDF", "application/pdf", name="brief.pdf")
        await controller.submit("poster", pdf, mode=GenerationMode.VISUAL, context=context)

        capabilities.image.assert_awaited_once_with("poster", None)

    @pytest.mark.asyncio
    async def test_no_image_gives_fixed_failure_text(self, controller, store, capabilities, context):
        capabilities.image.return_value = None
        await controller.submit("poster", mode=GenerationMode.VISUAL, context=context)

        reply = store.messages[-1]
        assert reply.type == ContentType.TEXT
        assert reply.content == IMAGE_FAILED_TEXT


class TestVideo:

    @pytest.mark.asyncio
    async def test_placeholder_shown_during_call_and_removed_after(self, controller, store, capabilities, context):
        """Scenario: the placeholder sits at the tail while the video renders."""
        seen = {}

        async def fake_video(prompt):
            tail = store.messages[-1]
            seen["tail_id"] = tail.id
            seen["thinking"] = tail.is_placeholder
            seen["state"] = controller.state
            seen["busy"] = store.is_busy
            return "generated_videos/clip.mp4"

        capabilities.video.side_effect = fake_video
        await controller.submit("drone shot over dunes", mode=GenerationMode.VIDEO, context=context)

        assert seen == {
            "tail_id": PLACEHOLDER_MESSAGE_ID,
            "thinking": True,
            "state": LifecycleState.PLACEHOLDER_SHOWN,
            "busy": True,
        }
        assert store.get(PLACEHOLDER_MESSAGE_ID) is None
        reply = store.messages[-1]
        assert reply.type == ContentType.VIDEO
        assert reply.metadata.video_url == "generated_videos/clip.mp4"
        assert reply.content == 'Render complete for scene: "drone shot over dunes"'

    @pytest.mark.asyncio
    async def test_no_video_gives_fixed_failure_text(self, controller, store, capabilities, context):
        capabilities.video.return_value = None
        await controller.submit("scene", mode=GenerationMode.VIDEO, context=context)

        assert store.get(PLACEHOLDER_MESSAGE_ID) is None
        assert store.messages[-1].content == VIDEO_FAILED_TEXT

    @pytest.mark.asyncio
    async def test_fault_removes_placeholder_and_reports_generic_text(self, controller, store, capabilities, context):
        """Scenario: the video capability throws mid-render."""
        capabilities.video.side_effect = CapabilityError("network down")
        before = len(store)

        accepted = await controller.submit("scene", mode=GenerationMode.VIDEO, context=context)

        assert accepted is True
        assert store.get(PLACEHOLDER_MESSAGE_ID) is None
        assert len(store) == before + 2
        assert store.messages[-1].content == GENERIC_FAULT_TEXT
        assert store.is_busy is False

    @pytest.mark.asyncio
    async def test_timeout_is_a_fault(self, controller, store, capabilities, context):
        capabilities.video.side_effect = VideoGenerationTimeout(600, "operations/abc")
        await controller.submit("scene", mode=GenerationMode.VIDEO, context=context)

        assert store.messages[-1].content == GENERIC_FAULT_TEXT

    @pytest.mark.asyncio
    async def test_listener_sees_user_turn_and_placeholder_before_result(self, controller, store, context):
        """Front ends redrawing on each change see the placeholder while the video renders."""
        seen = len(store)
        frames = []
        store.add_listener(lambda: frames.append([
            (m.role, m.id == PLACEHOLDER_MESSAGE_ID) for m in store.messages[seen:]
        ]))

        await controller.submit("drone shot", mode=GenerationMode.VIDEO, context=context)

        assert frames == [
            [(Role.USER, False)],
            [(Role.USER, False), (Role.ASSISTANT, True)],
            [(Role.USER, False)],
            [(Role.USER, False), (Role.ASSISTANT, False)],
        ]


# ============================================================================
# Walkthrough scenarios
# ============================================================================

class TestScenarios:

    @pytest.mark.asyncio
    async def test_copywriting_tagline(self, controller, store, capabilities):
        """Default context, a tagline request, a short answer."""
        capabilities.strategy.return_value = StrategyResult(text="Shine Beyond.")
        before = len(store)

        await controller.submit("Write a tagline for LuxNova", mode=GenerationMode.COPYWRITING, context=ProjectContext())

        capabilities.strategy.assert_awaited_once_with(
            "Write a tagline for LuxNova",
            "Brand: LuxNova, Industry: Tech / Lifestyle, Tone: Futuristic, Premium, Minimalist",
            [],
        )
        user, reply = store.messages[before:]
        assert user.content == "Write a tagline for LuxNova"
        assert (reply.role, reply.type, reply.content) == (Role.ASSISTANT, ContentType.TEXT, "Shine Beyond.")
        assert store.is_busy is False

    @pytest.mark.asyncio
    async def test_visual_with_no_image_returned(self, controller, store, capabilities, context):
        capabilities.image.return_value = None
        before = len(store)

        await controller.submit("neon skyline", mode=GenerationMode.VISUAL, context=context)

        capabilities.image.assert_awaited_once_with("neon skyline", None)
        user, reply = store.messages[before:]
        assert user.content == "neon skyline"
        assert (reply.type, reply.content) == (ContentType.TEXT, "Failed to generate image. Please try again.")

    @pytest.mark.asyncio
    async def test_research_with_single_source(self, controller, store, capabilities, context):
        capabilities.research.return_value = ResearchResult(
            text="Minimalist wearables are trending.",
            sources=[Source(uri="https://trends.example/wearables", title="Wearables 2025")],
        )

        await controller.submit("wearable trends", mode=GenerationMode.RESEARCH, context=context)

        reply = store.messages[-1]
        assert reply.type == ContentType.RESEARCH
        assert reply.content == "Minimalist wearables are trending."
        assert reply.metadata.sources == [Source(uri="https://trends.example/wearables", title="Wearables 2025")]


# ============================================================================
# Lifecycle guarantees
# ============================================================================

class TestLifecycle:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", list(GenerationMode))
    async def test_exactly_two_records_per_accepted_submission(self, controller, store, context, mode):
        before = len(store)
        await controller.submit("go", mode=mode, context=context)

        added = store.messages[before:]
        assert len(added) == 2
        assert added[0].role == Role.USER
        assert added[1].role == Role.ASSISTANT
        assert not added[1].is_placeholder

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", list(GenerationMode))
    async def test_faults_never_escape(self, controller, store, capabilities, context, mode):
        for fn in (capabilities.strategy, capabilities.research, capabilities.image, capabilities.video):
            fn.side_effect = RuntimeError("boom")

        assert await controller.submit("go", mode=mode, context=context) is True
        assert store.messages[-1].content == GENERIC_FAULT_TEXT
        assert store.is_busy is False
        assert controller.state == LifecycleState.IDLE

    @pytest.mark.asyncio
    async def test_settles_idle(self, controller, store, context):
        await controller.submit("go", mode=GenerationMode.COPYWRITING, context=context)
        assert store.is_busy is False
        assert controller.state == LifecycleState.IDLE

    @pytest.mark.asyncio
    async def test_timestamps_non_decreasing(self, controller, store, context):
        for mode in GenerationMode:
            await controller.submit("go", mode=mode, context=context)

        timestamps = [m.timestamp for m in store.messages]
        assert timestamps == sorted(timestamps)

    def test_every_mode_has_a_handler(self):
        assert set(GenerationController._HANDLERS) == set(GenerationMode)


class TestIgnoredSubmissions:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["", "   ", "\n\t"])
    async def test_empty_input_is_noop(self, controller, store, capabilities, context, raw):
        before = store.messages
        accepted = await controller.submit(raw, mode=GenerationMode.COPYWRITING, context=context)

        assert accepted is False
        assert store.messages == before
        capabilities.strategy.assert_not_awaited()
        assert controller.state == LifecycleState.IDLE

    @pytest.mark.asyncio
    async def test_attachment_alone_is_accepted(self, controller, store, png_attachment, context):
        accepted = await controller.submit("", png_attachment, mode=GenerationMode.COPYWRITING, context=context)

        assert accepted is True
        assert store.messages[-2].content == "\n[Attached: ref.png]"

    @pytest.mark.asyncio
    async def test_busy_store_ignores_submission(self, controller, store, capabilities, context):
        store.mark_busy()
        before = store.messages

        accepted = await controller.submit("go", mode=GenerationMode.RESEARCH, context=context)

        assert accepted is False
        assert store.messages == before
        assert store.is_busy is True
        capabilities.research.assert_not_awaited()


class TestSubmitFrom:

    @pytest.mark.asyncio
    async def test_consumes_composer_when_accepted(self, controller, capabilities, context, png_attachment):
        composer = Composer("neon skyline", png_attachment)

        accepted = await controller.submit_from(composer, mode=GenerationMode.VISUAL, context=context)

        assert accepted is True
        assert composer.is_empty
        capabilities.image.assert_awaited_once_with("neon skyline", png_attachment)

    @pytest.mark.asyncio
    async def test_keeps_composer_when_busy(self, controller, store, context, png_attachment):
        composer = Composer("neon skyline", png_attachment)
        store.mark_busy()

        accepted = await controller.submit_from(composer, mode=GenerationMode.VISUAL, context=context)

        assert accepted is False
        assert composer.text == "neon skyline"
        assert composer.attachment is png_attachment

    @pytest.mark.asyncio
    async def test_attachment_reaches_one_call_only(self, controller, capabilities, context, png_attachment):
        composer = Composer("first", png_attachment)
        await controller.submit_from(composer, mode=GenerationMode.COPYWRITING, context=context)

        composer.text = "second"
        await controller.submit_from(composer, mode=GenerationMode.COPYWRITING, context=context)

        first, second = capabilities.strategy.await_args_list
        assert first.args[2] == [png_attachment]
        assert second.args[2] == []
