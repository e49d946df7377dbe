"""
Streamlit UI - OmniCreative studio dashboard.

Single-page chat with four generation tools:
- Copy & Strategy: Creative Director copy with project context
- Research: Google Search grounded market research
- Visuals: high-end image generation (optional reference image)
- Veo Video: cinematic clip generation

Run with:
    streamlit run omnicreative/ui/app.py

Environment variables required:
    GEMINI_API_KEY: Google Gemini API key
    VIDEO_OUTPUT_DIR: (optional) Where generated clips are saved
    LOGFIRE_TOKEN: (optional) Send traces to Logfire
"""

import asyncio
import logging

import streamlit as st

from omnicreative.core.config import Config
from omnicreative.core.models import GenerationMode, MediaAttachment, ProjectContext
from omnicreative.core.observability import setup_logfire
from omnicreative.services import Capabilities, Composer, ConversationStore, GenerationController
from omnicreative.ui.message_view import render_message

logger = logging.getLogger(__name__)


@st.cache_resource
def init_observability() -> bool:
    """Initialize logging and Logfire once per process."""
    logging.basicConfig(level=Config.LOG_LEVEL)
    return setup_logfire()


# ============================================================================
# Session State
# ============================================================================


def initialize_session_state():
    """Initialize session state variables on first load."""
    if "capabilities" not in st.session_state:
        try:
            st.session_state.capabilities = Capabilities.create()
            st.session_state.initialization_error = None
        except Exception as e:
            logger.error(f"Failed to initialize capabilities: {e}")
            st.session_state.initialization_error = str(e)
            st.session_state.capabilities = None

    if "store" not in st.session_state:
        st.session_state.store = ConversationStore.with_welcome()
    if "composer" not in st.session_state:
        st.session_state.composer = Composer()
    if "mode" not in st.session_state:
        st.session_state.mode = GenerationMode.COPYWRITING
    if "project_context" not in st.session_state:
        st.session_state.project_context = ProjectContext()
    if "uploader_key" not in st.session_state:
        st.session_state.uploader_key = 0


# ============================================================================
# Sidebar
# ============================================================================


def render_sidebar():
    """Render tool selector, project context and chat management."""
    with st.sidebar:
        st.title("OmniCreative")
        st.caption("AI Creative Director")

        st.subheader("Tools")
        cols = st.columns(2)
        for i, mode in enumerate(GenerationMode):
            with cols[i % 2]:
                if st.button(
                    mode.label,
                    key=f"mode_{mode.value}",
                    type="primary" if st.session_state.mode == mode else "secondary",
                    use_container_width=True,
                ):
                    st.session_state.mode = mode
                    st.rerun()

        st.subheader("Project Context")
        context = st.session_state.project_context
        brand_name = st.text_input("Brand Name", value=context.brand_name)
        industry = st.text_input("Industry", value=context.industry)
        tone = st.text_area("Tone & Voice", value=context.tone)
        st.session_state.project_context = ProjectContext(
            brand_name=brand_name,
            industry=industry,
            tone=tone,
        )

        st.divider()
        if st.button("Clear Chat", use_container_width=True):
            if st.session_state.store.clear():
                st.rerun()
            else:
                st.warning("A request is still running.")


# ============================================================================
# Chat Interface
# ============================================================================


def render_attachment_picker():
    """Feed the uploaded file (if any) into the composer."""
    composer: Composer = st.session_state.composer

    uploaded_file = st.file_uploader(
        "📎 Upload Reference (Image/Video)",
        type=["png", "jpg", "jpeg", "webp", "mp4", "mov"],
        key=f"reference_uploader_{st.session_state.uploader_key}",
    )
    if uploaded_file is not None:
        composer.attachment = MediaAttachment.from_bytes(
            uploaded_file.getvalue(),
            mime_type=uploaded_file.type or "application/octet-stream",
            name=uploaded_file.name,
        )
        st.info(f"📎 Attached: {uploaded_file.name}")
    else:
        composer.attachment = None


def render_chat_interface():
    """Render transcript, composer and run submissions."""
    mode: GenerationMode = st.session_state.mode
    st.title(f"🎬 {mode.label}")

    if st.session_state.get("initialization_error"):
        st.error(
            f"❌ **Initialization Error:** {st.session_state.initialization_error}\n\n"
            "Please check that `GEMINI_API_KEY` is set."
        )
        return

    store: ConversationStore = st.session_state.store
    for message in store.messages:
        render_message(message)

    # Messages added by the running lifecycle are drawn here until the rerun
    live_area = st.empty()

    render_attachment_picker()

    composer: Composer = st.session_state.composer
    prompt = st.chat_input(mode.input_hint, disabled=store.is_busy)
    if prompt is None:
        return

    composer.text = prompt
    controller = GenerationController(store, st.session_state.capabilities)
    seen = len(store)

    def render_pending():
        with live_area.container():
            for message in store.messages[seen:]:
                render_message(message)

    store.add_listener(render_pending)
    try:
        with st.spinner(mode.working_status):
            accepted = asyncio.run(controller.submit_from(
                composer,
                mode=mode,
                context=st.session_state.project_context,
            ))
    finally:
        store.remove_listener(render_pending)

    if accepted:
        # New widget key drops the consumed file from the uploader
        st.session_state.uploader_key += 1
    st.rerun()


# ============================================================================
# Footer
# ============================================================================


def render_footer():
    """Render footer with session information."""
    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        st.caption(f"🏷️ Brand: **{st.session_state.project_context.brand_name}**")
    with col2:
        st.caption(f"💬 Messages: **{len(st.session_state.store)}**")


# ============================================================================
# Main
# ============================================================================

st.set_page_config(page_title="OmniCreative Studio", page_icon="🎬", layout="wide")
init_observability()
initialize_session_state()
render_sidebar()
render_chat_interface()
render_footer()
