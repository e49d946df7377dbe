"""Streamlit rendering for a single transcript message."""

from datetime import datetime

import streamlit as st

from omnicreative.core.models import ContentType, MediaAttachment, Message, Role


def chat_role(message: Message) -> str:
    """Map a message role onto Streamlit's chat avatars."""
    return "user" if message.role == Role.USER else "assistant"


def render_message(message: Message) -> None:
    """Render one message bubble: thinking flag, body by type, timestamp."""
    with st.chat_message(chat_role(message)):
        if message.is_placeholder:
            st.caption(":orange[Thinking...]")

        metadata = message.metadata
        if message.type == ContentType.IMAGE and metadata and metadata.image_url:
            st.caption(message.content)
            st.image(MediaAttachment.from_data_uri(metadata.image_url).to_bytes(), use_container_width=True)

        elif message.type == ContentType.VIDEO and metadata and metadata.video_url:
            st.caption(message.content)
            st.video(metadata.video_url)

        else:
            st.markdown(message.content)
            if metadata and metadata.sources:
                st.divider()
                st.markdown("**🔍 Sources**")
                for source in metadata.sources:
                    st.markdown(f"- [{source.label}]({source.uri})")

        for attachment in message.attachments or []:
            if attachment.is_image:
                st.image(attachment.to_bytes(), caption=f"📎 {attachment.display_name}", width=200)

        st.caption(datetime.fromtimestamp(message.timestamp / 1000).strftime("%H:%M:%S"))
