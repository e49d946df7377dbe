"""
Pydantic models for the OmniCreative conversation.

These models provide type-safe, validated data structures for:
- Transcript entries (Message, MessageMetadata, Source)
- User-supplied media (MediaAttachment)
- Strategy context threaded into copywriting requests (ProjectContext)
- Capability results (StrategyResult, ResearchResult)
"""

import base64
import binascii
import time
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# Enums
# ============================================================================

class Role(str, Enum):
    """Author of a transcript entry."""
    USER = "user"
    ASSISTANT = "model"


class ContentType(str, Enum):
    """Selects how a message is rendered."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    RESEARCH = "research"


class GenerationMode(str, Enum):
    """Which capability handles the next submission."""
    COPYWRITING = "copywriting"  # Text generation
    RESEARCH = "research"        # Search grounding
    VISUAL = "visual"            # Image generation
    VIDEO = "video"              # Video generation

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def input_hint(self) -> str:
        """Composer placeholder text for this mode."""
        return _MODE_HINTS[self]

    @property
    def working_status(self) -> str:
        """Status line shown while a request in this mode is in flight."""
        return _MODE_STATUS[self]


_MODE_LABELS = {
    GenerationMode.COPYWRITING: "Copy & Strategy",
    GenerationMode.RESEARCH: "Research",
    GenerationMode.VISUAL: "Visuals",
    GenerationMode.VIDEO: "Veo Video",
}

_MODE_HINTS = {
    GenerationMode.COPYWRITING: "Describe the campaign or copy needs...",
    GenerationMode.RESEARCH: "What market trends should we analyze?",
    GenerationMode.VISUAL: "Describe the image to generate...",
    GenerationMode.VIDEO: "Describe the scene for the video...",
}

_MODE_STATUS = {
    GenerationMode.COPYWRITING: "Crafting strategy...",
    GenerationMode.RESEARCH: "Analyzing market data...",
    GenerationMode.VISUAL: "Generating high-fidelity image...",
    GenerationMode.VIDEO: "Rendering video (this takes time)...",
}


# Ids reserved for non-lifecycle entries. Generated ids are uuid4 hex and
# never take these values.
WELCOME_MESSAGE_ID = "welcome"
PLACEHOLDER_MESSAGE_ID = "temp-video"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_message_id() -> str:
    return uuid.uuid4().hex


# ============================================================================
# Media
# ============================================================================

class MediaAttachment(BaseModel):
    """
    A user-supplied file, held as base64 without a data-URI prefix.
    """
    mime_type: str = Field(..., min_length=1, description="MIME type, e.g. image/png")
    data: str = Field(..., description="Base64-encoded payload (no data: prefix)")
    name: Optional[str] = Field(None, description="Original file name")

    @field_validator("data")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        if v.startswith("data:"):
            raise ValueError("data must not carry a data-URI prefix")
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"data is not valid base64: {e}")
        return v

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str, name: Optional[str] = None) -> "MediaAttachment":
        return cls(
            mime_type=mime_type,
            data=base64.b64encode(raw).decode("utf-8"),
            name=name,
        )

    @classmethod
    def from_data_uri(cls, uri: str, name: Optional[str] = None) -> "MediaAttachment":
        """Build from a 'data:<mime>;base64,<payload>' string."""
        header, sep, payload = uri.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Not a base64 data URI")
        mime_type = header[len("data:"):-len(";base64")]
        return cls(mime_type=mime_type, data=payload, name=name)

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def display_name(self) -> str:
        return self.name or self.mime_type

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


# ============================================================================
# Transcript
# ============================================================================

class Source(BaseModel):
    """A web page that grounded a research answer."""
    uri: str
    title: str = ""

    @property
    def label(self) -> str:
        return self.title or self.uri


class MessageMetadata(BaseModel):
    """Rendering payload attached to a message."""
    image_url: Optional[str] = Field(None, description="Generated image (data URI)")
    video_url: Optional[str] = Field(None, description="Generated video (local path or URL)")
    sources: Optional[List[Source]] = Field(None, description="Ordered grounding sources")
    thinking: bool = Field(False, description="Transient placeholder flag")

    @property
    def media_fields(self) -> List[str]:
        """Names of the populated media fields."""
        populated = []
        if self.image_url is not None:
            populated.append("image_url")
        if self.video_url is not None:
            populated.append("video_url")
        if self.sources is not None:
            populated.append("sources")
        return populated


# Which metadata field each content type requires
_REQUIRED_MEDIA_FIELD = {
    ContentType.IMAGE: "image_url",
    ContentType.VIDEO: "video_url",
    ContentType.RESEARCH: "sources",
}


class Message(BaseModel):
    """
    One transcript entry.

    The metadata payload must agree with the content type: IMAGE carries
    only image_url, VIDEO only video_url, RESEARCH only sources and TEXT
    none of them. Attachments only appear on user turns.
    """
    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str = ""
    type: ContentType = ContentType.TEXT
    attachments: Optional[List[MediaAttachment]] = None
    metadata: Optional[MessageMetadata] = None
    timestamp: int = Field(default_factory=now_ms, ge=0, description="Epoch milliseconds")

    @model_validator(mode="after")
    def check_metadata_matches_type(self) -> "Message":
        populated = self.metadata.media_fields if self.metadata else []
        required = _REQUIRED_MEDIA_FIELD.get(self.type)

        if required is None:
            if populated:
                raise ValueError(f"TEXT message cannot carry {', '.join(populated)}")
        elif populated != [required]:
            raise ValueError(
                f"{self.type.value.upper()} message requires exactly {required}, got {populated or 'none'}"
            )

        if self.attachments and self.role != Role.USER:
            raise ValueError("Only user messages carry attachments")

        return self

    @property
    def is_placeholder(self) -> bool:
        return bool(self.metadata and self.metadata.thinking)

    @classmethod
    def assistant_text(cls, content: str, **kwargs) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, type=ContentType.TEXT, **kwargs)


WELCOME_TEXT = (
    "# OmniCreative Studio\n\n"
    "Welcome. I am your AI Creative Director. I can assist you with:\n\n"
    "*   **Strategic Copywriting** (Ads, PR, Social)\n"
    "*   **Market Research** (Competitor analysis, Trends)\n"
    "*   **Visuals** (High-end Image Generation)\n"
    "*   **Cinematics** (Veo Video Production)\n\n"
    "What is our project focus today?"
)


def welcome_message() -> Message:
    return Message.assistant_text(WELCOME_TEXT, id=WELCOME_MESSAGE_ID)


# ============================================================================
# Strategy Context
# ============================================================================

class ProjectContext(BaseModel):
    """User-editable brand context threaded into copywriting requests."""
    brand_name: str = "LuxNova"
    industry: str = "Tech / Lifestyle"
    tone: str = "Futuristic, Premium, Minimalist"

    def to_prompt_context(self) -> str:
        return f"Brand: {self.brand_name}, Industry: {self.industry}, Tone: {self.tone}"


# ============================================================================
# Capability Results
# ============================================================================

class StrategyResult(BaseModel):
    """Copywriting capability output."""
    text: str


class ResearchResult(BaseModel):
    """Research capability output."""
    text: str
    sources: List[Source] = Field(default_factory=list)
