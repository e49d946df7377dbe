"""
Services layer for OmniCreative.

Provides clean separation between conversation state (ConversationStore),
request lifecycle (GenerationController) and AI operations
(GeminiService, VeoService).
"""

from .capabilities import Capabilities
from .conversation_store import Composer, ConversationStore
from .exceptions import CapabilityError, RateLimitExceeded, VideoGenerationTimeout
from .generation_controller import GenerationController, LifecycleState

__all__ = [
    'Capabilities',
    'Composer',
    'ConversationStore',
    'CapabilityError',
    'RateLimitExceeded',
    'VideoGenerationTimeout',
    'GenerationController',
    'LifecycleState',
]
