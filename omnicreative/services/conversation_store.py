"""
ConversationStore - ordered chat transcript plus the single-flight busy gate.

The store is the only owner of the message sequence. The
GenerationController mutates it through append / replace / remove and
toggles the busy flag around each request lifecycle.
"""

import logging
from typing import Callable, Iterator, List, Optional, Tuple

from ..core.models import MediaAttachment, Message, now_ms, welcome_message

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    In-memory transcript for one session.

    Features:
    - Append-only ordering (entries are never reordered)
    - Replace / remove by id for transient placeholders
    - Monotonic non-decreasing timestamps
    - Busy flag gating new submissions
    - Change listeners for live redraws
    """

    def __init__(
        self,
        messages: Optional[List[Message]] = None,
        clock: Callable[[], int] = now_ms
    ):
        self._messages: List[Message] = []
        self._busy = False
        self._clock = clock
        self._listeners: List[Callable[[], None]] = []

        for message in messages or []:
            self.append(message)

    @classmethod
    def with_welcome(cls, clock: Callable[[], int] = now_ms) -> "ConversationStore":
        """Create a fresh conversation opening with the welcome message."""
        return cls([welcome_message()], clock=clock)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of the transcript, oldest first."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def get(self, message_id: str) -> Optional[Message]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def now_ms(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, message: Message) -> None:
        """Insert at the tail, lifting the timestamp to keep display order."""
        if self._messages and message.timestamp < self._messages[-1].timestamp:
            message = message.model_copy(update={"timestamp": self._messages[-1].timestamp})
        self._messages.append(message)
        logger.debug(f"Appended {message.role.value}/{message.type.value} message {message.id}")
        self._notify()

    def replace_all(self, predicate: Callable[[Message], bool], message: Message) -> int:
        """
        Replace every entry matching predicate with message, in place.

        Returns:
            Number of entries replaced (0 leaves the store untouched)
        """
        replaced = 0
        for i, existing in enumerate(self._messages):
            if predicate(existing):
                self._messages[i] = message
                replaced += 1
        if replaced:
            self._notify()
        return replaced

    def replace_by_id(self, message_id: str, message: Message) -> bool:
        return self.replace_all(lambda m: m.id == message_id, message) > 0

    def remove_by_id(self, message_id: str) -> bool:
        """Delete the entry with this id. No-op if absent."""
        before = len(self._messages)
        self._messages = [m for m in self._messages if m.id != message_id]
        removed = len(self._messages) != before
        if removed:
            logger.debug(f"Removed message {message_id}")
            self._notify()
        return removed

    def clear(self) -> bool:
        """
        Reset to a fresh conversation.

        Returns:
            False (and does nothing) while a request is in flight
        """
        if self._busy:
            logger.warning("Ignoring clear while a request is in flight")
            return False
        self._messages = [welcome_message()]
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Change listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Callable[[], None]) -> None:
        """
        Call listener after every mutation of the transcript.

        Front ends use this to redraw while a lifecycle is still running,
        e.g. to show the user turn and the video placeholder.
        """
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Busy gate
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self._busy

    def mark_busy(self) -> None:
        self._busy = True

    def mark_idle(self) -> None:
        self._busy = False


class Composer:
    """
    Pending input buffer: the prompt text and at most one attachment.

    take() hands the contents over and clears the buffer in one step, so a
    given attachment reaches at most one capability call.
    """

    def __init__(self, text: str = "", attachment: Optional[MediaAttachment] = None):
        self.text = text
        self.attachment = attachment

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and self.attachment is None

    def take(self) -> Tuple[str, Optional[MediaAttachment]]:
        text, attachment = self.text, self.attachment
        self.text = ""
        self.attachment = None
        return text, attachment
