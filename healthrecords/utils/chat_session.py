# /healthrecords/utils/chat_session.py
"""Turn sequencing for the health assistant chat.

A session is either IDLE or AWAITING_REPLY. Submitting text appends the
user's message and schedules one reply; further submissions are refused until
that reply has been appended. Clearing empties the history and returns to
IDLE straight away; a reply that was still pending at that point is dropped
when it fires, so it can never land after a newer turn.
"""
import logging
import random
import threading
import time
import uuid
from enum import Enum

from healthrecords.models.enums import ChatRole
from healthrecords.utils.advice_matcher import match_advice
from healthrecords.utils.exceptions import ChatBusyError, ValidationError
from healthrecords.utils.store_util import StoreKey
from healthrecords.utils.view_filters import utc_now

logger = logging.getLogger(__name__)

DEFAULT_DELAY_RANGE = (1.0, 3.0)


class ChatState(str, Enum):
    IDLE = 'idle'
    AWAITING_REPLY = 'awaiting_reply'


def run_inline(fn, *args):
    """Scheduler that runs the reply immediately in the caller's thread."""
    fn(*args)


def build_message(role, content, now=None):
    return {
        'id': str(uuid.uuid4()),
        'role': ChatRole(role).value,
        'content': content,
        'timestamp': (now or utc_now()).isoformat() + 'Z',
    }


class ChatSession:
    """One user's assistant conversation.

    Args:
        store: StoreAdapter (or anything with read_list/write) holding the history.
        delay_range: (low, high) seconds; each reply waits low + random() * (high - low).
        scheduler: callable(fn, *args) that runs the reply later, e.g.
            socketio.start_background_task. Defaults to running it inline.
        sleep: callable(seconds) used for the delay.
        matcher: callable(text) -> advice string.
        on_reply: optional callable(message) invoked after the assistant message is stored.
    """

    def __init__(self, store, delay_range=DEFAULT_DELAY_RANGE, scheduler=None,
                 sleep=time.sleep, matcher=match_advice, on_reply=None, rng=None):
        low, high = delay_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid delay range {delay_range!r}")
        self.store = store
        self.delay_range = (low, high)
        self._scheduler = scheduler or run_inline
        self._sleep = sleep
        self._matcher = matcher
        self._on_reply = on_reply
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._state = ChatState.IDLE
        self._generation = 0

    @property
    def state(self):
        return self._state

    @property
    def messages(self):
        return self.store.read_list(StoreKey.CHAT_MESSAGES)

    def next_delay(self):
        low, high = self.delay_range
        return low + self._rng.random() * (high - low)

    def submit(self, text):
        """Append the user's message and schedule the assistant reply.

        Raises ValidationError for blank text and ChatBusyError while a reply is pending.
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message cannot be empty", field='content')

        # The lock covers the history write too, so a clear cannot land between
        # the state change and the append.
        with self._lock:
            if self._state is ChatState.AWAITING_REPLY:
                raise ChatBusyError()
            self._state = ChatState.AWAITING_REPLY
            generation = self._generation
            try:
                message = self._append(build_message(ChatRole.USER, text))
            except Exception:
                self._state = ChatState.IDLE
                raise

        self._scheduler(self._reply, text, generation)
        return message

    def _reply(self, text, generation):
        reply = None
        try:
            self._sleep(self.next_delay())
            content = self._matcher(text)
            with self._lock:
                if generation != self._generation:
                    logger.info("Dropping assistant reply for a cleared chat")
                    return None
                reply = self._append(build_message(ChatRole.ASSISTANT, content))
            return reply
        except Exception:
            logger.exception("Assistant reply failed")
            raise
        finally:
            with self._lock:
                if generation == self._generation:
                    self._state = ChatState.IDLE
            if reply is not None and self._on_reply is not None:
                self._on_reply(reply)

    def _append(self, message):
        history = self.store.read_list(StoreKey.CHAT_MESSAGES)
        history.append(message)
        self.store.write(StoreKey.CHAT_MESSAGES, history)
        return message

    def clear(self):
        """Empty the history and return to IDLE, whatever the current state."""
        with self._lock:
            self._generation += 1
            self._state = ChatState.IDLE
            self.store.write(StoreKey.CHAT_MESSAGES, [])


class ChatSessionRegistry:
    """Keeps one ChatSession per user id for the lifetime of the process."""

    def __init__(self, factory):
        self._factory = factory
        self._sessions = {}
        self._lock = threading.Lock()

    def get(self, user_id):
        user_id = int(user_id)
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = self._factory(user_id)
                self._sessions[user_id] = session
            return session

    def discard(self, user_id):
        with self._lock:
            self._sessions.pop(int(user_id), None)
