"""
Consultation sessions.

`ConsultationSession` is the only surface the rest of the app sees: one
`send_message(text) -> reply` call. The Gemini chat object stays hidden in
`GeminiConsultationSession`, so another chat backend can be swapped in.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional

import httpx
from google.genai import errors as genai_errors

from apps.common.globalization import localized_text
from apps.plant.models import ChatMessage
from libs.llm_gemini import ChatError

logger = logging.getLogger(__name__)


class ConsultationSession(ABC):
    """A stateful conversation; history is kept by the backend, not here."""

    @abstractmethod
    async def send_message(self, text: str) -> str:
        """Send one user turn and return the reply text. Raises ChatError."""


class GeminiConsultationSession(ConsultationSession):
    def __init__(self, chat):
        self._chat = chat

    async def send_message(self, text: str) -> str:
        try:
            response = await self._chat.send_message(text)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise ChatError(f"Chat turn failed: {e}") from e
        reply = response.text
        if not reply:
            raise ChatError("Chat reply was empty")
        return reply


# (session, text) -> reply; lets the caller route turns through its gateway
TurnRelay = Callable[[ConsultationSession, str], Awaitable[str]]


async def _direct_relay(session: ConsultationSession, text: str) -> str:
    return await session.send_message(text)


def _new_message(role: str, text: str) -> ChatMessage:
    return ChatMessage(
        id=uuid.uuid4().hex,
        role=role,
        text=text,
        timestamp=datetime.now(timezone.utc),
    )


class ConsultationRoom:
    """
    One open consultation overlay: a session plus its append-only message log.

    A failed turn keeps the user's message and appends no reply.
    """

    def __init__(
        self,
        room_id: str,
        plant_name: str,
        language: str,
        session: ConsultationSession,
        relay: Optional[TurnRelay] = None,
    ):
        self.id = room_id
        self.plant_name = plant_name
        self.language = language
        self._session = session
        self._relay = relay or _direct_relay
        self._messages: List[ChatMessage] = [
            _new_message("model", localized_text(language, "welcome", plant=plant_name))
        ]

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    async def send(self, text: str) -> ChatMessage:
        if not text or not text.strip():
            raise ValueError("Message text is empty")
        self._messages.append(_new_message("user", text))
        try:
            reply = await self._relay(self._session, text)
        except ChatError as e:
            logger.error("Consultation %s chat error: %s", self.id, e)
            raise
        reply_msg = _new_message("model", reply)
        self._messages.append(reply_msg)
        return reply_msg


class ConsultationStore:
    """
    In-memory rooms; closing a room drops its session for good.

    Rooms idle longer than `idle_ttl_seconds` are dropped the next time the
    store is used; None keeps them until closed.
    """

    def __init__(
        self,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._rooms: Dict[str, ConsultationRoom] = {}
        self._last_used: Dict[str, float] = {}

    def _expire_idle(self) -> None:
        if self.idle_ttl_seconds is None:
            return
        now = self._clock()
        for room_id, used in list(self._last_used.items()):
            if now - used > self.idle_ttl_seconds:
                logger.info("Consultation %s idle, closing it", room_id)
                self.close(room_id)

    def open(
        self,
        plant_name: str,
        language: str,
        session: ConsultationSession,
        relay: Optional[TurnRelay] = None,
    ) -> ConsultationRoom:
        self._expire_idle()
        room = ConsultationRoom(uuid.uuid4().hex, plant_name, language, session, relay)
        self._rooms[room.id] = room
        self._last_used[room.id] = self._clock()
        return room

    def get(self, room_id: str) -> Optional[ConsultationRoom]:
        self._expire_idle()
        room = self._rooms.get(room_id)
        if room is not None:
            self._last_used[room_id] = self._clock()
        return room

    def close(self, room_id: str) -> bool:
        self._last_used.pop(room_id, None)
        return self._rooms.pop(room_id, None) is not None
