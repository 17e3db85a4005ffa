"""
Consultation room tests.
"""

import asyncio
import json

import httpx
import pytest

from apps.common.globalization import localized_text
from apps.plant.consultation import ConsultationStore
from apps.plant.gateway import PlantGateway
from apps.plant.usecases.consult import PlantConsultUsecase
from libs.llm_gemini import ChatError
from plant_test_helpers import FakeChat, FakeGeminiClient


def _usecase(chat: FakeChat):
    client = FakeGeminiClient(chat_factory=lambda instruction: chat)
    gateway = PlantGateway(client=client, image_model_name="image-model")
    return PlantConsultUsecase(gateway, ConsultationStore()), client


def test_room_opens_with_localized_welcome():
    uc, client = _usecase(FakeChat())
    room = uc.open("Basil", "en", diseases=[{"disease_name": "Leaf spot"}])

    assert len(room.messages) == 1
    welcome = room.messages[0]
    assert welcome.role == "model"
    assert welcome.text == localized_text("en", "welcome", plant="Basil")

    instruction = client.chat_instructions[0]
    context = json.dumps({"name": "Basil", "diseases": [{"disease_name": "Leaf spot"}]})
    assert context in instruction


def test_send_appends_user_and_reply():
    chat = FakeChat(replies=["Once a week."])
    uc, _ = _usecase(chat)
    room = uc.open("Basil", "en")

    reply = asyncio.run(uc.send_async(room, "How often do I water it?"))

    assert reply.text == "Once a week."
    assert [(m.role, m.text) for m in room.messages[1:]] == [
        ("user", "How often do I water it?"),
        ("model", "Once a week."),
    ]


def test_failed_turn_keeps_user_message_without_reply():
    chat = FakeChat(replies=[httpx.ReadTimeout("timeout"), "Second try works."])
    uc, _ = _usecase(chat)
    room = uc.open("Basil", "vi")

    with pytest.raises(ChatError):
        asyncio.run(uc.send_async(room, "first"))
    assert [m.role for m in room.messages] == ["model", "user"]
    assert room.messages[-1].text == "first"

    asyncio.run(uc.send_async(room, "second"))
    assert [m.role for m in room.messages] == ["model", "user", "user", "model"]


def test_empty_message_is_rejected():
    uc, _ = _usecase(FakeChat())
    room = uc.open("Basil", "en")
    with pytest.raises(ValueError):
        asyncio.run(uc.send_async(room, "   "))
    assert len(room.messages) == 1


def test_explicit_context_wins():
    uc, client = _usecase(FakeChat())
    uc.open("Basil", "en", diseases=[{"disease_name": "ignored"}], plant_context="CUSTOM-CONTEXT")
    assert "CUSTOM-CONTEXT" in client.chat_instructions[0]
    assert "ignored" not in client.chat_instructions[0]


def test_close_drops_room():
    uc, _ = _usecase(FakeChat())
    room = uc.open("Basil", "en")

    assert uc.get(room.id) is room
    assert uc.close(room.id) is True
    assert uc.get(room.id) is None
    assert uc.close(room.id) is False


def test_unknown_language_rejected_before_session():
    uc, client = _usecase(FakeChat())
    with pytest.raises(ValueError):
        uc.open("Basil", "de")
    assert client.chat_instructions == []


def test_turns_go_through_the_gateway():
    chat = FakeChat(replies=["Bright, indirect light."])
    client = FakeGeminiClient(chat_factory=lambda instruction: chat)
    relayed = []

    class RecordingGateway(PlantGateway):
        async def send_message(self, session, text):
            relayed.append(text)
            return await super().send_message(session, text)

    gateway = RecordingGateway(client=client, image_model_name="image-model")
    uc = PlantConsultUsecase(gateway, ConsultationStore())
    room = uc.open("Monstera", "en")

    asyncio.run(uc.send_async(room, "Where should it stand?"))

    assert relayed == ["Where should it stand?"]
    assert room.messages[-1].text == "Bright, indirect light."


def test_store_drops_idle_rooms():
    now = [0.0]
    store = ConsultationStore(idle_ttl_seconds=300, clock=lambda: now[0])
    uc = PlantConsultUsecase(
        PlantGateway(client=FakeGeminiClient(), image_model_name="image-model"), store
    )
    room = uc.open("Basil", "en")

    now[0] = 200.0
    assert uc.get(room.id) is room
    now[0] = 450.0
    assert uc.get(room.id) is room
    now[0] = 800.0
    assert uc.get(room.id) is None
    assert uc.close(room.id) is False
