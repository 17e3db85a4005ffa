"""
Plant gateway tests.

The Gemini client is replaced by FakeGeminiClient; these check prompt/schema
wiring, image payload handling and schema enforcement.
"""

import asyncio
import base64

import httpx
import pytest

from apps.plant.consultation import GeminiConsultationSession
from apps.plant.gateway import PlantGateway
from apps.plant.llm_schema import (
    ANALYSIS_LLM_SCHEMA,
    DECORATION_GUIDE_LLM_SCHEMA,
    RECIPE_LLM_SCHEMA,
)
from libs.llm_gemini import AIResponseError, ChatError, InlineImage, TransportError
from plant_test_helpers import FakeChat, FakeGeminiClient, make_analysis, make_plant


def _gateway(client) -> PlantGateway:
    return PlantGateway(client=client, image_model_name="image-model")


def test_analyze_image_returns_validated_result():
    client = FakeGeminiClient(json_handler=lambda **_: make_analysis([make_plant("Basil")]))
    gw = _gateway(client)

    result = asyncio.run(gw.analyze_image(InlineImage("image/png", b"raw"), "en"))

    assert result.plants[0].name == "Basil"
    assert result.plants[0].plant_information.care_profile.environmental_info.max_temp == 30
    call = client.json_calls[0]
    assert call["schema"] is ANALYSIS_LLM_SCHEMA
    assert call["temperature"] == 0.4
    assert call["images"] == [InlineImage("image/png", b"raw")]
    assert "English" in call["prompt"]
    assert "Uncertain" in call["prompt"]


def test_analyze_image_strips_data_url_prefix():
    client = FakeGeminiClient(json_handler=lambda **_: make_analysis([]))
    gw = _gateway(client)
    raw = base64.b64encode(b"leafy-bytes").decode()

    asyncio.run(gw.analyze_image(f"data:image/webp;base64,{raw}", "vi"))

    sent = client.json_calls[0]["images"][0]
    assert sent.data == b"leafy-bytes"
    assert sent.mime_type == "image/webp"


def test_analyze_image_rejects_unknown_language():
    client = FakeGeminiClient(json_handler=lambda **_: make_analysis([]))
    with pytest.raises(ValueError):
        asyncio.run(_gateway(client).analyze_image(b"raw", "de"))
    assert client.json_calls == []


def test_schema_violation_raises_ai_response_error():
    broken = make_analysis([make_plant("Basil")])
    del broken["plants"][0]["scientific_name"]
    client = FakeGeminiClient(json_handler=lambda **_: broken)

    with pytest.raises(AIResponseError):
        asyncio.run(_gateway(client).analyze_image(b"raw", "en"))


def test_unknown_severity_raises_ai_response_error():
    disease = {
        "disease_name": "Leaf spot",
        "confidence": "Medium",
        "symptoms": ["brown spots"],
        "root_cause": "fungal",
        "severity": "catastrophic",
        "treatment": ["remove leaves"],
        "prevention": ["avoid wet leaves"],
    }
    client = FakeGeminiClient(
        json_handler=lambda **_: make_analysis([make_plant("Basil", diseases=[disease])])
    )
    with pytest.raises(AIResponseError):
        asyncio.run(_gateway(client).analyze_image(b"raw", "en"))


def test_transport_error_propagates_without_retry():
    def _fail(**_):
        raise TransportError("503")

    client = FakeGeminiClient(json_handler=_fail)
    with pytest.raises(TransportError):
        asyncio.run(_gateway(client).analyze_image(b"raw", "en"))
    assert len(client.json_calls) == 1


def test_generate_recipe():
    recipe = {
        "title": "Basil pesto",
        "prep_time": "10 min",
        "cook_time": "0 min",
        "difficulty": "Easy",
        "ingredients": ["basil", "olive oil"],
        "instructions": ["blend"],
    }
    client = FakeGeminiClient(json_handler=lambda **_: recipe)

    result = asyncio.run(_gateway(client).generate_recipe("Pesto", "Basil", "en"))

    assert result.title == "Basil pesto"
    assert result.tips == []
    call = client.json_calls[0]
    assert call["schema"] is RECIPE_LLM_SCHEMA
    assert call["temperature"] == 0.7
    assert '"Pesto"' in call["prompt"] and '"Basil"' in call["prompt"]


def test_generate_decoration_guide_requires_fields():
    client = FakeGeminiClient(json_handler=lambda **_: {"title": "Ikebana", "difficulty": "Hard"})
    with pytest.raises(AIResponseError):
        asyncio.run(_gateway(client).generate_decoration_guide("Ikebana", "Rose", "ja"))
    assert client.json_calls[0]["schema"] is DECORATION_GUIDE_LLM_SCHEMA


def test_stage_image_none_is_not_an_error():
    client = FakeGeminiClient(image_handler=lambda prompt: None)
    result = asyncio.run(_gateway(client).generate_life_cycle_stage_image("Basil", "Seedling"))
    assert result is None
    assert client.image_calls[0]["model_name"] == "image-model"
    assert "Basil" in client.image_calls[0]["prompt"]
    assert "Seedling" in client.image_calls[0]["prompt"]


def test_stage_image_data_url():
    client = FakeGeminiClient(image_handler=lambda prompt: InlineImage("image/png", b"\x89PNG"))
    img = asyncio.run(_gateway(client).generate_life_cycle_stage_image("Basil", "Flowering"))
    assert img.to_data_url() == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()


def test_consultation_session_embeds_context_and_language():
    chat = FakeChat(replies=["Water twice a week."])
    client = FakeGeminiClient(chat_factory=lambda instruction: chat)
    gw = _gateway(client)

    session = gw.create_consultation_session('{"name": "Basil", "diseases": []}', "fr")
    reply = asyncio.run(gw.send_message(session, "How often should I water?"))

    assert reply == "Water twice a week."
    assert chat.sent == ["How often should I water?"]
    instruction = client.chat_instructions[0]
    assert '"name": "Basil"' in instruction
    assert "Français" in instruction


def test_send_message_failure_raises_chat_error():
    chat = FakeChat(replies=[httpx.ConnectError("connection reset")])
    session = GeminiConsultationSession(chat)
    with pytest.raises(ChatError):
        asyncio.run(_gateway(FakeGeminiClient()).send_message(session, "hello"))
