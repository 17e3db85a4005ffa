"""
Fakes and sample payloads shared by the plant test scripts.

Nothing here touches the network.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from apps.plant.models import AnalysisResult
from libs.llm_gemini import InlineImage, TransportError


def make_plant(name: str = "Basil", stages: Optional[List[str]] = None, diseases=None) -> Dict[str, Any]:
    stages = ["Seedling", "Vegetative", "Flowering"] if stages is None else stages
    return {
        "name": name,
        "confidence": "High",
        "scientific_name": f"{name} scientificus",
        "other_possible_species": [],
        "is_poisonous": False,
        "poison_details": "",
        "detected_diseases": diseases or [],
        "plant_information": {
            "description": f"{name} description",
            "common_uses": {"medical": [], "cooking": ["Pesto"], "decoration": [], "other": []},
            "care_profile": {
                "water": "Keep soil moist",
                "light": "Full sun",
                "soil": "Well drained",
                "temperature": "20-30C",
                "fertilizer": "Monthly",
                "pruning": "Pinch flowers",
                "environmental_info": {
                    "min_temp": 18,
                    "max_temp": 30,
                    "min_humidity": 40,
                    "max_humidity": 70,
                    "seasonal_advice": "Protect from frost",
                },
            },
            "life_cycle": [
                {"stage_name": s, "duration": "2 weeks", "description": f"{s} stage"}
                for s in stages
            ],
            "market_info": {
                "estimated_price": "20.000 - 50.000",
                "currency": "VND",
                "buying_tips": "Pick bushy plants",
                "suggested_places": ["Garden center"],
            },
        },
    }


def make_analysis(
    plants: List[Dict[str, Any]],
    plant_count: Optional[int] = None,
    warnings: Optional[List[str]] = None,
    language: str = "en",
) -> Dict[str, Any]:
    return {
        "language": language,
        "plant_count": len(plants) if plant_count is None else plant_count,
        "plants": plants,
        "warnings": warnings or [],
    }


def make_result(*args, **kwargs) -> AnalysisResult:
    return AnalysisResult.model_validate(make_analysis(*args, **kwargs))


def image(tag: str) -> InlineImage:
    return InlineImage(mime_type="image/jpeg", data=tag.encode())


class FakeGeminiClient:
    """Stands in for GeminiStructuredClient; handlers decide what comes back."""

    def __init__(
        self,
        json_handler: Optional[Callable[..., Dict[str, Any]]] = None,
        image_handler: Optional[Callable[[str], Optional[InlineImage]]] = None,
        chat_factory: Optional[Callable[[str], Any]] = None,
    ):
        self.json_handler = json_handler
        self.image_handler = image_handler
        self.chat_factory = chat_factory
        self.json_calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, Any]] = []
        self.chat_instructions: List[str] = []

    async def generate_json_async(self, prompt, images, schema, temperature=None):
        call = {"prompt": prompt, "images": images, "schema": schema, "temperature": temperature}
        self.json_calls.append(call)
        return self.json_handler(**call)

    async def generate_image_async(self, prompt, model_name=None):
        self.image_calls.append({"prompt": prompt, "model_name": model_name})
        return self.image_handler(prompt) if self.image_handler else None

    def create_chat(self, system_instruction, temperature=None):
        self.chat_instructions.append(system_instruction)
        return self.chat_factory(system_instruction) if self.chat_factory else FakeChat()


class FakeReply:
    def __init__(self, text):
        self.text = text


class FakeChat:
    """Mimics the SDK chat object: send_message(text) -> response with .text."""

    def __init__(self, replies: Optional[List[Any]] = None):
        self.replies = list(replies or [])
        self.sent: List[str] = []

    async def send_message(self, text):
        self.sent.append(text)
        reply = self.replies.pop(0) if self.replies else f"echo: {text}"
        if isinstance(reply, Exception):
            raise reply
        return FakeReply(reply)


class FakeGateway:
    """
    Gateway double for workspace/usecase tests.

    `results` maps image bytes to an AnalysisResult dict, or to an exception
    to raise. `delays` lets a given image answer later than the others.
    """

    def __init__(self, results: Dict[bytes, Any], delays: Optional[Dict[bytes, float]] = None):
        self.results = results
        self.delays = delays or {}
        self.analyze_calls: List[tuple] = []
        self.stage_calls: List[tuple] = []

    async def analyze_image(self, img: InlineImage, language: str) -> AnalysisResult:
        self.analyze_calls.append((img.data, language))
        await asyncio.sleep(self.delays.get(img.data, 0))
        outcome = self.results[img.data]
        if isinstance(outcome, Exception):
            raise outcome
        data = dict(outcome)
        data["language"] = language
        return AnalysisResult.model_validate(data)

    async def generate_life_cycle_stage_image(self, plant_name: str, stage_name: str):
        self.stage_calls.append((plant_name, stage_name))
        return None


def transport_error(msg: str = "boom") -> TransportError:
    return TransportError(msg)
