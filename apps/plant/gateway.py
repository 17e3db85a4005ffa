"""
Plant AI Gateway.

Turns application intents into Gemini calls and validates the JSON that
comes back against the pydantic records. A single failure propagates to the
caller; nothing here retries.
"""

import logging
from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from apps.common.globalization import validate_language
from apps.common.utils import decode_image_payload, image_from_bytes
from apps.plant.consultation import ConsultationSession, GeminiConsultationSession
from apps.plant.llm_schema import (
    ANALYSIS_LLM_SCHEMA,
    DECORATION_GUIDE_LLM_SCHEMA,
    RECIPE_LLM_SCHEMA,
)
from apps.plant.models import AnalysisResult, DecorationGuide, Recipe
from apps.plant.prompt_builder import (
    build_analysis_prompt,
    build_consultation_instruction,
    build_decoration_prompt,
    build_recipe_prompt,
    build_stage_image_prompt,
)
from apps.settings import BackendSettings
from libs.api_keys.api_key_manager import get_default_api_key_manager
from libs.llm_gemini import (
    AIResponseError,
    GeminiClientConfig,
    GeminiStructuredClient,
    InlineImage,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ANALYSIS_TEMPERATURE = 0.4
CREATIVE_TEMPERATURE = 0.7

ImageInput = Union[InlineImage, bytes, str]


def _as_inline_image(image: ImageInput) -> InlineImage:
    if isinstance(image, InlineImage):
        return image
    if isinstance(image, bytes):
        return image_from_bytes(image)
    return decode_image_payload(image)


def _validate(model_cls: Type[ModelT], data: dict) -> ModelT:
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        logger.error("%s violated the response schema: %s", model_cls.__name__, e)
        raise AIResponseError(f"{model_cls.__name__} violated the response schema") from e


class PlantGateway:
    """Every call the app makes against the AI service goes through here."""

    def __init__(self, client: GeminiStructuredClient, image_model_name: str):
        self.client = client
        self.image_model_name = image_model_name

    @classmethod
    def from_settings(cls, settings: BackendSettings) -> "PlantGateway":
        client = GeminiStructuredClient(
            api_key_manager=get_default_api_key_manager(),
            config=GeminiClientConfig(
                model_name=settings.gemini_model_name, temperature=ANALYSIS_TEMPERATURE
            ),
        )
        return cls(client=client, image_model_name=settings.gemini_image_model_name)

    async def analyze_image(self, image: ImageInput, language: str) -> AnalysisResult:
        language = validate_language(language)
        data = await self.client.generate_json_async(
            prompt=build_analysis_prompt(language),
            images=[_as_inline_image(image)],
            schema=ANALYSIS_LLM_SCHEMA,
            temperature=ANALYSIS_TEMPERATURE,
        )
        return _validate(AnalysisResult, data)

    async def generate_recipe(self, dish_name: str, plant_name: str, language: str) -> Recipe:
        language = validate_language(language)
        data = await self.client.generate_json_async(
            prompt=build_recipe_prompt(dish_name, plant_name, language),
            images=[],
            schema=RECIPE_LLM_SCHEMA,
            temperature=CREATIVE_TEMPERATURE,
        )
        return _validate(Recipe, data)

    async def generate_decoration_guide(
        self, style_name: str, plant_name: str, language: str
    ) -> DecorationGuide:
        language = validate_language(language)
        data = await self.client.generate_json_async(
            prompt=build_decoration_prompt(style_name, plant_name, language),
            images=[],
            schema=DECORATION_GUIDE_LLM_SCHEMA,
            temperature=CREATIVE_TEMPERATURE,
        )
        return _validate(DecorationGuide, data)

    async def generate_life_cycle_stage_image(
        self, plant_name: str, stage_name: str
    ) -> Optional[InlineImage]:
        """None means "no image produced"; a failed call raises instead."""
        return await self.client.generate_image_async(
            prompt=build_stage_image_prompt(plant_name, stage_name),
            model_name=self.image_model_name,
        )

    def create_consultation_session(self, plant_context: str, language: str) -> ConsultationSession:
        language = validate_language(language)
        chat = self.client.create_chat(
            system_instruction=build_consultation_instruction(plant_context, language),
            temperature=CREATIVE_TEMPERATURE,
        )
        return GeminiConsultationSession(chat)

    async def send_message(self, session: ConsultationSession, text: str) -> str:
        return await session.send_message(text)
