import base64
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .errors import AIResponseError, TransportError

if TYPE_CHECKING:
    from libs.api_keys.api_key_manager import APIKeyManager

logger = logging.getLogger(__name__)


@dataclass
class GeminiClientConfig:
    model_name: str
    temperature: float = 0.2


@dataclass(frozen=True)
class InlineImage:
    """Raw image bytes plus their declared MIME type."""

    mime_type: str
    data: bytes

    def to_data_url(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"


class GeminiStructuredClient:
    """
    Gemini multimodal + structured output wrapper (atomic capability).

    Conventions:
    - only "call the model and return schema-shaped JSON / images / chats"
    - no business prompts or schemas live here
    - failures raise; nothing is retried
    """

    def __init__(self, api_key_manager: "APIKeyManager", config: GeminiClientConfig):
        self.api_key_manager = api_key_manager
        self.config = config
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            # ConfigurationError propagates: a missing key is fatal
            api_key = self.api_key_manager.require_key()
            self._client = genai.Client(api_key=api_key)
        return self._client

    @staticmethod
    def build_image_parts(images: List[InlineImage]) -> List[types.Part]:
        return [
            types.Part.from_bytes(data=img.data, mime_type=img.mime_type)
            for img in images or []
        ]

    async def generate_json_async(
        self,
        prompt: str,
        images: List[InlineImage],
        schema: Dict[str, Any],
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        client = self._get_client()
        contents: List[Any] = self.build_image_parts(images) + [prompt]
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
            temperature=self.config.temperature if temperature is None else temperature,
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.config.model_name, contents=contents, config=config
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("Gemini call failed (%s): %s", self.config.model_name, e)
            raise TransportError(f"Gemini call failed: {e}") from e

        text = response.text
        if not text:
            raise AIResponseError("No response from AI")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Gemini JSON parse failed: %s, body: %s", e, text[:200])
            raise AIResponseError(f"Gemini JSON parse failed: {e}") from e
        if not isinstance(data, dict):
            raise AIResponseError("Gemini JSON root is not an object")
        return data

    async def generate_image_async(
        self, prompt: str, model_name: Optional[str] = None
    ) -> Optional[InlineImage]:
        """
        Ask an image-capable model for one picture.

        Returns None when the answer carries no inline image part;
        transport/service failures raise TransportError.
        """
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=model_name or self.config.model_name,
                contents=[prompt],
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("Gemini image call failed: %s", e)
            raise TransportError(f"Gemini image call failed: {e}") from e

        candidates = response.candidates or []
        if not candidates or candidates[0].content is None:
            return None
        for part in candidates[0].content.parts or []:
            inline = part.inline_data
            if inline is not None and inline.data:
                return InlineImage(mime_type=inline.mime_type or "image/png", data=inline.data)
        return None

    def create_chat(self, system_instruction: str, temperature: Optional[float] = None):
        """Open a service-side chat; history is kept by the returned object."""
        client = self._get_client()
        return client.aio.chats.create(
            model=self.config.model_name,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=self.config.temperature if temperature is None else temperature,
            ),
        )
