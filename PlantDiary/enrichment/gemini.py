from __future__ import annotations

import logging
import mimetypes
from typing import Optional

from google import genai
from google.genai import types as genai_types

from PlantDiary.config import Settings
from PlantDiary.enrichment import prompts
from PlantDiary.enrichment.generator import PromptAwareDiaryGenerator, read_image_file
from PlantDiary.errors import GenerationError, ImageAccessError, InitializationError

log = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"


class GeminiDiaryGenerator(PromptAwareDiaryGenerator):
    """Generates diary text from a photo with the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-2.5-flash",
        timeout_s: float = 30.0,
        temperature: float = 0.7,
        client: Optional[genai.Client] = None,
    ):
        if client is None:
            if not api_key:
                raise InitializationError("GEMINI_API_KEY is not set")
            try:
                # HttpOptions.timeout is in milliseconds.
                client = genai.Client(
                    api_key=api_key,
                    http_options=genai_types.HttpOptions(timeout=int(timeout_s * 1000)),
                )
            except Exception as e:
                raise InitializationError(f"Failed to initialize Gemini client: {e}") from e
        self.client = client
        self.model_name = model_name
        self.timeout_s = timeout_s
        self.temperature = temperature
        log.info(f"Gemini client ready with model target: {self.model_name}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiDiaryGenerator":
        return cls(
            api_key=settings.gemini_api_key,
            model_name=settings.model_name,
            timeout_s=settings.generation_timeout_s,
            temperature=settings.generation_temperature,
        )

    def generate(self, image_path: str) -> str:
        return self.generate_with_prompt(image_path, prompts.DIARY_BASE_PROMPT)

    def generate_with_prompt(self, image_path: str, prompt: str) -> str:
        try:
            image_bytes = read_image_file(image_path)
        except ImageAccessError as e:
            raise GenerationError(str(e)) from e

        mime_type = mimetypes.guess_type(image_path)[0] or DEFAULT_IMAGE_MIME
        contents = [
            genai_types.Content(
                role="user",
                parts=[
                    genai_types.Part.from_text(text=prompt),
                    genai_types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
            )
        ]
        config = genai_types.GenerateContentConfig(temperature=self.temperature)

        log.debug(f"Querying Gemini for {image_path}. Prompt length: ~{len(prompt)} chars.")
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            raise GenerationError(f"Gemini API call failed for {image_path}: {type(e).__name__} - {e}") from e

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise GenerationError(f"Prompt for {image_path} was blocked by Gemini. Reason: {feedback.block_reason}")

        text = (response.text or "").strip()
        if not text:
            raise GenerationError(f"Gemini returned an empty response for {image_path}")
        return text
