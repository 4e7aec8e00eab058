"""Gemini Translation Service - Implements translation via Google Gemini API."""

import json
import logging
import time

import google.genai as genai
from google.genai import types

from text_annotator.services.translation.translation_service import TranslationResult, TranslationService

logger = logging.getLogger(__name__)


class GeminiTranslationService(TranslationService):
    """
    Translation service using Google Gemini API.

    Asks for a JSON object so the translation and example sentences come back
    in one request. Rate-limit errors are retried with exponential backoff.
    """

    MODEL_NAME = "gemini-2.0-flash"
    MAX_RETRIES = 3

    TRANSLATION_PROMPT = """Translate the highlighted text into natural, idiomatic {target_language}.
Use the surrounding context to pick the right meaning.
If the text is a word or short phrase, also give up to three short example sentences
using it in the original language. For longer text, give no examples.

Respond with JSON only: {{"translation": "...", "examples": ["..."]}}

Highlighted text:
{text}

Context:
{context}"""

    def __init__(self, api_key: str, target_language: str = "English", timeout_seconds: float = 30.0):
        self.api_key = api_key
        self.target_language = target_language
        self.timeout_seconds = timeout_seconds

    def translate(self, text: str, context: str) -> TranslationResult:
        """
        Translate text using the Gemini API.

        Args:
            text: The annotated span.
            context: Surrounding text for disambiguation.

        Returns:
            TranslationResult with translation and examples or error message.
        """
        retry_delay = 2
        attempt = 0

        while attempt < self.MAX_RETRIES:
            attempt += 1
            try:
                client = genai.Client(
                    api_key=self.api_key,
                    http_options=types.HttpOptions(timeout=int(self.timeout_seconds * 1000)),
                )
                prompt = self.TRANSLATION_PROMPT.format(
                    target_language=self.target_language,
                    text=text,
                    context=context or text,
                )
                logger.debug(
                    "Translation request attempt %d/%d model=%s text=%r",
                    attempt, self.MAX_RETRIES, self.MODEL_NAME, text[:100],
                )

                response = client.models.generate_content(
                    model=self.MODEL_NAME,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        temperature=0.3,
                        top_p=0.95,
                        top_k=40,
                        max_output_tokens=1024,
                        response_mime_type="application/json",
                    ),
                )

                if not response.text:
                    return TranslationResult(
                        translation="",
                        model=self.MODEL_NAME,
                        error="Empty response from API",
                    )
                return self._parse_response(response.text)

            except Exception as e:
                error_msg = str(e).lower()
                is_rate_limit = (
                    "429" in error_msg
                    or "resource_exhausted" in error_msg
                    or "quota" in error_msg
                    or "rate_limit" in error_msg
                )

                if is_rate_limit and attempt < self.MAX_RETRIES:
                    logger.info("Rate limit detected. Retrying in %s seconds", retry_delay)
                    time.sleep(retry_delay)
                    retry_delay *= 2
                    continue

                logger.warning("Translation attempt %d failed: %s: %s", attempt, type(e).__name__, e)

                if "api_key" in error_msg or "authentication" in error_msg or "invalid" in error_msg:
                    error = f"Invalid API key or request: {str(e)}"
                elif is_rate_limit:
                    error = "API quota exceeded. Please try again later."
                elif "deadline" in error_msg or "timeout" in error_msg or "timed out" in error_msg:
                    error = "Request timed out. Please check your connection."
                else:
                    error = f"Translation failed: {str(e)}"
                return TranslationResult(translation="", model=self.MODEL_NAME, error=error)

        return TranslationResult(translation="", model=self.MODEL_NAME, error="Translation retries exhausted")

    def _parse_response(self, raw: str) -> TranslationResult:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            # Model ignored the JSON instruction; treat the whole reply as the translation
            return TranslationResult(translation=raw.strip(), model=self.MODEL_NAME)

        if not isinstance(payload, dict) or not payload.get("translation"):
            return TranslationResult(
                translation="",
                model=self.MODEL_NAME,
                error="Response did not contain a translation",
            )
        examples = payload.get("examples") or []
        return TranslationResult(
            translation=str(payload["translation"]).strip(),
            model=self.MODEL_NAME,
            examples=[str(example).strip() for example in examples if str(example).strip()],
        )
