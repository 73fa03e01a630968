"""Client for the external text-generation service.

The service is treated as opaque: it receives UTF-8 text (and optionally the
captured viewfinder frame) and whatever text it returns is shown verbatim.
"""
from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from ..config import GenerationConfig, env_api_key, generation_config
from ..io import brief as brief_text
from ..models.prompt_state import PromptMode, PromptState


class TextGenerationError(RuntimeError):
    """Raised when the generation service cannot produce text."""


class GeminiClient:
    """Thin wrapper over the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = (api_key or "").strip() or env_api_key()
        self._config = config or generation_config()
        self._session = session or requests.Session()

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def build_payload(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float,
        image_png: Optional[bytes] = None,
    ) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [{"text": prompt}]
        if image_png:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": "image/png",
                        "data": base64.b64encode(image_png).decode("ascii"),
                    }
                }
            )
        return {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": temperature},
        }

    def generate(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float,
        image_png: Optional[bytes] = None,
    ) -> str:
        """Send one request and return the concatenated response text."""
        if not self._api_key:
            raise TextGenerationError("API key is not set. Enter a Gemini API key in Settings.")

        url = self._config.endpoint.format(model=self._config.model)
        payload = self.build_payload(system_instruction, prompt, temperature, image_png)
        logger.debug("POST {} (temperature={}, image={})", url, temperature, image_png is not None)
        try:
            response = self._session.post(
                url,
                headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
                json=payload,
                timeout=self._config.timeout_s,
            )
        except requests.RequestException as exc:
            raise TextGenerationError(f"Request to generation service failed: {exc}") from exc

        if response.status_code != 200:
            raise TextGenerationError(f"Generation service returned {response.status_code}: {response.text[:500]}")

        try:
            body = response.json()
        except ValueError as exc:
            raise TextGenerationError("Generation service returned invalid JSON.") from exc
        return extract_text(body)

    # Two-step flow ------------------------------------------------------
    def generate_brief(self, state: PromptState, image_png: Optional[bytes] = None) -> str:
        """Step 1: an educational cinematography brief for the current setup."""
        text = self.generate(
            brief_text.brief_system_instruction(state),
            brief_text.brief_user_prompt(state, has_image=bool(image_png)),
            self._config.brief_temperature,
            image_png=image_png,
        )
        logger.info("Cinematography brief generated ({} chars)", len(text))
        return text

    def compile_final_prompt(self, brief: str, mode: PromptMode) -> str:
        """Step 2: turn the (possibly edited) brief into the final English prompt."""
        if not brief.strip():
            raise TextGenerationError("Generate or write a brief before compiling the prompt.")
        text = self.generate(
            brief_text.final_prompt_system_instruction(mode),
            brief_text.final_prompt_user_prompt(brief),
            self._config.prompt_temperature,
        )
        logger.info("Final {} prompt compiled ({} chars)", mode.value, len(text))
        return text


def extract_text(body: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = body.get("candidates") or []
    if not candidates:
        reason = (body.get("promptFeedback") or {}).get("blockReason")
        raise TextGenerationError(f"No response generated{f' (blocked: {reason})' if reason else ''}.")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text.strip():
        raise TextGenerationError("Generation service returned an empty response.")
    return text
