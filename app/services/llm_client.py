"""
Language model client for mock interview feedback.

Uses the openai library against any OpenAI-compatible endpoint.

The model only turns a finished interview transcript into structured
feedback; the interview record itself is written by the webhook route.
"""
import json
import logging
from typing import Optional

from openai import OpenAI
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

INTERVIEW_COACH_PROMPT = (
    "You are an expert interview coach. Analyze the following interview transcript. "
    "Provide: 1. Strengths 2. Weaknesses 3. A communication score (0-10) 4. Actionable feedback. "
    "Return as JSON: { strengths, weaknesses, score, feedback }"
)


class LLMClient:
    """
    Wrapper for the chat completions API.
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None, model: str = "gpt-4o-mini",
                 timeout: float = 30):
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 1000,
                  json_mode: bool = False) -> str:
        """
        Internal method to call the chat API.
        Returns raw text response.
        """
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=0.2,
            **kwargs
        )
        return response.choices[0].message.content

    def _extract_json(self, text: str) -> dict:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def analyze_interview(self, transcript: str) -> dict:
        """
        Analyze an interview transcript.

        Returns:
            {"strengths": ..., "weaknesses": ..., "score": 0-10, "feedback": ...}
        """
        response = self._call_api(INTERVIEW_COACH_PROMPT, transcript, max_tokens=800, json_mode=True)
        return self._extract_json(response)

    def test_connection(self) -> bool:
        """Test if the model endpoint is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception:
            logger.exception("Language model connection failed")
            return False


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> Optional[LLMClient]:
    """
    Get or create the client (singleton pattern).
    Returns None when no API key is configured; feedback then falls back to
    the voice agent's own summary.
    """
    global _llm_client
    if _llm_client is None:
        if not settings.openai_api_key:
            return None
        _llm_client = LLMClient(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=settings.openai_timeout_seconds
        )
    return _llm_client
