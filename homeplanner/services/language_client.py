"""
HTTP client for the generative language service.

Listing extraction and narrative analysis both send a single prompt to a
``generateContent`` endpoint and read back text. Transient HTTP failures are
retried here; the projection engine itself never retries anything.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from homeplanner.config import Settings

logger = logging.getLogger(__name__)


class CollaboratorError(Exception):
    """An external collaborator could not produce a usable answer."""


class LanguageClient:
    """Minimal client for a Gemini-style ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or self._create_session(max_retries)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LanguageClient":
        return cls(
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
        )

    @staticmethod
    def _create_session(max_retries: int) -> requests.Session:
        """Create a requests session with retry strategy."""
        session = requests.Session()

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def generate(self, prompt: str, use_search: bool = False) -> str:
        """
        Send a prompt and return the generated text.

        Args:
            prompt: Prompt text
            use_search: Allow the model to ground its answer with web search

        Returns:
            Generated text

        Raises:
            CollaboratorError: If no API key is configured, the request fails,
                or the response holds no text
        """
        if not self.api_key:
            raise CollaboratorError("AI API key is not configured")

        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if use_search:
            body["tools"] = [{"google_search": {}}]

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error calling language service: {e}")
            raise CollaboratorError(f"Language service request failed: {e}")

        text = self._extract_text(payload)
        if not text:
            raise CollaboratorError("Language service returned no text")
        return text

    @staticmethod
    def _extract_text(payload: Dict[str, Any]) -> str:
        parts: List[str] = []
        for candidate in payload.get("candidates", [])[:1]:
            for part in candidate.get("content", {}).get("parts", []):
                if isinstance(part.get("text"), str):
                    parts.append(part["text"])
        return "".join(parts).strip()
