"""
Chat completion client for the AI assistant and the patient email drafter
"""

import logging
from typing import Optional

import openai
from openai import OpenAI

from ..config import OPENAI_API_KEY, OPENAI_MODEL
from ..shared.errors import CRMError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)


class MissingAPIKeyError(CRMError):
    """Raised when no OpenAI key is configured"""

    def __init__(self):
        super().__init__("Missing OPENAI_API_KEY environment variable")


class LLMClient:
    """Thin wrapper around the OpenAI chat completions API"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else OPENAI_API_KEY
        self.model = model or OPENAI_MODEL
        self._client: Optional[OpenAI] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        if not self.is_configured:
            raise MissingAPIKeyError()
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def complete(
        self, messages: list[dict], temperature: float
    ) -> tuple[Optional[str], Optional[str]]:
        """
        Send one chat completion request.

        Returns:
            (role, content) of the first choice; either may be None when the
            model returned nothing.

        Raises:
            MissingAPIKeyError: no API key configured
            NetworkError: the API could not be reached
            UpstreamError: the API answered with an error status
        """
        client = self._get_client()

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
            )
        except openai.APIConnectionError as e:
            logger.error(f"❌ OpenAI unreachable: {e}")
            raise NetworkError("Could not reach OpenAI") from e
        except openai.APIStatusError as e:
            logger.error(f"❌ OpenAI returned {e.status_code}: {e.message}")
            raise UpstreamError("OpenAI request failed", {"status": e.status_code}) from e

        if not response.choices:
            return None, None

        message = response.choices[0].message
        return message.role, message.content


def get_llm_client() -> LLMClient:
    """Dependency injection for LLMClient"""
    return LLMClient()
