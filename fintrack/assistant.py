"""Conversational assistant over the user's transaction snapshot.

The snapshot is serialized to JSON and sent, together with the user's
question, to the OpenAI Responses API. Callers always receive prose: missing
credentials and every transport, auth or quota failure turn into a fallback
message instead of an exception.
"""

from __future__ import annotations

import json
import time
from typing import Any, Iterable, Optional

from openai import AsyncOpenAI, OpenAI

from fintrack.config import Settings, load_settings
from fintrack.domain import Transaction
from fintrack.logging_setup import get_logger
from fintrack.transforms import transaction_to_dict

_logger = get_logger("fintrack.assistant")

BEGIN = "BEGIN_TRANSACTIONS_JSON\n"
END = "\nEND_TRANSACTIONS_JSON"

WELCOME_MESSAGE = (
    "Hi! I'm your personal finance assistant. I can analyse your spending, "
    "suggest savings or answer questions about your budget. How can I help today?"
)
MISSING_KEY_MESSAGE = (
    "Configuration pending: no OpenAI API key was found. "
    "Set the OPENAI_API_KEY environment variable to enable the assistant."
)
EMPTY_QUERY_MESSAGE = "Please type a question about your finances."
EMPTY_ANSWER_MESSAGE = "Sorry, I couldn't analyse your data right now."
ERROR_MESSAGE = (
    "Something went wrong while contacting the assistant. "
    "Check that your API key is valid and try again later."
)


def serialize_transactions(transactions: Iterable[Transaction]) -> str:
    return json.dumps([transaction_to_dict(t) for t in transactions], ensure_ascii=False)


def build_instructions(language: str) -> str:
    return (
        "You are a friendly, expert personal finance assistant. "
        f"Always answer in {language}."
    )


def build_prompt(transactions: Iterable[Transaction], query: str) -> str:
    """User content: the snapshot between markers, the question, then guidelines."""
    return (
        "Here is my current financial transaction data in JSON format:\n"
        f"{BEGIN}{serialize_transactions(transactions)}{END}\n\n"
        "Please answer the following question or request based on this data:\n"
        f'"{query}"\n\n'
        "Guidelines:\n"
        "1. Be concise but helpful.\n"
        "2. Use Markdown formatting (bold, lists) to make the answer easy to read.\n"
        "3. If the data is empty, give general tips on how to start organising finances.\n"
        "4. Analyse spending trends when asked."
    )


def _extract_text(resp: Any) -> Optional[str]:
    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text
    return None


class FinanceAssistant:
    """Answers questions about a transaction snapshot; ``ask`` never raises.

    ``client`` / ``async_client`` default to SDK clients built from the
    settings' API key. Tests pass stubs exposing ``responses.create``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Any = None,
        async_client: Any = None,
    ):
        self.settings = settings or load_settings()
        self._client = client
        self._async_client = async_client

    @property
    def configured(self) -> bool:
        return self.settings.assistant_enabled or self._client is not None

    def _sync_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self.settings.openai_api_key)
        return self._client

    def _aio_client(self) -> Any:
        if self._async_client is None:
            self._async_client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._async_client

    def _request(self, transactions: Iterable[Transaction], query: str) -> dict:
        return {
            "model": self.settings.assistant_model,
            "instructions": build_instructions(self.settings.assistant_language),
            "input": build_prompt(transactions, query),
            "temperature": self.settings.assistant_temperature,
        }

    def _precheck(self, query: str, async_mode: bool) -> Optional[str]:
        if not query or not query.strip():
            return EMPTY_QUERY_MESSAGE
        has_client = self._async_client if async_mode else self._client
        if has_client is None and not self.settings.assistant_enabled:
            _logger.warning("assistant_not_configured")
            return MISSING_KEY_MESSAGE
        return None

    def _answer(self, resp: Any, started: float) -> str:
        text = _extract_text(resp)
        _logger.info(
            "assistant_answered latency_ms=%.2f empty=%s",
            (time.perf_counter() - started) * 1000.0,
            text is None,
        )
        return text if text is not None else EMPTY_ANSWER_MESSAGE

    def ask(self, transactions: Iterable[Transaction], query: str) -> str:
        early = self._precheck(query, async_mode=False)
        if early is not None:
            return early
        started = time.perf_counter()
        try:
            resp = self._sync_client().responses.create(**self._request(transactions, query))
        except Exception as e:  # noqa: BLE001 - every client failure becomes prose
            _logger.error("assistant_failed error=%s: %s", e.__class__.__name__, e)
            return ERROR_MESSAGE
        return self._answer(resp, started)

    async def ask_async(self, transactions: Iterable[Transaction], query: str) -> str:
        early = self._precheck(query, async_mode=True)
        if early is not None:
            return early
        started = time.perf_counter()
        try:
            resp = await self._aio_client().responses.create(**self._request(transactions, query))
        except Exception as e:  # noqa: BLE001 - every client failure becomes prose
            _logger.error("assistant_failed error=%s: %s", e.__class__.__name__, e)
            return ERROR_MESSAGE
        return self._answer(resp, started)
