"""Core logic for the financial advisor chat.

``FinancialAdvisor.respond`` never raises: a missing API key, a provider
failure or an unrecognised response shape each produce a fixed reply that
the front end can display as-is.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from langchain_core.messages import get_buffer_string
from langchain_core.prompts import PromptTemplate

from src.memory.record_store import RecordStore
from src.memory.transcripts import TranscriptRegistry
from src.utils.config import get_section
from src.utils.logging import get_logger
from src.utils.tracing import traceable
from .client import MissingCredentialError, get_llm
from .prompts import (
    INVESTMENT_OPTIONS,
    MISSING_CREDENTIAL_REPLY,
    PROMPT_TEMPLATE,
    PROVIDER_ERROR_REPLY,
    UNEXPECTED_FORMAT_REPLY,
)
from .responses import extract_completion

logger = get_logger(__name__)

_PROMPT = PromptTemplate.from_template(PROMPT_TEMPLATE)


class FinancialAdvisor:
    """
    Answers chat messages with a completion provider, threading each user's
    running transcript into every request.

    Parameters
    ----------
    store : RecordStore | None
        Where user profiles are read from.  Without a store every user gets
        the default profile.
    transcripts : TranscriptRegistry | None
        Per-user conversation histories (a fresh registry by default).
    llm_factory : callable | None
        Returns an object with ``invoke(prompt)``.  Defaults to ``get_llm``,
        which raises ``MissingCredentialError`` when no API key is set.
    profile_defaults : dict | None
        ``monthly_income`` / ``risk_tolerance`` used when the user record
        lacks them.  Defaults to the ``profile_defaults`` config section.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        transcripts: Optional[TranscriptRegistry] = None,
        llm_factory: Optional[Callable[[], Any]] = None,
        profile_defaults: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.store = store
        self.transcripts = transcripts or TranscriptRegistry()
        self._llm_factory = llm_factory or get_llm
        defaults = profile_defaults or get_section("profile_defaults")
        self.default_income = defaults.get("monthly_income", 5000)
        self.default_risk = defaults.get("risk_tolerance", "medium")

    def resolve_profile(self, user_id: int) -> Dict[str, Any]:
        """Monthly income and risk tolerance, stored values first."""
        user = self.store.get_user(user_id) if self.store is not None else None

        income = self.default_income
        risk = self.default_risk
        if user is not None:
            if user.monthly_income is not None:
                income = user.monthly_income
            if user.risk_tolerance is not None:
                risk = user.risk_tolerance.value
        return {"monthly_income": income, "risk_tolerance": risk}

    def compose_request(self, message: str, user_id: int) -> str:
        """Render the full prompt for *message* using the user's transcript so far."""
        prior = self.transcripts.messages(user_id)
        return _PROMPT.format(
            history=get_buffer_string(prior) if prior else "(no previous messages)",
            user_profile=json.dumps(self.resolve_profile(user_id)),
            investment_options=json.dumps(INVESTMENT_OPTIONS),
            input=message,
        )

    @traceable(name="financial_advisor", run_type="chain", tags=["finance", "chat"])
    def respond(self, message: str, user_id: int) -> str:
        """
        Return the assistant's reply to *message* from *user_id*.

        The user message joins the transcript once the request is composed;
        the reply joins it only when the provider call succeeds.
        """
        logger.info("Advisor received message from user %s: %s", user_id, message[:80])
        history = self.transcripts.get(user_id)

        try:
            prompt = self.compose_request(message, user_id)
        except Exception as exc:
            logger.error("Failed to compose request: %s", exc, exc_info=True)
            return PROVIDER_ERROR_REPLY
        history.add_user_message(message)

        try:
            llm = self._llm_factory()
            raw = llm.invoke(prompt)
        except MissingCredentialError as exc:
            logger.error("Missing completion provider credential: %s", exc)
            return MISSING_CREDENTIAL_REPLY
        except Exception as exc:
            logger.error("Error generating AI response: %s", exc, exc_info=True)
            return PROVIDER_ERROR_REPLY

        result = extract_completion(raw)
        if not result.ok:
            logger.warning("Unexpected response format from provider: %s", type(raw).__name__)
            return UNEXPECTED_FORMAT_REPLY

        history.add_ai_message(result.text)
        logger.info("Advisor returning answer (first 80 chars): %s", result.text[:80])
        return result.text
