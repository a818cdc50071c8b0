# reportflow/services/validation_session_service.py
"""
Validation session bookkeeping for report handlers.

A report handler validates a narrative against the selected offense(s).
While fields are missing it asks the officer for more, and each answer is
one attempt. This service owns the state side of that loop:

1. open_session() derives the session key the client echoes back
2. record_attempt() folds an attempt into the stored ValidationState
   (atomically), scores it, caches the outcome and clears the session
   once nothing is missing
3. abandon() drops the session when the handler gives up

The LLM call that decides which fields are present is not part of this service.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import logging

from reportflow.core.exceptions import session_error, validation_error
from reportflow.core.state import (
    SessionValidationStore,
    ValidationCache,
    generate_multi_offense_session_key,
    generate_session_key,
    get_validation_cache_key,
)
from reportflow.models.validation_state import ValidationState
from reportflow.services.field_guidance import FieldGuidanceService

logger = logging.getLogger(__name__)

PROMPT_SEPARATOR = "\n\n"


@dataclass
class AttemptOutcome:
    """Result of folding one attempt into a validation session"""
    session_key: str
    state: ValidationState
    is_complete: bool
    missing_fields: List[str]
    confidence: Dict[str, Any]
    categorized_fields: Dict[str, List[str]] = field(default_factory=dict)
    enhanced_fields: Dict[str, Any] = field(default_factory=dict)
    field_examples: Dict[str, str] = field(default_factory=dict)
    missing_universal_fields: List[str] = field(default_factory=list)
    cache_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.model_dump()
        return data


def extend_prompt(previous: str, prompt: str) -> str:
    """
    Grow the cumulative prompt with a new attempt's text.

    Clients usually resend the whole prompt built so far; when the new text
    already starts with the previous prompt it replaces it, otherwise it is
    appended.
    """
    if not previous:
        return prompt
    if prompt.startswith(previous):
        return prompt
    return f"{previous}{PROMPT_SEPARATOR}{prompt}"


class ValidationSessionService:
    """Read-modify-write operations around a SessionValidationStore"""

    def __init__(
        self,
        store: SessionValidationStore,
        cache: Optional[ValidationCache] = None,
        guidance: Optional[FieldGuidanceService] = None
    ):
        self.store = store
        self.cache = cache
        self.guidance = guidance or FieldGuidanceService()
        self.logger = logger

    def open_session(self, user_id: str, offense_ids: List[str], now_ms: Optional[int] = None) -> str:
        """
        Derive the session key for a new validation conversation.

        Nothing is stored until the first attempt is recorded.

        Raises:
            ValidationError: If user_id or offense_ids is empty
        """
        if not user_id or not user_id.strip():
            raise validation_error("User id is required", "user_id", user_id)

        offense_ids = [o for o in offense_ids if o and o.strip()]
        if not offense_ids:
            raise validation_error("At least one offense id is required", "offense_ids")

        if len(offense_ids) == 1:
            session_key = generate_session_key(user_id, offense_ids[0], now_ms)
        else:
            session_key = generate_multi_offense_session_key(user_id, offense_ids, now_ms)

        self.logger.info(f"Opened validation session {session_key} ({len(offense_ids)} offense(s))")
        return session_key

    def record_attempt(
        self,
        session_key: str,
        prompt: str,
        present_fields: List[str],
        missing_fields: List[str],
        offense_id: str,
        offense_category: Optional[str] = None,
        critical_fields: Optional[List[str]] = None,
        narrative: Optional[str] = None,
        required_fields: Optional[List[str]] = None,
    ) -> AttemptOutcome:
        """
        Fold one validation attempt into the session and score it.

        required_fields and critical_fields describe the offense; they feed
        the confidence score and the completion order of missing fields.

        Raises:
            ValidationError: If the prompt is empty
        """
        if not prompt or not prompt.strip():
            raise validation_error("Prompt cannot be empty", "prompt")

        def next_state(previous: Optional[ValidationState]) -> ValidationState:
            if previous is None:
                return ValidationState(
                    provided_fields=list(present_fields),
                    cumulative_prompt=prompt,
                    original_narrative=narrative or prompt,
                    attempt_count=1,
                )
            return ValidationState(
                provided_fields=list(present_fields),
                cumulative_prompt=extend_prompt(previous.cumulative_prompt, prompt),
                original_narrative=previous.original_narrative,
                attempt_count=previous.attempt_count + 1,
            )

        state = self.store.update(session_key, next_state)

        confidence = self.guidance.calculate_validation_confidence(
            present_fields, missing_fields, critical_fields
        )
        is_complete = not missing_fields
        categorized = self.guidance.categorize_missing_fields(missing_fields)

        outcome = AttemptOutcome(
            session_key=session_key,
            state=state,
            is_complete=is_complete,
            missing_fields=list(missing_fields),
            confidence=confidence.to_dict(),
            categorized_fields=categorized,
            enhanced_fields=self.guidance.enhance_categorized_fields(
                categorized, required_fields, critical_fields, offense_category
            ),
            field_examples=self.guidance.combine_field_examples(missing_fields, offense_category),
            missing_universal_fields=self.guidance.missing_universal_fields(present_fields),
        )

        if is_complete:
            self.store.clear(session_key)
            self.logger.info(
                f"✅ Validation session {session_key} complete after {state.attempt_count} attempt(s)"
            )
        else:
            self.logger.info(
                f"Validation session {session_key} attempt {state.attempt_count}: "
                f"{len(missing_fields)} field(s) missing"
            )

        if self.cache is not None:
            outcome.cache_key = get_validation_cache_key(state.original_narrative, offense_id)
            self.cache.set(outcome.cache_key, outcome.to_dict())

        return outcome

    def get_state(self, session_key: str) -> Optional[ValidationState]:
        return self.store.get(session_key)

    def require_state(self, session_key: str) -> ValidationState:
        """
        Like get_state, for callers that treat absence as an error.

        Raises:
            SessionError: If no state is stored for session_key
        """
        state = self.store.get(session_key)
        if state is None:
            raise session_error("Validation session not found", session_key)
        return state

    def abandon(self, session_key: str) -> None:
        """Drop the session, e.g. after the report handler failed"""
        self.store.clear(session_key)

    def get_cached_result(self, cache_key: str) -> Optional[Dict[str, Any]]:
        if self.cache is None:
            return None
        return self.cache.get(cache_key)
