# reportflow/models/validation_state.py

from typing import List
from pydantic import BaseModel, Field


class ValidationState(BaseModel):
    """
    Progress of one "fill in the missing report fields" conversation.

    provided_fields keeps insertion order and duplicates; cumulative_prompt
    only ever grows; original_narrative is the text the session started from.
    """
    provided_fields: List[str] = Field(default_factory=list)
    cumulative_prompt: str = ""
    original_narrative: str
    attempt_count: int = Field(default=0, ge=0)
