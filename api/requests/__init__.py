from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class TransitionRequest(BaseModel):
    actor_id: str = Field(min_length=1, max_length=128)
    notes: Optional[str] = Field(default=None, max_length=4000)


class AcknowledgeRequest(BaseModel):
    actor_id: str = Field(min_length=1, max_length=128)
