"""
Structured schemas for LLM outputs.

These Pydantic models define the expected structure of LLM responses,
ensuring constrained, parseable outputs.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator


class LabelDecision(BaseModel):
    """Issue triage result: one priority label and one type label."""

    priority: str = Field(..., min_length=1, description="Priority label name")
    type: str = Field(..., min_length=1, description="Type label name")

    @field_validator("priority", "type")
    @classmethod
    def strip_label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label name must not be blank")
        return v

    def as_labels(self) -> List[str]:
        """Labels to apply, priority first."""
        return [self.priority, self.type]
