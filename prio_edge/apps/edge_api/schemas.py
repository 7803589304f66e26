from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

# Any JSON value: arrays, booleans and objects are rendered into the prompt as text.
FieldValue = Any


class LeadScoreRequest(BaseModel):
    """Lead fields sent by the dashboard. Every field is optional."""

    model_config = ConfigDict(extra="ignore")

    status: FieldValue = None
    lastOutcome: FieldValue = None
    callSummary: FieldValue = None
    interest: FieldValue = None
    context: FieldValue = None
    attempts: FieldValue = None
    bookings: FieldValue = None
    bookedTime: FieldValue = None
    clientNotes: FieldValue = None
    updatedAt: FieldValue = None


__all__ = ["LeadScoreRequest"]
