"""Prompt templates for LLM-powered features.

``intent_score_prompts()`` returns ``(system_prompt, user_prompt)`` ready for
the AI provider.
"""

from __future__ import annotations

from typing import Any, Mapping

INTENT_SCORE_SYSTEM_PROMPT = """If any of the fields below are empty, work with whatever data IS available. An empty field should be treated as unknown, not negative. You must still return a score even if most fields are blank.
Analyze this lead's data and assign an intent score from 1 to 5. Return ONLY the number.
Scoring criteria:
5 - HOT: Ready to transact. Clear timeline (1-3 months), pre-approved or actively searching, agent confirmed strong intent in their notes after meeting
4 - HIGH: Serious interest. Engaged in conversation, asked about listings/pricing/process, showed up to meeting, agent notes suggest potential but needs follow-up
3 - MODERATE: Somewhat interested but non-committal. Vague timeline (6+ months), willing to talk but no concrete next steps
2 - LOW: Minimal engagement. Short or dismissive responses, "just looking," multiple attempts with little progress
1 - COLD: Dead lead. No answer after multiple attempts, explicitly not interested, DNC, no-show with no reschedule
CRITICAL WEIGHTING RULES:
1. HIGHEST WEIGHT: Agent Notes (ONLY when they exist): If Agent Notes are present AND a Booked Time exists AND the notes were written or updated AFTER that Booked Time, the agent's direct assessment after meeting the lead is the single most reliable indicator of intent. This OVERRIDES any prior AI call summary or transcript sentiment. If Agent Notes are empty or blank, SKIP this layer entirely and do NOT penalize the lead for missing notes. Agents don't always add notes; the absence of notes is neutral, not negative.
2. HIGH WEIGHT: AI Transcript & Call Summary: These capture what the lead actually said during the AI call. Use these as the primary signal when no agent notes exist. When agent notes DO exist post-meeting, these become secondary.
3. MODERATE WEIGHT: Status, Interest, Last Outcome: These provide supporting context but should not override what was said in the transcript or written in agent notes.
4. LOW WEIGHT: Attempts, Bookings count: Use as tiebreakers. High attempts with low engagement = negative signal. Booking existing = positive signal.
Decision logic:
- If post-meeting Agent Notes exist and indicate strong buyer/seller intent → 4 or 5
- If post-meeting Agent Notes exist and indicate the lead is not serious → 1 or 2 (regardless of AI transcript)
- If no Agent Notes exist, score based on Transcript, Call Summary, and Status alone; do NOT lower the score just because notes are missing
- If Booked Time exists with no agent notes → score normally based on transcript/status (do not cap or penalize)
- If Status is "Closed" or lead requested removal → 1
- If multiple attempts with no meaningful conversation and no notes → score based on transcript content, not attempt count alone
- If most fields are empty and the lead is new with no calls yet → default to 3 (unknown, not negative)
Return ONLY a single number: 1, 2, 3, 4, or 5."""

# (label, payload key) in the order the rubric expects them.
LEAD_FIELDS: tuple[tuple[str, str], ...] = (
    ("Status", "status"),
    ("Last Outcome", "lastOutcome"),
    ("Call Summary", "callSummary"),
    ("Stated Interest", "interest"),
    ("Lead Context", "context"),
    ("Attempts Made", "attempts"),
    ("Bookings", "bookings"),
    ("Booked Time", "bookedTime"),
    ("Agent Notes", "clientNotes"),
    ("Updated At", "updatedAt"),
)


def _value_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_value_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def _field_text(value: Any) -> str:
    # None, "", 0 and False render as blank; empty lists and dicts still render.
    if value is None or value is False or value == "" or (isinstance(value, (int, float)) and value == 0):
        return ""
    return _value_text(value)


def lead_summary_text(fields: Mapping[str, Any]) -> str:
    return "\n".join(f"{label}: {_field_text(fields.get(key))}" for label, key in LEAD_FIELDS)


def intent_score_prompts(fields: Mapping[str, Any]) -> tuple[str, str]:
    return INTENT_SCORE_SYSTEM_PROMPT, lead_summary_text(fields)


__all__ = ["INTENT_SCORE_SYSTEM_PROMPT", "LEAD_FIELDS", "intent_score_prompts", "lead_summary_text"]
