"""
Runtime message protocol — the envelopes every context sends to the
background runtime.

A message is a JSON object tagged by "type". The set of tags is closed:
anything that does not validate against one of the shapes below is dropped
by parse_message() and never answered.

Replies on the wire, under these exact keys:
    START_FOCUS_MODE / CANCEL_FOCUS_MODE  ->  {"success": true}
    GET_REMAINING_TIME                    ->  {"remaining_seconds": <int >= 0>}
    PAUSE_RESOLVED                        ->  (no reply)
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

START_FOCUS_MODE = "START_FOCUS_MODE"
CANCEL_FOCUS_MODE = "CANCEL_FOCUS_MODE"
GET_REMAINING_TIME = "GET_REMAINING_TIME"
PAUSE_RESOLVED = "PAUSE_RESOLVED"


# ── Requests ───────────────────────────────────────────────────────────────

class StartFocusMode(BaseModel):
    type: Literal["START_FOCUS_MODE"] = START_FOCUS_MODE
    duration: int = Field(..., gt=0, strict=True, description="seconds")


class CancelFocusMode(BaseModel):
    type: Literal["CANCEL_FOCUS_MODE"] = CANCEL_FOCUS_MODE


class GetRemainingTime(BaseModel):
    type: Literal["GET_REMAINING_TIME"] = GET_REMAINING_TIME


class PauseResolved(BaseModel):
    """One-way analytics notification posted by an agent; never answered."""
    type: Literal["PAUSE_RESOLVED"] = PAUSE_RESOLVED
    outcome: Literal["completed", "skipped"]
    domain: str
    url: str = ""
    reason: Optional[str] = None


Message = Annotated[
    Union[StartFocusMode, CancelFocusMode, GetRemainingTime, PauseResolved],
    Field(discriminator="type"),
]

_adapter: TypeAdapter = TypeAdapter(Message)


# ── Replies ────────────────────────────────────────────────────────────────

class Ack(BaseModel):
    success: bool = True


class RemainingTime(BaseModel):
    remaining_seconds: int = Field(..., ge=0)



def parse_message(payload: Any) -> Message | None:
    """
    Validate a raw envelope. Returns None for unknown tags or bad payloads.

    Expected payload shape:
    {
        "type": "START_FOCUS_MODE",
        "duration": 1500
    }
    """
    if not isinstance(payload, dict):
        logger.debug("dropping non-object message %r", payload)
        return None
    try:
        return _adapter.validate_python(payload)
    except ValidationError:
        logger.debug("dropping malformed message %r", payload.get("type"))
        return None


def dump_message(message: Message) -> Dict[str, Any]:
    return message.model_dump(exclude_none=True)
