"""
/runtime — bridge for contexts outside this process to reach the background
runtime's message bus. Same envelopes, same "no reply" semantics.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request, Response, WebSocket, WebSocketDisconnect, status

from ...api.schemas import BadgeOut

router = APIRouter(prefix="/runtime", tags=["runtime"])


def _get_runtime(request: Request):
    return request.app.state.runtime


@router.post("/message")
async def post_message(request: Request, runtime=Depends(_get_runtime)):
    """
    Deliver one envelope. 200 carries the reply; 204 means the runtime sent
    none (one-way notification, unknown type or malformed payload).
    """
    try:
        payload = await request.json()
    except ValueError:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    reply = await runtime.bus.send_message(payload)
    if reply is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return reply


@router.get("/badge", response_model=BadgeOut)
def get_badge(runtime=Depends(_get_runtime)):
    """Current badge text as last published by the focus tick."""
    return BadgeOut(text=runtime.focus.badge.text, remaining_seconds=runtime.focus.get_remaining())


@router.websocket("/ws")
async def runtime_websocket(websocket: WebSocket):
    """
    Long-lived channel: every text frame is one envelope; a reply frame is
    sent back only when the runtime answers.
    """
    runtime = websocket.app.state.runtime
    await websocket.accept()
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                payload = json.loads(raw)
            except ValueError:
                continue
            reply = await runtime.bus.send_message(payload)
            if reply is not None:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        pass
