"""
Connection Requests Router - The write path for connection requests.

Precondition failures (already following, request exists, lost race) are not
errors: the endpoints answer 200 with a false flag.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from circles.errors import GraphStoreError

from ..dependencies import get_request_writer
from ..schemas import (
    ConnectionRequestCreate,
    ConnectionRequestDecision,
    ConnectionRequestSentResponse,
    ConnectionRequestUpdatedResponse,
    ConnectionRequestWithdrawnResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/connection-requests", tags=["connection-requests"])


@router.post("")
async def send_connection_request(request: ConnectionRequestCreate) -> ConnectionRequestSentResponse:
    """Send a connection request; sent=false means nothing happened."""
    writer = get_request_writer()
    try:
        sent = await writer.send_request_async(request.requester_id, request.target_id)
    except GraphStoreError as e:
        logger.error(f"Failed to send request {request.requester_id} -> {request.target_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to send connection request")
    return ConnectionRequestSentResponse(sent=sent)


@router.post("/respond")
async def respond_to_connection_request(decision: ConnectionRequestDecision) -> ConnectionRequestUpdatedResponse:
    """Accept or reject a pending request addressed to target_id."""
    writer = get_request_writer()
    try:
        updated = await writer.respond_to_request_async(decision.target_id, decision.requester_id, decision.accept)
    except GraphStoreError as e:
        logger.error(f"Failed to resolve request {decision.requester_id} -> {decision.target_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to update connection request")
    return ConnectionRequestUpdatedResponse(updated=updated)


@router.delete("/{requester_id}/{target_id}")
async def withdraw_connection_request(requester_id: str, target_id: str) -> ConnectionRequestWithdrawnResponse:
    """Withdraw (delete) a request so a fresh one can be sent later."""
    writer = get_request_writer()
    try:
        withdrawn = await writer.withdraw_request_async(requester_id, target_id)
    except GraphStoreError as e:
        logger.error(f"Failed to withdraw request {requester_id} -> {target_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to withdraw connection request")
    return ConnectionRequestWithdrawnResponse(withdrawn=withdrawn)
