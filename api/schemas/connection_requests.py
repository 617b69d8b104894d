"""
Pydantic schemas for connection request endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class ConnectionRequestCreate(BaseModel):
    """Request model for sending a connection request."""

    requester_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)

    @model_validator(mode="after")
    def validate_not_self(self) -> ConnectionRequestCreate:
        if self.requester_id == self.target_id:
            raise ValueError("requester_id and target_id must differ")
        return self


class ConnectionRequestDecision(BaseModel):
    """Request model for accepting or rejecting a pending request."""

    requester_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    accept: bool


class ConnectionRequestSentResponse(BaseModel):
    sent: bool


class ConnectionRequestUpdatedResponse(BaseModel):
    updated: bool


class ConnectionRequestWithdrawnResponse(BaseModel):
    withdrawn: bool
