"""Auth router: OTP request and verification endpoints.

Endpoints
---------
POST /v1/auth/request-otp   → issue a code (delivered out of band)
POST /v1/auth/verify-otp    → exchange a code for a session token
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from otp_auth.api.dependencies import get_auth_service
from otp_auth.models.user import User
from otp_auth.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])


# ── Response / request models ────────────────────────────

class RequestOTPRequest(BaseModel):
    phone_number: str


class RequestOTPResponse(BaseModel):
    message: str
    expires_in_seconds: int


class VerifyOTPRequest(BaseModel):
    phone_number: str
    otp: str


class UserResponse(BaseModel):
    id: uuid.UUID
    phone_number: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(id=user.id, phone_number=user.phone_number, created_at=user.created_at)


class VerifyOTPResponse(BaseModel):
    token: str
    user: UserResponse


# ── Endpoints ────────────────────────────────────────────

@router.post("/request-otp", response_model=RequestOTPResponse)
async def request_otp(
    body: RequestOTPRequest,
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Generate an OTP for the phone number.

    The code is never returned; it goes to the delivery log.
    """
    source_address = request.client.host if request.client else "unknown"
    accepted = await auth.request_challenge(body.phone_number, source_address)
    return RequestOTPResponse(
        message="OTP sent successfully. Check server logs for the code.",
        expires_in_seconds=accepted.expires_in_seconds,
    )


@router.post("/verify-otp", response_model=VerifyOTPResponse)
async def verify_otp(
    body: VerifyOTPRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Validate an OTP and return a session token for the (possibly new) user."""
    result = await auth.verify_challenge(body.phone_number, body.otp)
    return VerifyOTPResponse(token=result.token, user=UserResponse.from_user(result.user))
