"""
Invitation acceptance endpoint.

POST /api/accept-invitation  accept or decline
GET  /api/accept-invitation  invitation metadata (no state change)

Errors are returned as ``{"error": message}`` for the web client.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_optional_user
from eventdesk.core.exceptions import EventDeskError, InvalidToken, NotAuthenticated
from eventdesk.models.user import User
from eventdesk.schemas.invitation import AcceptInvitationRequest
from eventdesk.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_invitation_service(db: AsyncSession = Depends(get_db)) -> InvitationService:
    """Dependency that constructs InvitationService."""
    return InvitationService(db=db)


def _error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/accept-invitation", summary="Accept or decline an invitation")
async def respond_to_invitation(
    data: AcceptInvitationRequest,
    current_user: User | None = Depends(get_optional_user),
    service: InvitationService = Depends(get_invitation_service),
) -> JSONResponse:
    if not data.token:
        return _error("Token is required")
    if current_user is None:
        return _error("You must be logged in", status.HTTP_401_UNAUTHORIZED)

    try:
        if data.action == "decline":
            result = await service.decline(data.token, current_user)
        else:
            result = await service.accept(data.token, current_user)
    except NotAuthenticated as exc:
        return _error(exc.message, status.HTTP_401_UNAUTHORIZED)
    except EventDeskError as exc:
        logger.info("Invitation %s rejected: %s", data.action or "accept", exc.message)
        return _error(exc.message)

    return JSONResponse(content=result.model_dump(mode="json", exclude_none=True))


@router.get("/accept-invitation", summary="Get invitation details")
async def get_invitation(
    token: str | None = None,
    current_user: User | None = Depends(get_optional_user),
    service: InvitationService = Depends(get_invitation_service),
) -> JSONResponse:
    if not token:
        return _error("Token is required")

    try:
        info = await service.get_invitation_info(token, current_user)
    except InvalidToken as exc:
        return _error(exc.message, status.HTTP_404_NOT_FOUND)
    except EventDeskError as exc:
        return _error(exc.message)

    return JSONResponse(content=info.model_dump(mode="json", by_alias=True))
