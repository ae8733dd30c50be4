"""
Public registration endpoints for participants and partners.

Creating a registration needs no account; listing does.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_current_user, get_optional_user
from eventdesk.models.user import User
from eventdesk.schemas.registration import (
    RegistrationCreateRequest,
    RegistrationResponse,
    RegistrationsListResponse,
)
from eventdesk.services.registration_service import RegistrationService

router = APIRouter()

COLLECTION_PATTERN = "^(participants|partners)$"


def get_registration_service(
    collection: str = Path(pattern=COLLECTION_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> RegistrationService:
    """Dependency that constructs RegistrationService for the path's collection."""
    return RegistrationService(db=db, collection=collection)


@router.post(
    "/{collection}",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register for an event",
)
async def register(
    data: RegistrationCreateRequest,
    current_user: User | None = Depends(get_optional_user),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    """
    Submit a registration.

    Anonymous submissions are stored as ``not-approved`` with the
    registration date set.
    """
    return await service.register(data, current_user)


@router.get(
    "/{collection}",
    response_model=RegistrationsListResponse,
    summary="List registrations",
)
async def list_registrations(
    event_id: UUID | None = None,
    current_user: User = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationsListResponse:
    return await service.list_registrations(current_user, event_id)
