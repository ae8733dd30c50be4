"""
Authentication business logic.

Handles user registration, login, token refresh, logout and the current
user profile. Routers only handle HTTP concerns.
"""

from __future__ import annotations

import logging
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.resolvers import get_user_tenant_roles
from eventdesk.core.config import settings
from eventdesk.core.security import (
    blacklist_redis_key,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    refresh_token_redis_key,
    verify_password,
)
from eventdesk.models.tenant import TenantKind
from eventdesk.models.user import GlobalRole, PricingPlan, User
from eventdesk.schemas.auth import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TenantMembershipResponse,
    TokenResponse,
)
from eventdesk.services.invitation_service import InvitationService, normalize_email
from eventdesk.services.user_service import (
    assign_unlimited_to_admins,
    ensure_first_user_is_super_admin,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Handles all authentication operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # Register
    # -----------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> TokenResponse:
        """
        Register a new user.

        - Validates email uniqueness
        - First account becomes super-admin; admins get the unlimited plan
        - Accepts ``invitation_token`` if given (failures never block sign-up)
        - Issues JWT tokens
        """
        email = normalize_email(data.email)
        existing = await self.db.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "EMAIL_TAKEN", "message": "Email is already registered"},
            )

        roles = await ensure_first_user_is_super_admin(self.db, [GlobalRole.user.value])
        user = User(
            email=email,
            password_hash=hash_password(data.password),
            display_name=data.display_name,
            roles=roles,
            pricing_plan=PricingPlan.free,
        )
        assign_unlimited_to_admins(user)
        self.db.add(user)
        await self.db.flush()  # Get user.id without committing

        logger.info("Registered user %s with roles %s", user.id, user.roles)

        if data.invitation_token:
            await InvitationService(self.db).auto_accept_on_signup(user, data.invitation_token)

        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Login
    # -----------------------------------------------------------------------

    async def login(self, data: LoginRequest) -> TokenResponse:
        """
        Authenticate user with email + password.

        Raises 401 for invalid credentials (never reveals which field is wrong).
        """
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(data.email))
        )
        user = result.scalar_one_or_none()

        if (
            user is None
            or user.password_hash is None
            or not verify_password(data.password, user.password_hash)
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_CREDENTIALS", "message": "Invalid email or password"},
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "ACCOUNT_DISABLED", "message": "Account is disabled"},
            )

        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Refresh
    # -----------------------------------------------------------------------

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a valid refresh token for a new token pair.

        Refresh tokens are single-use: the old one is deleted from Redis.
        """
        try:
            payload = decode_refresh_token(refresh_token)
            user_id = UUID(payload.get("sub", ""))
        except (JWTError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_TOKEN", "message": "Refresh token is invalid or expired"},
            )

        jti: str = payload.get("jti", "")
        redis_key = refresh_token_redis_key(str(user_id), jti)
        if not await self.redis.exists(redis_key):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "TOKEN_REVOKED", "message": "Refresh token has been revoked"},
            )

        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()

        if user is None or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "USER_NOT_FOUND", "message": "User not found or inactive"},
            )

        await self.redis.delete(redis_key)
        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Logout
    # -----------------------------------------------------------------------

    async def logout(self, access_token: str, refresh_token: str) -> None:
        """Revoke the access token until it would expire anyway and drop the refresh token."""
        try:
            access_jti = decode_access_token(access_token).get("jti", "")
        except JWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_TOKEN", "message": "Could not decode access token"},
            )
        await self.redis.setex(
            blacklist_redis_key(access_jti),
            settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "1",
        )

        try:
            payload = decode_refresh_token(refresh_token)
        except JWTError:
            # Already expired refresh tokens need no cleanup
            return
        await self.redis.delete(
            refresh_token_redis_key(payload.get("sub", ""), payload.get("jti", ""))
        )

    # -----------------------------------------------------------------------
    # Me
    # -----------------------------------------------------------------------

    async def get_me(self, user: User) -> MeResponse:
        """Current user profile with organization memberships."""
        roles = await get_user_tenant_roles(self.db, user, TenantKind.organization)
        return MeResponse(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            roles=list(user.roles or []),
            pricing_plan=user.pricing_plan.value if user.pricing_plan else None,
            created_at=user.created_at,
            organizations=[
                TenantMembershipResponse(tenant_id=tenant_id, role=role.value)
                for tenant_id, role in roles.items()
            ],
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _issue_tokens(self, user: User) -> TokenResponse:
        """Create an access + refresh token pair and store the refresh JTI in Redis."""
        user_id = str(user.id)

        refresh_token, refresh_jti = create_refresh_token(user_id)
        access_token = create_access_token(user_id)

        ttl_seconds = settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
        await self.redis.setex(
            refresh_token_redis_key(user_id, refresh_jti),
            ttl_seconds,
            "1",
        )

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
