"""Authentication Routes

Purpose: FastAPI host adapter for the HumHub bridge authenticator

Every call to the login endpoint is one step of the host flow: the
decision pipeline runs on whatever credentials were posted and the
response either challenges for input, reports the authenticated user, or
re-challenges with a generic error.

Key Endpoints:
- GET  /api/v1/auth/login: Render the credential challenge
- POST /api/v1/auth/login: Submit username/password
- GET  /api/v1/auth/authenticator: Static authenticator metadata
- GET  /api/v1/auth/health: Local store health
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from humhub_bridge.config.settings import get_settings
from humhub_bridge.core.auth import (
    HUMHUB_AUTHENTICATOR,
    AuthenticationPipeline,
    LocalIdentityStore,
    get_pipeline,
)
from humhub_bridge.domain.models import (
    AuthError,
    AuthenticatorDescriptorResponse,
    Authenticated,
    Decision,
    LoginChallengeResponse,
    LoginSuccessResponse,
    NeedsInput,
    UserProfile,
)
from humhub_bridge.infrastructure.auth.user_store import RedisUserStore
from humhub_bridge.infrastructure.redis.client import get_redis_client

# Initialize router and logger
router = APIRouter(prefix="/api/v1/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


# Dependency injection functions
async def get_user_store() -> LocalIdentityStore:
    """Get user store instance for the configured realm"""
    redis_client = await get_redis_client()
    return RedisUserStore(redis_client.get_client(), realm=get_settings().realm)


async def get_authentication_pipeline(
    user_store: LocalIdentityStore = Depends(get_user_store),
) -> AuthenticationPipeline:
    """Get decision pipeline bound to the request's user store"""
    return get_pipeline(user_store)


def render_decision(decision: Decision) -> JSONResponse:
    """Translate a pipeline decision into the host's HTTP response"""
    if isinstance(decision, NeedsInput):
        return JSONResponse(status_code=200, content=LoginChallengeResponse().model_dump())

    if isinstance(decision, Authenticated):
        user = decision.user
        if not user.enabled:
            correlation_id = str(uuid.uuid4())
            logger.warning(
                f"Login refused for disabled user {user.user_id} (correlation: {correlation_id})"
            )
            error = AuthError(
                error="account_disabled",
                error_description="Account is disabled",
                correlation_id=correlation_id,
            )
            return JSONResponse(status_code=403, content=error.model_dump())

        body = LoginSuccessResponse(user=UserProfile.from_user(user))
        return JSONResponse(status_code=200, content=body.model_dump())

    # Rejected: same message and fresh challenge for every failure cause
    body = LoginChallengeResponse(error=decision.reason)
    return JSONResponse(status_code=401, content=body.model_dump())


@router.get("/login", response_model=LoginChallengeResponse)
async def login_form() -> JSONResponse:
    """Initial flow step: no credentials posted yet"""
    return render_decision(NeedsInput())


@router.post(
    "/login",
    responses={
        200: {"model": LoginSuccessResponse},
        401: {"model": LoginChallengeResponse},
        403: {"model": AuthError},
    },
)
async def login(
    request: Request,
    pipeline: AuthenticationPipeline = Depends(get_authentication_pipeline),
) -> JSONResponse:
    """Login step

    Checks local credentials first and falls back to HumHub. Missing fields
    yield a challenge, failures a 401 challenge with a generic error. An
    empty field counts as posted, so it is checked like any other value.
    """
    form = await request.form()
    decision = await pipeline.decide(form_text(form, "username"), form_text(form, "password"))
    return render_decision(decision)


def form_text(form, name: str) -> Optional[str]:
    """Posted text value of a form field, None when the field is absent"""
    value = form.get(name)
    return value if isinstance(value, str) else None


@router.get("/authenticator", response_model=AuthenticatorDescriptorResponse)
async def authenticator_descriptor() -> AuthenticatorDescriptorResponse:
    """Describe the authenticator to the host flow engine"""
    return AuthenticatorDescriptorResponse(**HUMHUB_AUTHENTICATOR.to_dict())


@router.get("/health")
async def auth_health_check():
    """Authentication system health"""
    redis_client = await get_redis_client()
    redis_ok = await redis_client.health_check()
    return {
        "status": "healthy" if redis_ok else "degraded",
        "redis": "connected" if redis_ok else "unavailable",
        "authenticator": HUMHUB_AUTHENTICATOR.id,
    }
