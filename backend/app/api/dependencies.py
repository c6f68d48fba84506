"""API Dependencies — caller identity and external-client providers.

Invariants:
    - Identity comes from the X-User-Id header set by the upstream auth proxy
    - get_current_user: missing/unknown/malformed id -> 401
    - Client providers return None (Gemini, Anthropic) when the key is empty;
      Stripe and Sheets raise their own not_configured errors on use

Design Decisions:
    - Every external client is a FastAPI dependency so tests swap in fakes via
      app.dependency_overrides
    - Clients cached per key: SDK clients hold connection pools
"""

import uuid
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import AuthenticationRequiredError, PermissionDeniedError
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.infrastructure.database import get_db
from app.infrastructure.gemini_client import GeminiClient
from app.infrastructure.sheets_client import SheetsClient
from app.infrastructure.stripe_gateway import StripeGateway
from app.models.user import User


async def _load_user(db: AsyncSession, raw_id: str | None) -> User | None:
    if not raw_id:
        return None
    try:
        user_id = uuid.UUID(raw_id)
    except ValueError:
        return None
    return await db.get(User, user_id)


async def get_current_user(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await _load_user(db, x_user_id)
    if user is None:
        raise AuthenticationRequiredError()
    return user


async def get_optional_user(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    return await _load_user(db, x_user_id)


async def require_super_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_super_admin:
        raise PermissionDeniedError("Super admin access required")
    return user


@lru_cache
def _stripe(secret_key: str, webhook_secret: str, currency: str) -> StripeGateway:
    return StripeGateway(secret_key, webhook_secret, currency)


@lru_cache
def _gemini(api_key: str, model: str, image_model: str, attempts: int) -> GeminiClient:
    return GeminiClient(api_key, model, image_model, attempts)


@lru_cache
def _anthropic(
    api_key: str, retries: int, base_ms: int, max_ms: int, timeout: int,
) -> ResilientAnthropicClient:
    return ResilientAnthropicClient(
        api_key, max_retries=retries, base_delay_ms=base_ms,
        max_delay_ms=max_ms, timeout_seconds=timeout,
    )


def get_stripe_gateway() -> StripeGateway:
    s = get_settings()
    return _stripe(s.stripe_secret_key, s.stripe_webhook_secret, s.stripe_currency)


def get_gemini_client() -> GeminiClient | None:
    s = get_settings()
    if not s.gemini_api_key:
        return None
    return _gemini(s.gemini_api_key, s.gemini_model, s.gemini_image_model, s.gemini_max_attempts)


def get_anthropic_client() -> ResilientAnthropicClient | None:
    s = get_settings()
    if not s.anthropic_api_key:
        return None
    return _anthropic(
        s.anthropic_api_key, s.anthropic_max_retries, s.anthropic_base_delay_ms,
        s.anthropic_max_delay_ms, s.anthropic_timeout_seconds,
    )


def get_sheets_client() -> SheetsClient:
    return SheetsClient(get_settings().google_sheets_credentials)
