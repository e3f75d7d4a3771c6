import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotAuthenticatedError, PermissionDeniedError
from app.core.security import INT64_MAX, INT64_MIN, validate_init_data
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import Principal

logger = logging.getLogger(__name__)

# Where the Telegram WebApp SDK may put initData, in order of precedence
INIT_DATA_HEADERS = ("X-Telegram-Init-Data", "X-WebApp-Init-Data")
INIT_DATA_QUERY_PARAMS = ("tgWebAppData", "_auth")
INIT_DATA_FORM_FIELD = "initData"
DEBUG_USER_HEADER = "X-Telegram-User-Id"

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_init_data(request: Request) -> Optional[str]:
    for header in INIT_DATA_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    for param in INIT_DATA_QUERY_PARAMS:
        value = request.query_params.get(param)
        if value:
            return value

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        try:
            form = await request.form()
        except Exception:
            logger.warning("Could not read form body for initData", exc_info=True)
            return None
        value = form.get(INIT_DATA_FORM_FIELD)
        if isinstance(value, str) and value:
            return value
    return None


def _read_debug_user_id(request: Request) -> Optional[int]:
    raw = request.headers.get(DEBUG_USER_HEADER, "").strip()
    try:
        value = int(raw)
    except ValueError:
        return None
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


async def get_telegram_id(request: Request) -> Optional[int]:
    """
    Recover the caller's Telegram user id, or None if there is none.

    With a bot token configured only a valid signed initData counts. Without
    one, the raw debug header is accepted when ALLOW_DEBUG_IDENTITY is on.
    """
    bot_token = settings.TELEGRAM_BOT_TOKEN
    if bot_token:
        init_data = await _read_init_data(request)
        if not init_data:
            return None
        telegram_id = validate_init_data(init_data, bot_token)
        if telegram_id is None:
            logger.warning("Invalid Telegram initData on %s %s", request.method, request.url.path)
        return telegram_id

    if settings.ALLOW_DEBUG_IDENTITY:
        return _read_debug_user_id(request)
    return None


def get_current_identity(telegram_id: Optional[int] = Depends(get_telegram_id)) -> int:
    if telegram_id is None:
        raise NotAuthenticatedError()
    return telegram_id


def get_optional_user(
    telegram_id: int = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Authenticated caller's user record, or None if they have not registered yet."""
    return db.query(User).filter(User.telegram_id == telegram_id).first()


def get_current_principal(user: Optional[User] = Depends(get_optional_user)) -> Principal:
    if user is None:
        raise PermissionDeniedError("No account for this Telegram user")
    return Principal(
        user_id=user.id,
        telegram_id=user.telegram_id,
        name=user.name,
        tenant_id=user.tenant_id,
        role=user.role,
    )


def get_current_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError("Admin role required")
    return principal


def get_now() -> datetime:
    """Current wall-clock time in the deployment's reference timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))
