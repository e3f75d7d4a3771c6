import hashlib
import hmac
import json
import logging
from typing import Dict, Mapping, Optional
from urllib.parse import quote, unquote

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

WEB_APP_DATA = b"WebAppData"
HASH_FIELD = "hash"
USER_FIELD = "user"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ---------------------------------------------------------------------------
# Telegram WebApp initData
# ---------------------------------------------------------------------------


def parse_init_data(init_data: str) -> Dict[str, str]:
    """
    Split a query-string shaped payload into a dict.

    Segments without '=' are skipped. Keys and values are percent-decoded
    strictly ('+' stays a '+'); invalid UTF-8 raises UnicodeDecodeError.
    """
    fields: Dict[str, str] = {}
    for segment in init_data.split("&"):
        key, sep, value = segment.partition("=")
        if not sep:
            continue
        fields[unquote(key, errors="strict")] = unquote(value, errors="strict")
    return fields


def build_check_string(fields: Mapping[str, str]) -> str:
    """All pairs except 'hash', sorted by key, one 'key=value' per line."""
    return "\n".join(
        f"{key}={fields[key]}" for key in sorted(fields) if key != HASH_FIELD
    )


def compute_init_data_hash(fields: Mapping[str, str], bot_token: str) -> str:
    """Lowercase hex HMAC-SHA256 signature over the check string."""
    secret_key = hmac.new(bot_token.encode("utf-8"), WEB_APP_DATA, hashlib.sha256).digest()
    check_string = build_check_string(fields).encode("utf-8")
    return hmac.new(secret_key, check_string, hashlib.sha256).hexdigest()


def sign_init_data(fields: Mapping[str, str], bot_token: str) -> str:
    """Build a percent-encoded, signed initData string for the given fields."""
    signed = dict(fields)
    signed.pop(HASH_FIELD, None)
    signed[HASH_FIELD] = compute_init_data_hash(signed, bot_token)
    return "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in signed.items())


def _extract_user_id(user_json: Optional[str]) -> Optional[int]:
    if user_json is None:
        return None
    user = json.loads(user_json)
    if not isinstance(user, dict):
        return None
    user_id = user.get("id")
    # bool is an int subclass; "true" is not an identity
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        return None
    if not INT64_MIN <= user_id <= INT64_MAX:
        return None
    return user_id


def validate_init_data(init_data: str, bot_token: str) -> Optional[int]:
    """
    Validate a Telegram WebApp initData payload and return the user id.

    Returns None for anything that does not check out: missing hash, bad
    signature, malformed encoding, or a 'user' field without an integer id.
    Never raises.
    """
    try:
        fields = parse_init_data(init_data)
        received = fields.pop(HASH_FIELD, None)
        if not received:
            logger.warning("initData has no hash field")
            return None

        expected = compute_init_data_hash(fields, bot_token)
        if not hmac.compare_digest(expected.encode("utf-8"), received.lower().encode("utf-8")):
            logger.warning("initData signature mismatch")
            return None

        user_id = _extract_user_id(fields.get(USER_FIELD))
        if user_id is None:
            logger.warning("initData signature valid but user id missing or malformed")
        return user_id
    except Exception:
        logger.warning("Error validating initData", exc_info=True)
        return None


# ---------------------------------------------------------------------------
# Tenant passwords
# ---------------------------------------------------------------------------


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
