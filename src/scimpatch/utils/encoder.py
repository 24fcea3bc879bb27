import secrets
from datetime import datetime, timezone
from typing import Any, Dict
import jwt
from scimpatch.config import Settings, settings
from scimpatch.exceptions import InvalidCredentials
from .logging import logger


def encode_token(searchable_value: str, config: Settings = settings) -> str:
    """Issue a bearer token carrying the company's searchable attribute."""
    payload = {
        "iat": int(datetime.now(timezone.utc).timestamp()),
        "jti": secrets.token_hex(8),
        config.basic_auth_model_searchable_attribute: searchable_value,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Settings = settings) -> Dict[str, Any]:
    """
    Decode and verify a bearer token.

    Raises:
        InvalidCredentials: If the signature does not verify or the token is malformed
    """
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.InvalidTokenError as e:
        logger.warning(f"Bearer token rejected: {e}")
        raise InvalidCredentials("Invalid bearer token")
