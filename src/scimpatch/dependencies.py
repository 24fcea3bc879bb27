import base64
import binascii
from typing import Annotated, Optional, Tuple
from fastapi import Depends, Header, Request
from scimpatch.config import Settings, settings
from scimpatch.exceptions import InvalidCredentials
from scimpatch.models import Company
from scimpatch.services import AuthorizeApiRequest, PatchApplier, PatchOperationParser
from scimpatch.utils import build_tree, decode_token, dig, locate, logger
from scimpatch.utils.schema_tree import SchemaConfig


def authentication_strategy(authorization: Optional[str]) -> str:
    if authorization and "Bearer" in authorization:
        return "bearer"
    return "basic"


def authenticate_with_oauth_bearer(
    authorization: str,
    config: Settings = settings,
) -> Tuple[Optional[str], str]:
    """Return (searchable attribute, token) from a ``Bearer <token>`` header."""
    authentication_attribute = authorization.split()[-1]
    payload = decode_token(authentication_attribute, config)
    path = locate(config.basic_auth_model_searchable_attribute, build_tree(payload), match_leaves=False)
    searchable_attribute = dig(payload, path)
    if searchable_attribute is not None:
        searchable_attribute = str(searchable_attribute)
    return searchable_attribute, authentication_attribute


def authenticate_with_http_basic(authorization: Optional[str]) -> Tuple[str, str]:
    """Return (user, password) from a ``Basic <base64>`` header."""
    if not authorization:
        raise InvalidCredentials("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "basic":
        raise InvalidCredentials("Invalid Authorization header format")

    try:
        decoded = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise InvalidCredentials("Invalid Basic credentials encoding")

    user, separator, password = decoded.partition(":")
    if not separator:
        raise InvalidCredentials("Invalid Basic credentials format")
    return user, password


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def authorize_request(
    authorization: Annotated[Optional[str], Header()] = None,
    config: Annotated[Settings, Depends(get_settings)] = settings,
) -> Company:
    """
    Resolve the company for the current request.

    Bearer tokens carry the searchable attribute in their payload, Basic
    credentials carry it as the user name. Either way the secret is checked by
    ``AuthorizeApiRequest``.
    """
    strategy = authentication_strategy(authorization)
    if strategy == "bearer":
        searchable_attribute, authentication_attribute = authenticate_with_oauth_bearer(authorization, config)
    else:
        searchable_attribute, authentication_attribute = authenticate_with_http_basic(authorization)

    company = await AuthorizeApiRequest(
        searchable_attribute=searchable_attribute,
        authentication_attribute=authentication_attribute,
        config=config,
    ).company()
    if company is None:
        raise InvalidCredentials()

    logger.debug(f"Authenticated {company} using {strategy} credentials")
    return company


def get_schema_config(request: Request) -> SchemaConfig:
    return request.app.state.schema_config


def get_patch_parser(schema_config: Annotated[SchemaConfig, Depends(get_schema_config)]) -> PatchOperationParser:
    return PatchOperationParser(schema_config)


def get_patch_applier(request: Request) -> PatchApplier:
    return request.app.state.patch_applier


async def get_request_id(request: Request) -> str:
    return request.headers.get("X-Request-ID", "unknown")


# Type aliases for dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
CurrentCompany = Annotated[Company, Depends(authorize_request)]
PatchParser = Annotated[PatchOperationParser, Depends(get_patch_parser)]
Applier = Annotated[PatchApplier, Depends(get_patch_applier)]
RequestId = Annotated[str, Depends(get_request_id)]
