import hashlib
import hmac
from typing import Optional
from scimpatch.config import Settings, settings
from scimpatch.exceptions import InvalidCredentials
from scimpatch.models import Company
from scimpatch.utils import logger


def hash_token(token: str) -> str:
    """Generate SHA-256 hash of the token."""
    return hashlib.sha256(token.encode()).hexdigest()


class AuthorizeApiRequest:
    """
    Resolves the company for a pair of authentication attributes.

    ``searchable_attribute`` identifies the company (its subdomain by default),
    ``authentication_attribute`` is the secret checked against it.
    """

    def __init__(
        self,
        searchable_attribute: Optional[str],
        authentication_attribute: Optional[str],
        config: Settings = settings,
    ):
        if not searchable_attribute or not authentication_attribute:
            raise InvalidCredentials()
        self.searchable_attribute = searchable_attribute
        self.authentication_attribute = authentication_attribute
        self.authenticatable_field = f"{config.basic_auth_model_authenticatable_attribute}_hash"
        self.search_parameter = {config.basic_auth_model_searchable_attribute: searchable_attribute}

    async def company(self) -> Optional[Company]:
        """Return the matching active company, or None when there is none."""
        company = await Company.filter(**self.search_parameter).first()
        if company is None:
            logger.warning(f"No company found for {self.search_parameter}")
            return None
        if not company.active:
            logger.warning(f"Inactive company rejected: {company}")
            return None
        self._authorize(company)
        return company

    def _authorize(self, company: Company) -> None:
        stored_hash = getattr(company, self.authenticatable_field)
        if not hmac.compare_digest(stored_hash, hash_token(self.authentication_attribute)):
            logger.warning(f"Credential mismatch for {company}")
            raise InvalidCredentials()
