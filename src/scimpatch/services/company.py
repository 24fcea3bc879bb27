from typing import List, Tuple
from tortoise.exceptions import IntegrityError
from scimpatch.exceptions import InvalidSyntax
from scimpatch.models import Company
from scimpatch.utils import encode_token, logger
from .authorizer import hash_token


class CompanyService:
    @staticmethod
    async def create_company(name: str, subdomain: str) -> Tuple[Company, str]:
        """Create a company and return it together with its freshly issued API token."""
        if not name or not subdomain:
            raise InvalidSyntax("Company name and subdomain are required")

        api_token = encode_token(subdomain)
        try:
            company = await Company.create(
                name=name,
                subdomain=subdomain,
                api_token_hash=hash_token(api_token),
            )
        except IntegrityError:
            raise InvalidSyntax(f"Company with subdomain '{subdomain}' already exists")

        logger.info(f"Created company: {company}")
        return company, api_token

    @staticmethod
    async def rotate_token(subdomain: str) -> str:
        company = await Company.get_or_none(subdomain=subdomain)
        if company is None:
            raise InvalidSyntax(f"Company with subdomain '{subdomain}' not found")

        api_token = encode_token(subdomain)
        company.api_token_hash = hash_token(api_token)
        await company.save()
        logger.info(f"Rotated API token for {company}")
        return api_token

    @staticmethod
    async def list_companies(active_only: bool = True) -> List[Company]:
        query = Company.all()
        if active_only:
            query = query.filter(active=True)
        return await query
