from tortoise import fields
from tortoise.models import Model


class Company(Model):
    id = fields.UUIDField(pk=True)
    name = fields.CharField(max_length=255)
    subdomain = fields.CharField(max_length=255, unique=True)
    api_token_hash = fields.CharField(max_length=64)
    active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    modified_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "companies"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.subdomain})"
