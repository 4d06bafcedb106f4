from tortoise import fields
from .base import BaseModel


class User(BaseModel):
    email = fields.CharField(max_length=255, unique=True, db_index=True)
    name = fields.CharField(max_length=255)
    password_hash = fields.CharField(max_length=255)

    class Meta:
        table = "users"
