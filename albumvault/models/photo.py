from tortoise import fields
from .base import BaseModel

DEFAULT_DOMINANT_COLOR = "#000000"


class Photo(BaseModel):
    album = fields.ForeignKeyField("models.Album", related_name="photos", on_delete=fields.RESTRICT)
    user = fields.ForeignKeyField("models.User", related_name="photos", on_delete=fields.CASCADE)
    title = fields.TextField()
    description = fields.TextField(default="")
    acquired_at = fields.DatetimeField(db_index=True)
    size_bytes = fields.BigIntField()
    dominant_color = fields.CharField(max_length=7, default=DEFAULT_DOMINANT_COLOR)
    original_filename = fields.TextField()
    storage_key = fields.CharField(max_length=1024)
    file_url = fields.CharField(max_length=1024)
    mime_type = fields.CharField(max_length=100)
    width = fields.IntField(null=True)
    height = fields.IntField(null=True)

    class Meta:
        table = "photos"
