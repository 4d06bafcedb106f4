from tortoise import fields
from .base import BaseModel


class Album(BaseModel):
    user = fields.ForeignKeyField("models.User", related_name="albums", on_delete=fields.CASCADE)
    title = fields.TextField()
    description = fields.TextField(default="")
    is_public = fields.BooleanField(default=False)
    share_token = fields.CharField(max_length=64, unique=True, null=True)
    # Cache of the number of photos pointing at this album; only
    # AlbumCountReconciler writes it.
    photo_count = fields.IntField(default=0)

    class Meta:
        table = "albums"
