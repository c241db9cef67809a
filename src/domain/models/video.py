"""Catalog video domain model."""

from datetime import UTC, datetime
from typing import Any, Self

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogVideo(BaseModel):
    """A video entry in the catalog collection.

    Records are created by the catalog service before a transcode job runs;
    the pipeline only ever sets ``url`` (and the update timestamp). Field
    aliases follow the stored document's camelCase timestamp names.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="Primary key, shared with the storage key namespace")
    title: str = Field(description="Display title")
    description: str = Field(description="Display description")
    views: int = Field(default=0, ge=0, description="View counter")
    playlist: str | None = Field(
        default=None,
        description="Identifier of the playlist grouping this video",
    )
    url: str | None = Field(
        default=None,
        description="Public URL of the HLS master playlist, set after transcoding",
    )
    thumbnail: str | None = Field(default=None, description="Thumbnail URL")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("id", "playlist", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> Any:
        """Accept ObjectId values as their hex string."""
        if isinstance(v, ObjectId):
            return str(v)
        return v

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Build from a stored document, accepting '_id' or 'id'."""
        doc = dict(document)
        if "_id" in doc and "id" not in doc:
            doc["id"] = doc.pop("_id")
        return cls.model_validate(doc)

    @staticmethod
    def playback_url_update(url: str) -> dict[str, Any]:
        """Fields to set when recording a playback URL."""
        return {"url": url, "updatedAt": datetime.now(UTC)}
