"""Catalog records handed to the UI."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Track(BaseModel):
    """A track search result."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    artists: list[str] = Field(default_factory=list)
    album_artwork_url: str | None = Field(default=None, alias="albumArtworkUrl")
    """
    URL of the first (largest) album image, when the album has one.
    """

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> Track:
        """Build a Track from a catalog API track object."""
        images = (item.get("album") or {}).get("images") or []
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            artists=[a["name"] for a in item.get("artists") or [] if a.get("name")],
            album_artwork_url=images[0].get("url") if images else None,
        )
