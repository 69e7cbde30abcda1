"""Pydantic schemas for the persisted data file."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FileModel(BaseModel):
    """Base for file records: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LinkRecord(_FileModel):
    """One entry of the ``links`` collection."""

    code: str = Field(..., min_length=1)
    original_url: str
    owner_id: str
    created_at: float = Field(..., description="Creation time, epoch seconds")
    ttl: int = Field(0, ge=0, description="Time to live in seconds, 0 = unbounded")
    max_clicks: int = Field(0, ge=0, description="Click budget, 0 = unbounded")
    click_count: int = Field(0, ge=0)


class OwnerRecord(_FileModel):
    """One entry of the ``users`` collection."""

    id: str = Field(..., min_length=1)
    codes: List[str] = Field(default_factory=list)


class StoreSnapshot(_FileModel):
    """The whole data file."""

    links: List[LinkRecord] = Field(default_factory=list)
    users: List[OwnerRecord] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "links": [
                        {
                            "code": "aB3xY9",
                            "originalUrl": "https://example.com/page",
                            "ownerId": "0f8c2b9e-7d0c-4d8e-9a55-1c2d3e4f5a6b",
                            "createdAt": 1700000000.0,
                            "ttl": 3600,
                            "maxClicks": 10,
                            "clickCount": 2,
                        }
                    ],
                    "users": [
                        {
                            "id": "0f8c2b9e-7d0c-4d8e-9a55-1c2d3e4f5a6b",
                            "codes": ["aB3xY9"],
                        }
                    ],
                }
            ]
        },
    )
