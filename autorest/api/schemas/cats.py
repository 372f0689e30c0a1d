"""Request bodies for the ``cats`` resource."""

from pydantic import BaseModel, ConfigDict, Field


class CatCreate(BaseModel):
    """Body of ``POST /cats`` and ``PUT /cats/{id}``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., max_length=255, description="Name of the cat", examples=["Tom"])


class CatPatch(BaseModel):
    """Body of ``PATCH /cats/{id}``; only the given fields change."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, max_length=255, examples=["Felix"])
