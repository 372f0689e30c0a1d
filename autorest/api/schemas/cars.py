"""Request bodies for the ``cars`` resource."""

from pydantic import BaseModel, ConfigDict, Field

from autorest.api.constants import MAX_INTEGER_VALUE, MIN_INTEGER_VALUE


class CarCreate(BaseModel):
    """Body of ``POST /cars`` and ``PUT /cars/{id}``.

    ``color`` is optional; omitting it on ``PUT`` clears the stored value.
    """

    model_config = ConfigDict(extra="ignore")

    make: str = Field(..., max_length=255, description="Manufacturer", examples=["Honda"])
    model: str = Field(..., max_length=255, description="Model name", examples=["Civic"])
    year: int = Field(
        ...,
        ge=MIN_INTEGER_VALUE,
        le=MAX_INTEGER_VALUE,
        description="Model year",
        examples=[1997],
    )
    color: str | None = Field(default=None, max_length=64, examples=["red"])


class CarPatch(BaseModel):
    """Body of ``PATCH /cars/{id}``; only the given fields change."""

    model_config = ConfigDict(extra="ignore")

    make: str | None = Field(default=None, max_length=255)
    model: str | None = Field(default=None, max_length=255)
    year: int | None = Field(default=None, ge=MIN_INTEGER_VALUE, le=MAX_INTEGER_VALUE)
    color: str | None = Field(default=None, max_length=64)
