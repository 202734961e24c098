"""Shared field types and small response models."""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, Field


def _to_str(v: Any) -> Any:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def _to_optional_str(v: Any) -> Any:
    if v is None or v == "":
        return None
    return _to_str(v)


# Ids are cuid strings on most tenants but integers on older seed data
EntityId = Annotated[str, BeforeValidator(_to_str)]

RoomNumber = Annotated[str, BeforeValidator(_to_str)]

# Floors come back as numbers or strings depending on how rooms were created
Floor = Annotated[Optional[str], BeforeValidator(_to_optional_str)]


class Pagination(BaseModel):
    """Pagination block returned by list endpoints."""

    total: int = 0
    page: int = 1
    limit: int = 50
    pages: int = 0

    class Config:
        extra = "allow"
        populate_by_name = True


class ErrorBody(BaseModel):
    """Error object returned by the API: ``{"error": "<message>"}``."""

    error: str = Field(default="")

    class Config:
        extra = "allow"
