"""Pydantic schemas for API request/response validation.

The same models back the client-side forms, so normalization happens once:
strings are trimmed, blank optional values become ``None`` and numbers,
URLs and kingdoms are checked before anything is sent over the wire.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from catalog.models.species import Kingdom

_url_adapter = TypeAdapter(AnyUrl)


# === Shared normalizers ===
def trim_required(value: str) -> str:
    """Trim a required string and reject it when nothing is left."""
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Trim an optional string; empty or whitespace-only becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_url(value: Optional[str]) -> Optional[str]:
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        parsed = _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid URL")
    if not parsed.host:
        raise ValueError("must be a valid URL")
    return value


def reject_bool(value: Any) -> Any:
    # bool is an int subclass and pydantic would otherwise coerce True to 1
    if isinstance(value, bool):
        raise ValueError("must be a whole number")
    return value


# === Species Schemas ===
class SpeciesBase(BaseModel):
    scientific_name: str
    common_name: Optional[str] = None
    kingdom: Kingdom
    total_population: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = None
    description: Optional[str] = None

    @field_validator("scientific_name")
    @classmethod
    def validate_scientific_name(cls, v):
        return trim_required(v)

    @field_validator("common_name", "description")
    @classmethod
    def validate_optional_text(cls, v):
        return blank_to_none(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        return normalize_url(v)

    @field_validator("total_population", mode="before")
    @classmethod
    def validate_total_population(cls, v):
        return reject_bool(v)


class SpeciesCreate(SpeciesBase):
    """Schema for creating a new species. The author is taken from the session."""
    pass


class SpeciesUpdate(BaseModel):
    """Schema for a partial species update; unset fields are left alone."""
    scientific_name: Optional[str] = None
    common_name: Optional[str] = None
    kingdom: Optional[Kingdom] = None
    total_population: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = None
    description: Optional[str] = None

    @field_validator("scientific_name")
    @classmethod
    def validate_scientific_name(cls, v):
        if v is None:
            raise ValueError("must not be empty")
        return trim_required(v)

    @field_validator("kingdom")
    @classmethod
    def validate_kingdom(cls, v):
        if v is None:
            raise ValueError("kingdom is required")
        return v

    @field_validator("common_name", "description")
    @classmethod
    def validate_optional_text(cls, v):
        return blank_to_none(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        return normalize_url(v)

    @field_validator("total_population", mode="before")
    @classmethod
    def validate_total_population(cls, v):
        return reject_bool(v)


class SpeciesResponse(SpeciesBase):
    id: int
    author: str

    class Config:
        from_attributes = True


# === Comment Schemas ===
class CommentCreate(BaseModel):
    """Schema for creating a comment on a species."""
    species_id: int = Field(ge=1)
    other_sugs: str = ""
    time_made: Optional[datetime] = None
    author: Optional[str] = None

    @field_validator("species_id", mode="before")
    @classmethod
    def validate_species_id(cls, v):
        return reject_bool(v)

    @field_validator("other_sugs")
    @classmethod
    def validate_other_sugs(cls, v):
        return v.strip()

    @field_validator("author")
    @classmethod
    def validate_author(cls, v):
        return blank_to_none(v)


class CommentUpdate(BaseModel):
    """Schema for editing a comment body or timestamp."""
    other_sugs: Optional[str] = None
    time_made: Optional[datetime] = None

    @field_validator("other_sugs")
    @classmethod
    def validate_other_sugs(cls, v):
        if v is None:
            raise ValueError("comment text may be empty but not null")
        return v.strip()


class CommentResponse(BaseModel):
    commentid: int
    species_id: int
    time_made: Optional[datetime] = None
    other_sugs: str
    author: Optional[str] = None

    class Config:
        from_attributes = True
