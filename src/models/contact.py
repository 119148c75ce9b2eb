"""Models for client task records and their contact diagnosis."""
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class CustomField(BaseModel):
    """A named custom field attached to a task."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(default="", description="Custom field name e.g. 'HOH Email'")
    display_value: str | None = Field(
        default=None,
        validation_alias=AliasChoices("display_value", "text_value"),
        description="Rendered value of the field, absent when unset",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("display_value", mode="before")
    @classmethod
    def _stringify_value(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)


class Record(BaseModel):
    """A task representing one client or lead."""
    model_config = ConfigDict(extra="ignore")

    gid: str | None = Field(default=None, description="Upstream task identifier")
    name: str = Field(default="", description="Task display name")
    custom_fields: list[CustomField] = Field(default_factory=list)

    @field_validator("gid", mode="before")
    @classmethod
    def _gid_as_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _fields_or_empty(cls, value: Any) -> list[Any]:
        # Malformed or missing field lists are treated as empty
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, CustomField))]


class Container(BaseModel):
    """A portfolio member or project that owns client tasks."""
    model_config = ConfigDict(extra="ignore")

    gid: str
    name: str | None = None

    @field_validator("gid", mode="before")
    @classmethod
    def _gid_as_text(cls, value: Any) -> Any:
        # Fixtures and exports sometimes carry numeric ids
        return str(value) if isinstance(value, int) else value

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_text(cls, value: Any) -> str | None:
        return None if value is None else str(value)


class ContactInfo(BaseModel):
    """Values pulled out of a record's custom fields."""
    segmentation: str = "Unknown"
    email: str = ""
    phone: str = ""


class ClassifiedRecord(BaseModel):
    """A client missing at least one contact field, ready for the report."""
    model_config = ConfigDict(frozen=True)

    name: str
    segmentation: str
    missing_description: str
