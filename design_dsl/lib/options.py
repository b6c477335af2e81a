"""
Option bags attached to design properties and methods.

Options are written inline next to the declaration:

    - name: string (required, displayName: "Supplier Name");
    - async load() (callOnLoad) ```...```

The textX object processors convert the raw option list into a dict and
validate it once, at parse time, against the models below. Resolvers and
synthesizers only ever read the validated models.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ReadMode = Literal["Automatically", "On Demand"]


class _OptionModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class ConditionalRule(_OptionModel):
    """A requiredWhen / excludeWhen / disabledWhen rule."""

    condition: str
    message: Optional[str] = None


class PropertyOptions(_OptionModel):
    # identity and persistence
    id: bool = False
    required: bool = False
    column: dict[str, Any] = Field(default_factory=dict)

    # presentation metadata carried into schemas
    hidden: bool = False
    disabled: bool = False
    display_name: Optional[str] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    present_as: Optional[str] = None
    required_when: Optional[ConditionalRule] = None
    exclude_when: Optional[ConditionalRule] = None
    disabled_when: Optional[ConditionalRule] = None

    # explicit association markers
    belongs_to: bool = False
    has_many: bool = False
    has_one: bool = False
    references: bool = False
    foreign_key: Optional[str] = None

    # user interface
    input: bool = False
    read: Optional[ReadMode] = None
    save: Optional[ReadMode] = None
    on_change_call: Optional[str] = None
    after_read_call: Optional[str] = None
    include: Optional[str] = None
    order: Optional[str] = None

    @field_validator("required_when", "exclude_when", "disabled_when", mode="before")
    @classmethod
    def _rule_from_text(cls, value):
        if isinstance(value, str):
            return {"condition": value}
        return value

    @property
    def association_markers(self) -> list[str]:
        markers = []
        for name, flag in (
            ("belongsTo", self.belongs_to),
            ("hasMany", self.has_many),
            ("hasOne", self.has_one),
            ("references", self.references),
        ):
            if flag:
                markers.append(name)
        return markers


class MethodOptions(_OptionModel):
    call_on_load: bool = False
    call_after_load: bool = False
    scope: Literal["public", "private", "protected"] = "public"
