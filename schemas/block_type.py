"""Block type and field schemas exposed to the authoring surface"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class FieldKind(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    SELECT = "select"
    RICHTEXT = "richtext"
    REPEATER = "repeater"
    BLOCKS = "blocks"


TEXT_KINDS = (FieldKind.STRING, FieldKind.RICHTEXT, FieldKind.SELECT)
LIST_KINDS = (FieldKind.REPEATER, FieldKind.BLOCKS)


class FieldSpec(BaseModel):
    """Declared kind, label and default of one configurable block property."""
    kind: FieldKind
    label: str
    default: Any = None
    options: Optional[list[str]] = None
    item_schema: Optional[dict[str, "FieldSpec"]] = Field(None, alias="itemSchema")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def fill_default(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("default") is not None:
            return data
        kind = FieldKind(data.get("kind"))
        options = data.get("options") or []
        if kind in (FieldKind.STRING, FieldKind.RICHTEXT):
            default = ""
        elif kind == FieldKind.BOOLEAN:
            default = False
        elif kind == FieldKind.SELECT:
            default = options[0] if options else ""
        else:
            default = []
        return {**data, "default": default}

    @model_validator(mode="after")
    def check_kind(self) -> "FieldSpec":
        if self.kind == FieldKind.SELECT:
            if not self.options:
                raise ValueError("select fields need at least one option")
            if self.default not in self.options:
                raise ValueError(f"default {self.default!r} is not one of {self.options}")
        elif self.options is not None:
            raise ValueError("options are only allowed on select fields")

        if self.kind == FieldKind.REPEATER and not self.item_schema:
            raise ValueError("repeater fields need an itemSchema")
        if self.kind != FieldKind.REPEATER and self.item_schema is not None:
            raise ValueError("itemSchema is only allowed on repeater fields")

        if not matches_kind(self.kind, self.default):
            raise ValueError(f"default {self.default!r} does not match kind {self.kind.value}")
        return self


def matches_kind(kind: FieldKind, value: Any) -> bool:
    """Whether a JSON value has the shape a field of `kind` stores."""
    if kind in TEXT_KINDS:
        return isinstance(value, str)
    if kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    return isinstance(value, list)


class BlockTypeRead(BaseModel):
    """Schema for reading a registered block type"""
    type: str
    label: str
    category: str
    field_schema: dict[str, FieldSpec] = Field(alias="schema")
    defaults: dict[str, Any]

    model_config = {"populate_by_name": True}


FieldSpec.model_rebuild()
