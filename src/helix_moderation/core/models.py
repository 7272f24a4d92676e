"""
Base schemas shared by every endpoint.

Requests and bodies are frozen and reject unknown fields, so a typo in a
builder call fails immediately. Response records are validated with strict
types; whether unknown record fields are tolerated is decided by the decoder,
not by the record class.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConstructionError

# Opaque pagination token handed out by the API
Cursor = str


class HelixRequest(BaseModel):
    """Query parameters of one API call."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class HelixBody(BaseModel):
    """One entry of a POST body's ``data`` array."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class HelixRecord(BaseModel):
    """One entry of a response's ``data`` array."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    @classmethod
    def wire_fields(cls) -> frozenset[str]:
        """JSON keys this record understands."""
        return frozenset(
            info.alias or name for name, info in cls.model_fields.items()
        )


def build_model(model: type[BaseModel], fields: dict[str, Any]) -> Any:
    """
    Validate ``fields`` into ``model``.

    Raises:
        ConstructionError: If a mandatory field is missing, a value has the
            wrong type, or an unknown field was given
    """
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            where = ".".join(str(part) for part in error["loc"]) or model.__name__
            problems.append(f"{where}: {error['msg']}")
        raise ConstructionError(model.__name__, problems) from e
