"""Request payload validation."""

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from user_service.errors import InvalidInput

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def describe_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """Summarize validation errors by field, without echoing input values."""
    parts = []
    for error in errors:
        field = ".".join(str(loc) for loc in error["loc"]) or "body"
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


class Validator:
    """Apply the constraints declared on a request schema to a raw payload."""

    def validate(self, schema: type[SchemaT], payload: Any) -> SchemaT:
        if isinstance(payload, schema):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidInput("Request body must be a JSON object")
        try:
            return schema.model_validate(payload)
        except ValidationError as e:
            raise InvalidInput(f"Invalid input data: {describe_errors(e.errors())}") from e
