"""Validation of raw service input against the pydantic schemas."""

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from orgkit.core.exceptions import ValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def validate_input(schema: Type[SchemaType], data: Mapping[str, Any], message: str) -> SchemaType:
    """
    Build ``schema`` from ``data``, reporting failures as the kit's ValidationError.

    Args:
        schema: Pydantic model to validate against
        data: Raw field values
        message: Error message when validation fails

    Returns:
        Validated schema instance

    Raises:
        ValidationError: With the pydantic error messages in ``errors``
    """
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError(
            message=message,
            errors=[error["msg"] for error in exc.errors()],
        ) from exc
