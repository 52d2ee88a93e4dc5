"""
Validation helpers for form drafts and query parameters using Pydantic schemas.

Pydantic errors are converted to the app ValidationError so views can show
them in the error modal without ever reaching the backend.
"""

from __future__ import annotations

from typing import Type, TypeVar, Any, Mapping
from pydantic import ValidationError as PydanticValidationError

from apps.core.exceptions import ValidationError as AppValidationError

T = TypeVar("T", bound=object)


"""
GOAL: Convert a Pydantic ValidationError into the app ValidationError.

PARAMETERS:
  exc: PydanticValidationError - Raised by model_validate - Not None

RETURNS:
  AppValidationError - message is the first error's text - Never None

GUARANTEES:
  - Every error is preserved under details["validation_errors"] as "field: message"
  - Custom Korean messages from schema validators are passed through untouched
"""
def _to_app_error(exc: PydanticValidationError) -> AppValidationError:
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    error_messages = []
    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"])
        error_messages.append(f"{field}: {error['msg']}" if field else error["msg"])

    first = errors[0]["msg"] if errors else "Validation failed"
    return AppValidationError(first, details={"validation_errors": error_messages})


"""
GOAL: Replace empty strings with None so optional fields fall back to defaults.

PARAMETERS:
  data: Mapping[str, Any] - Raw form or query data - Can contain empty strings

RETURNS:
  dict[str, Any] - Cleaned copy - Never None
"""
def _blank_to_none(data: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str) and value.strip() == "":
            cleaned[key] = None
        else:
            cleaned[key] = value
    return cleaned


"""
GOAL: Validate query parameters using a Pydantic schema.

PARAMETERS:
  schema_class: Type[T] - Pydantic model class - Must be a BaseModel subclass
  query_params: Mapping[str, Any] - request.GET.dict() - Can contain empty strings

RETURNS:
  T - Validated model - Never None

RAISES:
  AppValidationError: If validation fails

GUARANTEES:
  - Empty strings are treated as None for optional fields
"""
def validate_query_params(schema_class: Type[T], query_params: Mapping[str, Any]) -> T:
    try:
        return schema_class.model_validate(_blank_to_none(query_params))
    except PydanticValidationError as exc:
        raise _to_app_error(exc) from exc


"""
GOAL: Validate a submitted console form draft before any backend call.

PARAMETERS:
  schema_class: Type[T] - Form schema from apps.core.schemas
  form_data: Mapping[str, Any] - request.POST.dict() - Can contain empty strings

RETURNS:
  T - Validated form - Never None

RAISES:
  AppValidationError: With the first Korean message produced by the schema

GUARANTEES:
  - Pure function; never performs I/O
"""
def validate_form(schema_class: Type[T], form_data: Mapping[str, Any]) -> T:
    try:
        return schema_class.model_validate(_blank_to_none(form_data))
    except PydanticValidationError as exc:
        raise _to_app_error(exc) from exc
