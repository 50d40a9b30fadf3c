"""
Schema-driven request validation.

Pydantic models describe each operation's payload. Every violation is
collected (pydantic never stops at the first failing field) and translated
into the client-facing shape ``{field, type, errorCode, message}`` through
the lookup table below.
"""
import re
from typing import Any, Iterable, Mapping, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticCustomError

from ..exceptions import AppException, ErrorCode, ValidationFailed
from ..logging_config import get_logger

logger = get_logger("validation")

ModelT = TypeVar("ModelT", bound=BaseModel)

_DEFAULT = (ErrorCode.INVALID_FIELD_FORMAT, "Invalid input.")

ERROR_MAP: dict[str, tuple[ErrorCode, str]] = {
    "missing": (ErrorCode.INVALID_FIELD_FORMAT, "This field is required."),
    "string_type": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a text string."),
    "string_too_short": (ErrorCode.INVALID_FIELD_FORMAT, "This field must have at least {min_length} characters."),
    "string_too_long": (ErrorCode.INVALID_FIELD_FORMAT, "This field must not exceed {max_length} characters."),
    "string_length": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be exactly {limit} characters."),
    "string_pattern_mismatch": (ErrorCode.INVALID_FIELD_FORMAT, "This field has an invalid format."),
    "string_email": (ErrorCode.INVALID_EMAIL_FORMAT, "Please enter a valid email address."),
    "string_alphanum": (ErrorCode.INVALID_USER_NAME, "Username can only contain letters and numbers."),
    "literal_error": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be one of {expected}."),
    "enum": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be one of {expected}."),
    "greater_than_equal": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be greater than or equal to {ge}."),
    "less_than_equal": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be less than or equal to {le}."),
    "float_parsing": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a number."),
    "float_type": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a number."),
    "bool_parsing": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a boolean."),
    "bool_type": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a boolean."),
    "datetime_parsing": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a valid ISO 8601 date."),
    "datetime_from_date_parsing": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a valid ISO 8601 date."),
    "datetime_type": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a valid ISO 8601 date."),
    "uuid_parsing": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a valid identifier."),
    "uuid_type": (ErrorCode.INVALID_FIELD_FORMAT, "This field must be a valid identifier."),
    "too_long": (ErrorCode.INVALID_FIELD_FORMAT, "This field must not contain more than {max_length} items."),
    "extra_forbidden": (ErrorCode.INVALID_FIELD_FORMAT, "This field is not allowed."),
    "at_least_one_field": (ErrorCode.INVALID_FIELD_FORMAT, "At least one field is required for update."),
    "not_null": (ErrorCode.INVALID_FIELD_FORMAT, "This field must not be null."),
    "model_attributes_type": (ErrorCode.INVALID_FIELD_FORMAT, "Request body must be an object."),
    "model_type": (ErrorCode.INVALID_FIELD_FORMAT, "Request body must be an object."),
}

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_LOCATION_PREFIXES = {"body", "path", "query", "header", "form"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def _render(template: str, context: Mapping[str, Any]) -> str:
    return _PLACEHOLDER.sub(lambda m: str(context.get(m.group(1), "")), template)


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict]:
    """Translate pydantic error dicts into client-facing field errors."""
    formatted = []
    for error in errors:
        field = _field_name(error.get("loc", ()))
        kind = error.get("type", "")
        code, template = ERROR_MAP.get(kind, _DEFAULT)
        if field == "password":
            code = ErrorCode.PASSWORD_TOO_SHORT
        formatted.append({
            "field": field,
            "type": kind,
            "errorCode": int(code),
            "message": _render(template, error.get("ctx") or {}),
        })
    return formatted


def field_error(field: str, kind: str, **context: Any) -> ValidationFailed:
    """Build a single-violation failure for checks made outside a schema."""
    return ValidationFailed(format_validation_errors([{"loc": (field,), "type": kind, "ctx": context}]))


def validate_payload(schema: Type[ModelT], data: Any) -> ModelT:
    """
    Validate raw input against a schema.

    Raises:
        ValidationFailed: listing every violated field
        AppException: 500 when schema evaluation itself blows up
    """
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(format_validation_errors(exc.errors()))
    except Exception as exc:
        logger.error(f"Schema {schema.__name__} failed to evaluate: {exc}", exc_info=True)
        raise AppException("Internal Server Issue.", 500, ErrorCode.SERVER_ERROR)


# Reusable field validators -------------------------------------------------

def email_address(value: str) -> str:
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        raise PydanticCustomError("string_email", "Please enter a valid email address.")


def alphanumeric(value: str) -> str:
    if not value.isascii() or not value.isalnum():
        raise PydanticCustomError("string_alphanum", "Username can only contain letters and numbers.")
    return value


def exact_length(limit: int):
    def check(value: str) -> str:
        if len(value) != limit:
            raise PydanticCustomError(
                "string_length",
                "This field must be exactly {limit} characters.",
                {"limit": limit},
            )
        return value
    return check


def require_any_field(data: Any) -> Any:
    """Update payloads are sparse merges and must name at least one field."""
    if isinstance(data, dict) and not data:
        raise PydanticCustomError("at_least_one_field", "At least one field is required for update.")
    return data


def not_null(value: Any) -> Any:
    """Before-validator for fields that may be omitted but never sent as null."""
    if value is None:
        raise PydanticCustomError("not_null", "This field must not be null.")
    return value
