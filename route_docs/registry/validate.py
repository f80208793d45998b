from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, cast

from openapi_spec_validator import validate
from openapi_spec_validator.validation.exceptions import OpenAPIValidationError

from .document import Document


def validate_document(document: Document | dict[str, Any]) -> tuple[bool, str | None]:
    raw = document.to_dict() if isinstance(document, Document) else document
    try:
        validate(cast(Mapping[Hashable, Any], raw))
    except OpenAPIValidationError as exc:
        return False, _validation_error_message(exc)
    return True, None


def _validation_error_message(error: Exception) -> str:
    message = str(error).strip()
    return message if message else error.__class__.__name__
