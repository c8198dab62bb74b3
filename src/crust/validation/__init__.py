"""Input validation: field rules, results and the chain handler.

Usage::

    from crust.validation import Field, validation

    SIGN_UP = {
        "email": Field(required=True, type="string", match=EMAIL_PATTERN),
        "password": Field(required=True, min=6, max=10),
    }

    app.post("/sign-up", validation(SIGN_UP), sign_up)

The handler stores the messages in ``request.errors`` and always
advances; the terminal handler decides how to answer them.
"""

from collections.abc import Mapping
from typing import Any

from crust._internal.types import ChainHandler
from crust.validation.result import ValidationResult
from crust.validation.rules import Field, check

__all__ = [
    "Field",
    "ValidationResult",
    "check",
    "validate",
    "validation",
]

Rules = Mapping[str, Field]


def validate(data: Any, rules: Rules) -> ValidationResult:
    """Validate *data* against *rules*.

    Args:
        data: The decoded body or the query, as a mapping. Anything that
            is not a mapping is validated as if it were empty.
        rules: Field name to ``Field``.

    Returns:
        A ``ValidationResult`` whose ``.errors`` holds one message per
        failing field, in rule order.
    """
    values: Mapping[str, Any] = data if isinstance(data, Mapping) else {}
    errors = [
        message
        for name, field in rules.items()
        if (message := check(name, field, values)) is not None
    ]
    return ValidationResult(errors=errors)


def validation(rules: Rules) -> ChainHandler:
    """Chain handler that validates the request input.

    Validates ``request.data``: the body for POST/PUT/PATCH, the query otherwise.
    """

    def validate_request(request: Any, response: Any, next: Any) -> Any:
        request.errors = validate(request.data, rules).errors
        return next()

    return validate_request
