"""Validation result: immutable container for error messages."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating input against a set of rules.

    The result is falsy when invalid, so you can write::

        result = validate(request.body, rules)
        if not result:
            return response.send({"errors": result.errors}, 422)

    ``errors`` lists the messages in rule order::

        ['The field "email" is required', 'The field "password" is invalid']
    """

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        """Falsy when invalid, enabling the ``if not result:`` pattern."""
        return self.is_valid
