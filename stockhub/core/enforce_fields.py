"""Field Enforcement — re-asserts the string invariants of names and descriptions.

Invariants:
    - All functions are PURE: they return the cleaned value or raise FieldValidationError
    - Names are stripped and must be non-blank, at most NAME_MAX_LENGTH chars
    - Descriptions are optional (None) and stripped when given

Design Decisions:
    - The HTTP schemas apply the same limits, but the services re-check them so the core
      holds its invariants for any caller
"""

from stockhub.core.domain_types import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH
from stockhub.core.errors import FieldValidationError


def clean_name(name: str | None) -> str:
    """Rule: name is required, non-blank, bounded."""
    if name is None or not name.strip():
        raise FieldValidationError("Name must not be blank", "name")
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise FieldValidationError(
            f"Name must be at most {NAME_MAX_LENGTH} characters", "name",
        )
    return name


def clean_description(description: str | None) -> str | None:
    """Rule: description is optional and bounded."""
    if description is None:
        return None
    description = description.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise FieldValidationError(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            "description",
        )
    return description
