"""
Form validation shared by the preview and send paths.

Every validator returns a ValidationResult instead of raising, so routers
can turn the first failure into a 400 with a user-facing message.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None


_VALID = ValidationResult(valid=True)

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# UK postcode in canonical "OUTWARD INWARD" form, plus the GIR 0AA special case
_POSTCODE_PATTERN = re.compile(
    r"^(?:(?:[A-PR-UWYZ][0-9]{1,2}"
    r"|[A-PR-UWYZ][A-HK-Y][0-9]{1,2}"
    r"|[A-PR-UWYZ][0-9][A-HJKSTUW]"
    r"|[A-PR-UWYZ][A-HK-Y][0-9][ABEHMNPRV-Y])"
    r" [0-9][ABD-HJLNP-UW-Z]{2}"
    r"|GIR 0AA)$",
    re.IGNORECASE,
)


def validate_name(name: Any) -> ValidationResult:
    """Non-empty, at least 2 characters, and containing at least one letter."""
    if not name or not isinstance(name, str) or not name.strip():
        return ValidationResult(False, "Please enter your name")

    trimmed = name.strip()
    if len(trimmed) < 2:
        return ValidationResult(False, "Name must be at least 2 characters")
    if not re.search(r"[a-zA-Z]", trimmed):
        return ValidationResult(False, "Name must contain letters")
    return _VALID


def validate_email(email: Any) -> ValidationResult:
    if not email or not isinstance(email, str) or not email.strip():
        return ValidationResult(False, "Please enter your email address")
    if not _EMAIL_PATTERN.match(email.strip()):
        return ValidationResult(False, "Please enter a valid email address")
    return _VALID


def normalize_postcode(postcode: str) -> str:
    """Uppercase with all whitespace removed: " sw1a 1aa " -> "SW1A1AA"."""
    return re.sub(r"\s+", "", postcode.upper())


def format_postcode(postcode: str) -> str:
    """Canonical spacing, one space before the last three characters: "SW1A1AA" -> "SW1A 1AA"."""
    normalized = normalize_postcode(postcode)
    if len(normalized) >= 5:
        return f"{normalized[:-3]} {normalized[-3:]}"
    return normalized


def validate_postcode(postcode: Any) -> ValidationResult:
    if not postcode or not isinstance(postcode, str) or not postcode.strip():
        return ValidationResult(False, "Please enter your postcode")

    trimmed = postcode.strip()
    if len(trimmed) < 5:
        return ValidationResult(False, "Postcode is too short")
    if not _POSTCODE_PATTERN.match(format_postcode(trimmed)):
        return ValidationResult(False, "Invalid UK postcode format")
    return _VALID


def validate_mp(mp: Any, require_email: bool = True) -> ValidationResult:
    """
    MP data must carry a name and a constituency. The email is required unless
    require_email is False (previews fall back to a parliament.uk address), but
    an email that is present must always be valid.
    """
    if not mp or not isinstance(mp, dict):
        return ValidationResult(False, "Invalid MP data")

    required = [
        ("name", "MP name is required"),
        ("constituency", "MP constituency is required"),
    ]
    if require_email:
        required.append(("email", "MP email is required"))

    for field, message in required:
        value = mp.get(field)
        if not value or not isinstance(value, str) or not value.strip():
            return ValidationResult(False, message)

    if mp.get("email") and not validate_email(mp["email"]).valid:
        return ValidationResult(False, "Invalid MP email address")
    return _VALID


def validate_submission(
    name: Any, email: Any, postcode: Any, mp: Any, require_mp_email: bool = True
) -> ValidationResult:
    """Validate a complete constituent submission, returning the first failure."""
    for result in (
        validate_name(name),
        validate_email(email),
        validate_postcode(postcode),
        validate_mp(mp, require_email=require_mp_email),
    ):
        if not result.valid:
            return result
    return _VALID
