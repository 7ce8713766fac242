"""
Identity validation - pure checks for registration fields.

Validators never raise for bad input. Each returns a FieldError (or
None when the value is acceptable) so callers can collect every
problem in a form before reporting back.

National ID checksum
====================

The 11-digit tax identifier ends in two check digits computed from a
weighted modulo-11 sum:

    d1 = 11 - (sum(digit[i] * (10 - i) for i in 0..8) % 11)
    d2 = 11 - (sum(digit[i] * (11 - i) for i in 0..9) % 11)

Either digit is clamped to 0 when the result exceeds 9. Sequences of a
single repeated digit satisfy the arithmetic but are known-invalid.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .models import RegistrationData

PHONE_PATTERN = re.compile(r"\(\d{2}\) \d{4,5}-\d{4}", re.ASCII)
_FORMATTED_NATIONAL_ID = re.compile(r"\d{3}\.\d{3}\.\d{3}-\d{2}", re.ASCII)
_RAW_NATIONAL_ID = re.compile(r"\d{11}", re.ASCII)

BASIC_PASSWORD_MIN_LENGTH = 6
STRONG_PASSWORD_MIN_LENGTH = 8


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def normalize_national_id(value: str) -> str:
    """Strip the 000.000.000-00 punctuation, leaving other input untouched."""
    value = value.strip()
    if _FORMATTED_NATIONAL_ID.fullmatch(value):
        return value.replace(".", "").replace("-", "")
    return value


def national_id_check_digits(first_nine: str) -> tuple[int, int]:
    """Compute the two check digits for the first nine digits of a national ID."""
    digits = [int(ch) for ch in first_nine]
    if len(digits) != 9:
        raise ValueError("exactly nine digits are required")

    d1 = 11 - sum(d * (10 - i) for i, d in enumerate(digits)) % 11
    if d1 > 9:
        d1 = 0

    digits.append(d1)
    d2 = 11 - sum(d * (11 - i) for i, d in enumerate(digits)) % 11
    if d2 > 9:
        d2 = 0

    return d1, d2


def validate_national_id(value: str) -> FieldError | None:
    digits = normalize_national_id(value)
    if not _RAW_NATIONAL_ID.fullmatch(digits):
        return FieldError("national_id", "must contain exactly 11 digits")
    if len(set(digits)) == 1:
        return FieldError("national_id", "invalid national ID")
    if national_id_check_digits(digits[:9]) != (int(digits[9]), int(digits[10])):
        return FieldError("national_id", "invalid national ID")
    return None


def validate_email_address(value: str) -> FieldError | None:
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return FieldError("email", "invalid email address")
    return None


def validate_phone(value: str) -> FieldError | None:
    if not PHONE_PATTERN.fullmatch(value.strip()):
        return FieldError("phone", "must match (00) 00000-0000")
    return None


def validate_password(value: str, *, strong: bool = False) -> FieldError | None:
    """
    Check password strength.

    Basic mode only requires 6 characters. Strong mode requires 8
    characters with at least one lowercase letter, one uppercase letter
    and one digit.
    """
    if not strong:
        if len(value) < BASIC_PASSWORD_MIN_LENGTH:
            return FieldError(
                "password", f"must be at least {BASIC_PASSWORD_MIN_LENGTH} characters"
            )
        return None

    if len(value) < STRONG_PASSWORD_MIN_LENGTH:
        return FieldError("password", f"must be at least {STRONG_PASSWORD_MIN_LENGTH} characters")
    if not (
        any(ch.islower() for ch in value)
        and any(ch.isupper() for ch in value)
        and any(ch.isdigit() for ch in value)
    ):
        return FieldError("password", "must contain a lowercase letter, an uppercase letter and a digit")
    return None


def validate_full_name(value: str) -> FieldError | None:
    if not all(ch.isalpha() or ch.isspace() for ch in value):
        return FieldError("full_name", "must contain only letters and spaces")
    if len(value.split()) < 2:
        return FieldError("full_name", "must include first and last name")
    return None


_VALIDATORS: dict[str, Callable[[str], FieldError | None]] = {
    "full_name": validate_full_name,
    "email": validate_email_address,
    "national_id": validate_national_id,
    "phone": validate_phone,
}


def validate(field: str, value: str | None, *, strong_password: bool = False) -> FieldError | None:
    """
    Validate a single registration field.

    Raises:
        KeyError: If ``field`` is not a known identity field
    """
    if field != "password" and field not in _VALIDATORS:
        raise KeyError(field)
    if value is None or not value.strip():
        return FieldError(field, "required")
    if field == "password":
        return validate_password(value, strong=strong_password)
    return _VALIDATORS[field](value)


def validate_registration(data: RegistrationData, *, strong_password: bool = False) -> list[FieldError]:
    """Validate every identity field, returning all errors found."""
    errors = []
    for field in ("full_name", "email", "national_id", "phone", "password"):
        error = validate(field, getattr(data, field), strong_password=strong_password)
        if error is not None:
            errors.append(error)
    return errors
