"""
Module: bankfile_engines.national_id
Responsibility:
    Check a Saudi national ID (citizens, leading 1) or Iqama number
    (residents, leading 2): exactly 10 digits with a Luhn-style check digit.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - None raised; problems are returned in ``NationalIdValidation.errors``.
"""

from __future__ import annotations

from bankfile_kernel.domain.payments import NationalIdValidation

NATIONAL_ID_LENGTH = 10

_ID_TYPES = {"1": "CITIZEN", "2": "RESIDENT"}


def national_id_check_digit(first_nine: str) -> int:
    """
    Check digit over the first nine digits.

    Digits at even (0-based) positions are doubled and reduced to a single
    digit; the check digit brings the sum up to a multiple of ten.
    """
    total = 0
    for i, char in enumerate(first_nine):
        digit = int(char)
        if i % 2 == 0:
            digit *= 2
            if digit > 9:
                digit = digit % 10 + digit // 10
        total += digit
    return (10 - total % 10) % 10


def validate_national_id(value: str | None) -> NationalIdValidation:
    """Validate a national/residency ID; non-digit characters are ignored."""
    normalized = "".join(c for c in (value or "") if c.isascii() and c.isdigit())

    if len(normalized) != NATIONAL_ID_LENGTH:
        return NationalIdValidation(
            normalized=normalized,
            errors=(f"National ID/Iqama must be {NATIONAL_ID_LENGTH} digits",),
        )

    id_type = _ID_TYPES.get(normalized[0])
    if id_type is None:
        return NationalIdValidation(
            normalized=normalized,
            errors=("National ID must start with 1 (Saudi) or 2 (Resident)",),
        )

    if national_id_check_digit(normalized[:9]) != int(normalized[9]):
        return NationalIdValidation(
            normalized=normalized,
            errors=("Invalid National ID checksum",),
            id_type=id_type,
        )

    return NationalIdValidation(normalized=normalized, id_type=id_type)
