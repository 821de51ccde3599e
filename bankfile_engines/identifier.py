"""
Module: bankfile_engines.identifier
Responsibility:
    Validate and decode Saudi structured account identifiers (IBAN):
    ``SA`` + 2 check digits + 2-digit bank code + 18 account digits,
    24 characters in total, verified with the ISO 7064 MOD-97 checksum.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consults the read-only
    ``BankRegistry`` to name the bank behind the embedded bank code.

Invariants enforced:
    - A malformed identifier (missing ``SA`` marker, wrong length, stray
      characters) is reported as ``IdentifierErrorKind.MALFORMED`` and the
      checksum is not evaluated, so one identifier never carries both
      categories.
    - The verdict is a pure function of the normalized 24 characters.
    - An unrecognized bank code is a warning, never an error.

Failure modes:
    - None raised for bad input; every problem is reported in the returned
      ``IdentifierValidation``.
    - ``mod97_remainder`` raises ValueError for characters outside A-Z/0-9.

Usage:
    from bankfile_engines.identifier import validate_identifier, format_identifier

    result = validate_identifier("SA03 8000 0000 6080 1016 7519", registry)
    result.is_valid             # True
    result.resolved_bank_code   # "ALRAJHI"
    format_identifier("SA0380000000608010167519")  # "SA03 8000 0000 6080 1016 7519"
"""

from __future__ import annotations

from bankfile_config.registry import BankRegistry
from bankfile_kernel.domain.payments import IdentifierErrorKind, IdentifierValidation

COUNTRY_CODE = "SA"
IDENTIFIER_LENGTH = 24
ACCOUNT_NUMBER_LENGTH = 18

_DIGITS = frozenset("0123456789")
_LETTERS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def normalize_identifier(value: str | None) -> str:
    """Strip all whitespace and uppercase."""
    if value is None:
        return ""
    return "".join(value.split()).upper()


def mod97_remainder(identifier: str) -> int:
    """
    ISO 7064 MOD 97-10 remainder of an IBAN-style identifier.

    The first four characters move to the end, letters become two-digit
    numbers (A=10 .. Z=35) and the resulting digit string is reduced
    digit by digit, so no arbitrary-precision integer is needed.

    Raises:
        ValueError: if a character is neither an ASCII digit nor A-Z.
    """
    rearranged = identifier[4:] + identifier[:4]
    remainder = 0
    for char in rearranged:
        if char in _DIGITS:
            digits = char
        elif char in _LETTERS:
            digits = str(ord(char) - ord("A") + 10)
        else:
            raise ValueError(f"Invalid identifier character {char!r}")
        for digit in digits:
            remainder = (remainder * 10 + int(digit)) % 97
    return remainder


def validate_identifier(value: str | None, registry: BankRegistry) -> IdentifierValidation:
    """
    Validate a Saudi IBAN and resolve the bank it belongs to.

    Args:
        value: Raw identifier as typed by a user; spaces are ignored.
        registry: Bank catalogue used to name the embedded bank code.

    Returns:
        IdentifierValidation with decoded parts on success.
    """
    normalized = normalize_identifier(value)

    malformed = _structure_errors(normalized)
    if malformed:
        return IdentifierValidation(
            normalized=normalized,
            errors=tuple(malformed),
            error_kind=IdentifierErrorKind.MALFORMED,
        )

    if mod97_remainder(normalized) != 1:
        return IdentifierValidation(
            normalized=normalized,
            errors=("Invalid IBAN checksum",),
            error_kind=IdentifierErrorKind.CHECKSUM,
        )

    check_digits = normalized[2:4]
    bank_prefix = normalized[4:6]
    account_number = normalized[6:]

    bank = registry.get_by_identifier_prefix(bank_prefix)
    warnings: tuple[str, ...] = ()
    if bank is None:
        warnings = (f"Unrecognized bank code {bank_prefix} in IBAN",)

    return IdentifierValidation(
        normalized=normalized,
        warnings=warnings,
        check_digits=check_digits,
        bank_prefix=bank_prefix,
        account_number=account_number,
        resolved_bank_code=bank.code if bank else None,
        resolved_bank_name=bank.display_name if bank else None,
    )


def _structure_errors(normalized: str) -> list[str]:
    if not normalized:
        return ["IBAN is required"]

    errors: list[str] = []
    if not normalized.startswith(COUNTRY_CODE):
        errors.append(f"IBAN must start with {COUNTRY_CODE} for Saudi Arabia")
    if len(normalized) != IDENTIFIER_LENGTH:
        errors.append(
            f"Saudi IBAN must be {IDENTIFIER_LENGTH} characters long "
            f"(got {len(normalized)})"
        )
    if not set(normalized[2:]) <= _DIGITS:
        errors.append(f"IBAN must contain only digits after the {COUNTRY_CODE} prefix")
    return errors


def format_identifier(value: str | None) -> str:
    """Group the normalized identifier into blocks of four for display."""
    normalized = normalize_identifier(value)
    return " ".join(normalized[i:i + 4] for i in range(0, len(normalized), 4))


def mask_identifier(value: str | None) -> str:
    """Hide all but the first and last four characters (for logs)."""
    normalized = normalize_identifier(value)
    if len(normalized) <= 8:
        return "*" * len(normalized)
    return normalized[:4] + "*" * (len(normalized) - 8) + normalized[-4:]


def placeholder_identifier(bank_prefix: str, account_digits: str = "") -> str:
    """
    Build an unverified 24-character identifier for preview screens.

    The check digits are the literal ``"00"`` rather than derived values,
    so the result is NOT a validated IBAN and must never be fed back as
    one.  Non-digit characters in ``account_digits`` are dropped and the
    remainder is left-padded (or cut from the left) to 18 digits.
    """
    digits = "".join(c for c in account_digits if c in _DIGITS)
    account = digits[-ACCOUNT_NUMBER_LENGTH:].rjust(ACCOUNT_NUMBER_LENGTH, "0")
    return f"{COUNTRY_CODE}00{bank_prefix}{account}"
