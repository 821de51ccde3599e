"""
BankRegistry -- read-only catalogue of supported banks.

Responsibility:
    Look up ``BankDefinition`` instances by code (or alias) and by the
    2-digit identifier prefix embedded in a Saudi IBAN.

Architecture position:
    Config layer.  Built once by ``bankfile_config.loader`` and shared
    read-only by every engine and service; safe to use from many threads
    without locking.

Failure modes:
    - ``get_by_code`` / ``get_by_identifier_prefix`` return None on a miss.
      A miss is not an error: payment data may name legacy banks that are
      not in the catalogue.
    - ``require`` raises ``UnknownBankError`` for callers that cannot
      proceed without a bank (the exporter).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from zoneinfo import ZoneInfo

from bankfile_kernel.domain.banking import DEFAULT_LIMITS, BankDefinition, RuleLimits
from bankfile_kernel.exceptions import UnknownBankError


def normalize_bank_code(code: str | None) -> str:
    """Canonical lookup key for a bank code or alias."""
    return (code or "").strip().upper()


class BankRegistry:
    """
    Immutable bank catalogue.

    Contract:
        ``list_all()`` preserves the order of the source dataset.
    Guarantees:
        - Codes and aliases resolve case-insensitively to one bank.
        - Prefix lookup is exact (``"05"`` and ``"5"`` are different keys).
    """

    def __init__(
        self,
        banks: Iterable[BankDefinition],
        *,
        version: str = "",
        checksum: str = "",
        timezone: str = "Asia/Riyadh",
        currency: str = "SAR",
        limits: RuleLimits = DEFAULT_LIMITS,
        source: str = "<memory>",
    ) -> None:
        self._banks: tuple[BankDefinition, ...] = tuple(banks)
        by_code: dict[str, BankDefinition] = {}
        by_prefix: dict[str, BankDefinition] = {}
        for bank in self._banks:
            for name in (bank.code, *bank.aliases):
                key = normalize_bank_code(name)
                if key in by_code:
                    raise ValueError(f"Duplicate bank code or alias: {name}")
                by_code[key] = bank
            if bank.identifier_prefix in by_prefix:
                raise ValueError(
                    f"Duplicate identifier prefix: {bank.identifier_prefix}"
                )
            by_prefix[bank.identifier_prefix] = bank

        self._by_code = MappingProxyType(by_code)
        self._by_prefix = MappingProxyType(by_prefix)
        self.version = version
        self.checksum = checksum
        self.timezone = timezone
        self.currency = currency
        self.limits = limits
        self.source = source

    def get_by_code(self, code: str | None) -> BankDefinition | None:
        """Return the bank for a code or alias, or None."""
        return self._by_code.get(normalize_bank_code(code))

    def get_by_identifier_prefix(self, prefix: str | None) -> BankDefinition | None:
        """Return the bank whose IBAN bank code is ``prefix``, or None."""
        if prefix is None:
            return None
        return self._by_prefix.get(prefix.strip())

    def require(self, code: str | None) -> BankDefinition:
        """Return the bank for ``code`` or raise ``UnknownBankError``."""
        bank = self.get_by_code(code)
        if bank is None:
            raise UnknownBankError(code or "")
        return bank

    def list_all(self) -> tuple[BankDefinition, ...]:
        return self._banks

    def list_bulk_capable(self) -> tuple[BankDefinition, ...]:
        return tuple(b for b in self._banks if b.supports_bulk)

    @property
    def zone(self) -> ZoneInfo:
        """Time zone in which cutoff times are expressed."""
        return ZoneInfo(self.timezone)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.get_by_code(code) is not None

    def __iter__(self) -> Iterator[BankDefinition]:
        return iter(self._banks)

    def __len__(self) -> int:
        return len(self._banks)

    def __repr__(self) -> str:
        return (
            f"BankRegistry(banks={len(self._banks)}, version={self.version!r}, "
            f"checksum={self.checksum[:12]!r})"
        )
