"""
Typed exception hierarchy for the bank file engine.

Record-level problems (bad payee name, checksum failure, amount out of
range, batch over the bank limit) are NOT exceptions: they are collected in
``ValidationResult`` and ``BatchValidationSummary`` so the caller always
receives a complete report.  Exceptions are reserved for precondition
violations by the caller and for a broken registry dataset.

    BankFileError (base)
    |
    +-- ConfigurationError
    |   +-- UnknownBankError
    |   +-- RegistryConfigError
    |
    +-- BatchError
        +-- BatchRejectedError

Category        | Code                      | When Raised
----------------|---------------------------|---------------------------------------
Configuration   | UNKNOWN_BANK              | Export requested for an unregistered bank
                | REGISTRY_CONFIG_INVALID   | Registry dataset fails structural checks
----------------|---------------------------|---------------------------------------
Batch           | BATCH_REJECTED            | Export requested for a batch with errors

Every class carries a ``code`` class attribute and stores its context as
attributes, so handlers catch by type and read structured data instead of
parsing messages.
"""


class BankFileError(Exception):
    """Base exception for all bank file engine errors."""

    code: str = "BANKFILE_ERROR"


# Configuration exceptions


class ConfigurationError(BankFileError):
    """Base exception for registry/configuration problems."""

    code: str = "CONFIGURATION_ERROR"


class UnknownBankError(ConfigurationError):
    """The requested bank code is not present in the registry."""

    code: str = "UNKNOWN_BANK"

    def __init__(self, bank_code: str):
        self.bank_code = bank_code
        super().__init__(f"Unknown bank code: {bank_code}")


class RegistryConfigError(ConfigurationError):
    """The bank registry dataset failed structural validation."""

    code: str = "REGISTRY_CONFIG_INVALID"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = list(errors)
        super().__init__(
            f"Bank registry {source} is invalid: {len(self.errors)} error(s)"
            + (f"; first: {self.errors[0]}" if self.errors else "")
        )


# Batch exceptions


class BatchError(BankFileError):
    """Base exception for batch-level precondition failures."""

    code: str = "BATCH_ERROR"


class BatchRejectedError(BatchError):
    """
    Export was requested for a batch whose validation reported hard errors.

    The full ``BatchValidationSummary`` is attached so the caller can show
    every problem without re-running validation.
    """

    code: str = "BATCH_REJECTED"

    def __init__(self, bank_code: str, error_count: int, summary=None):
        self.bank_code = bank_code
        self.error_count = error_count
        self.summary = summary
        super().__init__(
            f"Batch for {bank_code} cannot be exported: {error_count} error(s)"
        )
