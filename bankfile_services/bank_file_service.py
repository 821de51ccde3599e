"""
BankFileService -- validate-then-export orchestration for bank payment files.

Composes the Payment Rule Validator, Schedule Calculator and Batch Exporter
(pure engines) with clock injection and log-context binding.

Architecture: bankfile_services -- imperative shell.
    The service owns "now" (from the injected ``Clock``) and the export
    gate: a batch whose validation summary carries any hard error is
    refused with ``BatchRejectedError`` before the exporter runs.

Invariants enforced:
    - Export always re-runs validation on exactly the records being
      exported; a stale summary from an earlier call is never trusted.
    - Log records carry counts and totals only; identifiers are masked.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import uuid4

from bankfile_config import BankRegistry, get_bank_registry
from bankfile_engines.exporter import export_batch
from bankfile_engines.identifier import mask_identifier
from bankfile_engines.payment_rules import validate_batch
from bankfile_engines.schedule import evaluate_schedule
from bankfile_engines.writers import render_csv, render_xlsx
from bankfile_kernel.domain.banking import BankDefinition
from bankfile_kernel.domain.clock import Clock, SystemClock
from bankfile_kernel.domain.payments import (
    BatchValidationSummary,
    ExportDocument,
    PaymentRecord,
    ScheduleStatus,
)
from bankfile_kernel.exceptions import BatchRejectedError
from bankfile_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.bank_file")


@dataclass(frozen=True)
class BankFileExport:
    """Result of a successful export: the document plus the gate that passed it."""

    document: ExportDocument
    summary: BatchValidationSummary

    @property
    def file_name(self) -> str:
        return self.document.file_name

    def to_xlsx(self, *, include_summary: bool = True) -> bytes:
        return render_xlsx(self.document, include_summary=include_summary)

    def to_csv(self, *, include_total: bool = False) -> str:
        return render_csv(self.document, include_total=include_total)


class BankFileService:
    """Service that validates payment batches and builds bank files.

    Contract:
        - ``validate()`` never raises for bad records; it returns a
          complete ``BatchValidationSummary``.
        - ``export()`` raises ``UnknownBankError`` for an unregistered bank
          and ``BatchRejectedError`` when validation reports hard errors.

    Non-goals:
        - Does NOT persist payments or generated files.
        - Does NOT deliver files to a bank.
    """

    def __init__(
        self,
        registry: BankRegistry | None = None,
        clock: Clock | None = None,
        actor_id: str | None = None,
    ) -> None:
        self._registry = registry or get_bank_registry()
        self._clock = clock or SystemClock()
        self._actor_id = actor_id

    @property
    def registry(self) -> BankRegistry:
        return self._registry

    def list_banks(self, *, bulk_only: bool = False) -> tuple[BankDefinition, ...]:
        """Registered banks in dataset order."""
        if bulk_only:
            return self._registry.list_bulk_capable()
        return self._registry.list_all()

    def schedule_for(self, bank_code: str) -> ScheduleStatus:
        """Working-day and cutoff status of ``bank_code`` at the clock's now.

        Raises:
            UnknownBankError: if the bank is not registered.
        """
        bank = self._registry.require(bank_code)
        return evaluate_schedule(bank, now=self._clock.now(), zone=self._registry.zone)

    def validate(
        self,
        bank_code: str,
        payments: Sequence[PaymentRecord],
    ) -> BatchValidationSummary:
        """Validate ``payments`` for submission to ``bank_code``."""
        with LogContext.bind(bank_code=bank_code, actor_id=self._actor_id):
            summary = validate_batch(
                payments=payments, bank_code=bank_code, registry=self._registry
            )
            self._log_rejected_identifiers(payments, summary)
            return summary

    def export(
        self,
        bank_code: str,
        payments: Sequence[PaymentRecord],
        comment: str | None = None,
        batch_number: str | None = None,
    ) -> BankFileExport:
        """Validate, gate and export a batch.

        Args:
            bank_code: Target bank code or alias.
            payments: Records to include, in output order.
            comment: Optional batch comment used as the description column.
            batch_number: Caller-supplied batch token; generated from the
                clock when omitted.

        Raises:
            UnknownBankError: if the bank is not registered.
            BatchRejectedError: if validation reports any hard error.
        """
        bank = self._registry.require(bank_code)
        with LogContext.bind(
            correlation_id=str(uuid4()),
            batch_id=batch_number,
            bank_code=bank.code,
            actor_id=self._actor_id,
        ):
            summary = self.validate(bank.code, payments)
            if not summary.can_export:
                logger.warning(
                    "bank_file_export_rejected",
                    extra={
                        "payment_count": len(payments),
                        "invalid_count": summary.invalid_count,
                        "batch_errors": list(summary.errors),
                        "error_count": summary.hard_error_count,
                    },
                )
                raise BatchRejectedError(bank.code, summary.hard_error_count, summary)

            document = export_batch(
                bank_code=bank.code,
                payments=payments,
                registry=self._registry,
                now=self._clock.now(),
                comment=comment,
                batch_number=batch_number,
            )
            logger.info(
                "bank_file_export_completed",
                extra={
                    "file_name": document.file_name,
                    "record_count": document.record_count,
                    "total_amount": str(document.total_amount),
                    "warning_count": summary.warning_count,
                    "processing_date": document.processing_date,
                },
            )
            return BankFileExport(document=document, summary=summary)

    def _log_rejected_identifiers(
        self,
        payments: Sequence[PaymentRecord],
        summary: BatchValidationSummary,
    ) -> None:
        for payment, result in zip(payments, summary.results):
            if not result.field_status.get("identifier", True):
                logger.debug(
                    "payment_identifier_rejected",
                    extra={
                        "payment_id": payment.id,
                        "identifier": mask_identifier(payment.structured_account_id),
                    },
                )
