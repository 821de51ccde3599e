"""Tests for kernel domain value objects."""

from dataclasses import FrozenInstanceError
from datetime import datetime, time
from decimal import Decimal

import pytest

from bankfile_kernel.domain import (
    BankDefinition,
    BatchValidationSummary,
    ColumnDefinition,
    DeterministicClock,
    PaymentRecord,
    SystemClock,
    ValidationResult,
)


def _column(position, header="H"):
    return ColumnDefinition(position=position, field_name="amount", header=header)


def _bank(**overrides):
    values = dict(
        code="TB",
        display_name="Test Bank",
        identifier_prefix="80",
        supports_bulk=True,
        max_bulk_records=10,
        cutoff_time=time(14, 0),
        working_days=frozenset({"Sunday"}),
        export_schema=(_column(1),),
    )
    values.update(overrides)
    return BankDefinition(**values)


class TestPaymentRecord:

    def test_float_amount_coerced_through_str(self):
        record = PaymentRecord(id="1", payee_name="A", amount=0.1)
        assert record.amount == Decimal("0.1")

    def test_int_id_coerced(self):
        assert PaymentRecord(id=7, payee_name="A", amount=1).id == "7"

    def test_bad_amount_raises(self):
        with pytest.raises(ValueError):
            PaymentRecord(id="1", payee_name="A", amount="abc")

    def test_frozen(self):
        record = PaymentRecord(id="1", payee_name="A", amount=1)
        with pytest.raises(FrozenInstanceError):
            record.amount = Decimal("2")

    @pytest.mark.parametrize(
        "amount, expected",
        [(None, False), (0, False), (-1, False), (1, True), ("NaN", False), ("Infinity", False)],
    )
    def test_exportable_amount(self, amount, expected):
        assert PaymentRecord(id="1", payee_name="A", amount=amount).is_exportable_amount is expected


class TestBankDefinition:

    def test_schema_sorted(self):
        bank = _bank(export_schema=(_column(2, "B"), _column(1, "A")))
        assert bank.headers == ("A", "B")

    @pytest.mark.parametrize("prefix", ["8", "8A", "800"])
    def test_prefix_must_be_two_digits(self, prefix):
        with pytest.raises(ValueError):
            _bank(identifier_prefix=prefix)

    def test_positions_must_be_contiguous(self):
        with pytest.raises(ValueError):
            _bank(export_schema=(_column(1), _column(3)))

    def test_unknown_weekday(self):
        with pytest.raises(ValueError):
            _bank(working_days=frozenset({"Someday"}))

    def test_non_positive_limit(self):
        with pytest.raises(ValueError):
            _bank(max_bulk_records=0)

    def test_column_position_must_be_positive(self):
        with pytest.raises(ValueError):
            _column(0)


class TestValidationResult:

    def test_field_status_is_read_only(self):
        status = {"amount": True}
        result = ValidationResult(payment_id="1", field_status=status)
        with pytest.raises(TypeError):
            result.field_status["amount"] = False
        status["amount"] = False
        assert result.field_status["amount"] is True

    def test_equal_results_compare_equal(self):
        first = ValidationResult(payment_id="1", field_status={"amount": True})
        second = ValidationResult(payment_id="1", field_status={"amount": True})
        assert first == second


class TestBatchValidationSummary:

    def test_counts(self):
        summary = BatchValidationSummary(
            bank_code="TB",
            results=(
                ValidationResult(payment_id="1"),
                ValidationResult(payment_id="2", errors=("e",)),
                ValidationResult(payment_id="3", warnings=("w",)),
            ),
        )
        assert summary.total_count == 3
        assert summary.valid_count == 2
        assert summary.invalid_count == 1
        assert summary.warning_count == 1
        assert summary.result_for("2").errors == ("e",)
        assert summary.result_for("9") is None
        assert summary.common_warnings() == [("w", 1)]

    def test_batch_error_blocks_export(self):
        summary = BatchValidationSummary(
            bank_code="TB", results=(ValidationResult(payment_id="1"),), errors=("too many",)
        )
        assert not summary.can_export
        assert summary.to_dict()["errors"] == ["too many"]


class TestClocks:

    def test_deterministic_clock(self):
        clock = DeterministicClock(datetime(2024, 1, 8, 10, 0))
        assert clock.now() == clock.now()
        clock.advance(60)
        assert clock.now() == datetime(2024, 1, 8, 10, 1)
        clock.set_time(datetime(2024, 1, 9))
        assert clock.now() == datetime(2024, 1, 9)

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None
