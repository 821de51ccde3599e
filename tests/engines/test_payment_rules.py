"""
Tests for the payment rule validator.

Tests cover:
- validate_payment: payee name, amount range, identifier, bank assignment,
  national ID, project, suggestions and field flags
- validate_batch: empty batch, bulk ceiling, mixed banks, unknown bank,
  aggregates, determinism
"""

from decimal import Decimal

import pytest

from bankfile_config import build_registry
from bankfile_engines.payment_rules import validate_batch, validate_payment
from bankfile_kernel.domain import RuleLimits
from tests.factories import (
    VALID_RAJHI_IBAN,
    VALID_RESIDENT_ID,
    make_batch,
    make_iban,
    make_payment,
    registry_document,
)


# =========================================================================
# Single record
# =========================================================================


class TestValidatePaymentBaseline:

    def test_fully_populated_record_is_clean(self, registry):
        result = validate_payment(make_payment(id="p1"), "ALRAJHI", registry)
        assert result.payment_id == "p1"
        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()
        assert result.suggestions == ()
        assert all(result.field_status.values())

    def test_alias_target_matches_canonical_record_bank(self, registry):
        payment = make_payment(bank_code="rajhi")
        assert validate_payment(payment, "ALRAJHI", registry).is_valid


class TestPayeeName:

    @pytest.mark.parametrize("name", [None, "", " ", "A", "  B  "])
    def test_too_short(self, registry, name):
        result = validate_payment(make_payment(payee_name=name), "ALRAJHI", registry)
        assert not result.is_valid
        assert result.errors == (
            "Payee name is required and must be at least 2 characters",
        )
        assert result.field_status["payee_name"] is False

    def test_two_characters_accepted(self, registry):
        assert validate_payment(make_payment(payee_name="Al"), "ALRAJHI", registry).is_valid

    def test_too_long(self, registry):
        result = validate_payment(make_payment(payee_name="x" * 101), "ALRAJHI", registry)
        assert result.errors == ("Payee name cannot exceed 100 characters",)

    def test_exactly_max_length_accepted(self, registry):
        result = validate_payment(make_payment(payee_name="x" * 100), "ALRAJHI", registry)
        assert result.is_valid


class TestAmount:

    @pytest.mark.parametrize(
        "amount",
        [
            None,
            Decimal("0"),
            Decimal("-0.01"),
            Decimal("-100"),
            Decimal("NaN"),
            float("nan"),
            Decimal("Infinity"),
            Decimal("-Infinity"),
        ],
    )
    def test_not_positive(self, registry, amount):
        result = validate_payment(make_payment(amount=amount), "ALRAJHI", registry)
        assert result.errors == ("Payment amount must be greater than 0",)
        assert result.field_status["amount"] is False

    def test_above_maximum(self, registry):
        result = validate_payment(
            make_payment(amount=Decimal("1000000000.00")), "ALRAJHI", registry
        )
        assert result.errors == (
            "Payment amount exceeds maximum limit of 999,999,999.99",
        )

    def test_maximum_accepted(self, registry):
        result = validate_payment(
            make_payment(amount=Decimal("999999999.99")), "ALRAJHI", registry
        )
        assert result.is_valid

    def test_high_value_boundary(self, registry):
        at = validate_payment(make_payment(amount=Decimal("50000.00")), "ALRAJHI", registry)
        above = validate_payment(make_payment(amount=Decimal("50000.01")), "ALRAJHI", registry)
        warning = "High-value payment may require additional verification"
        assert warning not in at.warnings
        assert warning in above.warnings
        assert at.is_valid and above.is_valid

    def test_small_amount_warning(self, registry):
        result = validate_payment(make_payment(amount=Decimal("0.50")), "ALRAJHI", registry)
        assert result.is_valid
        assert result.warnings == ("Very small payment amount",)

    def test_review_suggestion_above_ten_thousand(self, registry):
        result = validate_payment(make_payment(amount=Decimal("10000.01")), "ALRAJHI", registry)
        assert "Consider reviewing high-value payments" in result.suggestions
        result = validate_payment(make_payment(amount=Decimal("10000")), "ALRAJHI", registry)
        assert "Consider reviewing high-value payments" not in result.suggestions

    def test_custom_limits(self, registry):
        limits = RuleLimits(high_value_threshold=Decimal("100"))
        result = validate_payment(
            make_payment(amount=Decimal("150")), "ALRAJHI", registry, limits=limits
        )
        assert "High-value payment may require additional verification" in result.warnings


class TestIdentifier:

    def test_missing_identifier_is_not_an_error(self, registry):
        result = validate_payment(
            make_payment(structured_account_id=None), "ALRAJHI", registry
        )
        assert result.is_valid

    def test_bad_checksum_is_error(self, registry):
        tampered = VALID_RAJHI_IBAN[:-1] + "0"
        result = validate_payment(
            make_payment(structured_account_id=tampered), "ALRAJHI", registry
        )
        assert result.errors == ("Invalid IBAN checksum",)
        assert result.field_status["identifier"] is False

    def test_malformed_identifier_is_error(self, registry):
        result = validate_payment(
            make_payment(structured_account_id="SA123"), "ALRAJHI", registry
        )
        assert "Saudi IBAN must be 24 characters long (got 5)" in result.errors

    def test_unrecognized_bank_prefix_is_warning(self, registry):
        result = validate_payment(
            make_payment(structured_account_id=make_iban("99", "42")), "ALRAJHI", registry
        )
        assert result.is_valid
        assert result.warnings == ("Unrecognized bank code 99 in IBAN",)
        assert result.suggestions == ("Review warnings before processing",)

    def test_identifier_from_other_bank_is_accepted(self, registry):
        # Interbank transfer: an NCB account paid through an Al Rajhi file.
        result = validate_payment(
            make_payment(structured_account_id=make_iban("10", "42")), "ALRAJHI", registry
        )
        assert result.is_valid
        assert result.warnings == ()


class TestBankAssignment:

    def test_missing_bank_is_warning_with_suggestion(self, registry):
        result = validate_payment(make_payment(bank_code=None), "ALRAJHI", registry)
        assert result.is_valid
        assert result.warnings == ("Bank information not specified",)
        assert result.suggestions == (
            "Assign bank details before processing",
            "Review warnings before processing",
        )

    def test_different_bank_is_error(self, registry):
        result = validate_payment(make_payment(bank_code="NCB"), "ALRAJHI", registry)
        assert result.errors == (
            "Payment assigned to a different bank (National Commercial Bank)",
        )
        assert result.field_status["bank_details"] is False

    def test_unknown_record_bank_is_error(self, registry):
        result = validate_payment(make_payment(bank_code="OLDBANK"), "ALRAJHI", registry)
        assert result.errors == ("Payment assigned to a different bank (OLDBANK)",)


class TestOptionalMetadata:

    def test_missing_project_is_warning(self, registry):
        result = validate_payment(make_payment(project_reference=""), "ALRAJHI", registry)
        assert result.is_valid
        assert result.warnings == ("No project assigned",)

    def test_resident_id_accepted(self, registry):
        result = validate_payment(
            make_payment(national_or_residency_id=VALID_RESIDENT_ID), "ALRAJHI", registry
        )
        assert result.warnings == ()

    def test_bad_national_id_is_warning_only(self, registry):
        result = validate_payment(
            make_payment(national_or_residency_id="1000000009"), "ALRAJHI", registry
        )
        assert result.is_valid
        assert result.warnings == ("Invalid National ID checksum",)
        assert result.field_status["national_id"] is False

    def test_all_problems_collected_together(self, registry):
        payment = make_payment(
            payee_name="",
            amount=Decimal("0"),
            bank_code="NCB",
            structured_account_id="XX",
            project_reference=None,
        )
        result = validate_payment(payment, "ALRAJHI", registry)
        assert len(result.errors) >= 4
        assert "No project assigned" in result.warnings
        assert "Review warnings before processing" not in result.suggestions


# =========================================================================
# Batch
# =========================================================================


@pytest.fixture
def small_registry():
    """One bank with a two-record ceiling."""
    return build_registry(registry_document(max_bulk_records=2))


class TestValidateBatch:

    def test_empty_batch(self, registry):
        summary = validate_batch(payments=[], bank_code="ALRAJHI", registry=registry)
        assert summary.errors == ("No payments selected",)
        assert summary.results == ()
        assert not summary.can_export

    def test_valid_batch(self, registry):
        payments = make_batch(3)
        summary = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert summary.is_valid
        assert summary.bank_code == "ALRAJHI"
        assert summary.bank_name == "Al Rajhi Bank"
        assert summary.total_count == 3
        assert summary.valid_count == 3
        assert summary.total_amount == Decimal("4500.00")
        assert [r.payment_id for r in summary.results] == [p.id for p in payments]

    def test_bulk_ceiling_blocks_otherwise_valid_batch(self, small_registry):
        payments = make_batch(3, bank_code="TESTBANK")
        summary = validate_batch(
            payments=payments, bank_code="TESTBANK", registry=small_registry
        )
        assert all(r.is_valid for r in summary.results)
        assert summary.errors == (
            "Batch of 3 payments exceeds Test Bank limit of 2 payments per batch",
        )
        assert not summary.can_export

    def test_bulk_ceiling_not_hit_at_limit(self, small_registry):
        payments = make_batch(2, bank_code="TESTBANK")
        summary = validate_batch(
            payments=payments, bank_code="TESTBANK", registry=small_registry
        )
        assert summary.can_export

    def test_non_bulk_bank_rejects_multiple_records(self):
        reg = build_registry(registry_document(supports_bulk=False, max_bulk_records=None))
        summary = validate_batch(
            payments=make_batch(2, bank_code="TESTBANK"), bank_code="TESTBANK", registry=reg
        )
        assert summary.errors == ("Test Bank does not accept bulk payment files",)

    def test_mixed_banks_is_batch_warning(self, registry):
        payments = [
            make_payment(bank_code="ALRAJHI"),
            make_payment(bank_code="RAJHI"),
            make_payment(bank_code="NCB"),
            make_payment(bank_code="SABB"),
            make_payment(bank_code=None),
        ]
        summary = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert summary.warnings == ("Batch contains payments for 3 different banks",)
        assert summary.invalid_count == 2

    def test_unknown_target_bank_is_batch_error(self, registry):
        summary = validate_batch(
            payments=make_batch(1), bank_code="NOPE", registry=registry
        )
        assert summary.errors == ("Unknown bank code: NOPE",)
        assert summary.bank_name is None
        assert not summary.can_export

    def test_total_ignores_non_positive_amounts(self, registry):
        payments = [
            make_payment(amount=Decimal("100")),
            make_payment(amount=Decimal("-5")),
            make_payment(amount=None),
        ]
        summary = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert summary.total_amount == Decimal("100")

    def test_non_finite_amount_reported_not_raised(self, registry):
        payments = [
            make_payment(id="1", amount=Decimal("NaN")),
            make_payment(id="2", amount=Decimal("250")),
        ]
        summary = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert summary.total_count == 2
        assert summary.invalid_count == 1
        assert summary.result_for("1").errors == ("Payment amount must be greater than 0",)
        assert summary.total_amount == Decimal("250")

    def test_common_errors_counted(self, registry):
        payments = [make_payment(amount=Decimal("0")) for _ in range(3)] + [
            make_payment(payee_name="")
        ]
        summary = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert summary.common_errors()[0] == ("Payment amount must be greater than 0", 3)
        assert summary.hard_error_count == 4

    def test_batch_errors_leave_record_results_untouched(self, small_registry):
        payments = make_batch(3, bank_code="TESTBANK")
        summary = validate_batch(
            payments=payments, bank_code="TESTBANK", registry=small_registry
        )
        assert all(r.errors == () for r in summary.results)

    def test_referentially_transparent(self, registry):
        payments = make_batch(4) + [make_payment(id="bad", amount=Decimal("0"))]
        first = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        second = validate_batch(payments=payments, bank_code="ALRAJHI", registry=registry)
        assert first == second
        assert first.to_dict() == second.to_dict()
