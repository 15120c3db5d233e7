"""Tests for the confirmation model and canonical shapes."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from coins_oracle.confirmations import (
    DEFAULT_CONFIRMATION_THRESHOLD,
    by_depth,
    by_height,
    finalized,
)
from coins_oracle.models import ConfirmationInfo, Transaction, decimal_string


class TestConfirmationModel:
    """Tests for the threshold rule and the no-threshold family."""

    def test_default_threshold(self):
        assert DEFAULT_CONFIRMATION_THRESHOLD == 5

    def test_below_threshold(self):
        info = by_depth(4)

        assert info.threshold == 5
        assert info.observed_confirmations == 4
        assert info.confirmed is False

    def test_at_threshold(self):
        info = by_depth(5)

        assert info.confirmed is True
        assert info.observed_confirmations == 5

    def test_custom_threshold(self):
        assert by_depth(11, threshold=12).confirmed is False
        assert by_depth(12, threshold=12).confirmed is True

    def test_by_height(self):
        """Confirmations are head height minus transaction height."""
        assert by_height(100, 96).observed_confirmations == 4
        assert by_height(100, 95).confirmed is True

    def test_by_height_pending(self):
        """A transaction outside any block has zero confirmations."""
        info = by_height(100, None)

        assert info.observed_confirmations == 0
        assert info.confirmed is False

    def test_by_height_never_negative(self):
        """A lagging head does not produce negative counts."""
        assert by_height(90, 96).observed_confirmations == 0

    def test_finalized(self):
        """No-threshold ledgers are confirmed with both counters absent."""
        info = finalized()

        assert info.confirmed is True
        assert info.threshold is None
        assert info.observed_confirmations is None
        assert info.to_dict() == {"confirmed": True}

    def test_zero_confirmations_kept_distinct_from_absent(self):
        assert by_depth(0).to_dict() == {"threshold": 5, "confirmed": False, "value": 0}

    def test_inconsistent_confirmation_rejected(self):
        with pytest.raises(ValidationError):
            ConfirmationInfo(threshold=5, confirmed=True, observed_confirmations=2)

    def test_threshold_without_observed_rejected(self):
        with pytest.raises(ValidationError):
            ConfirmationInfo(threshold=5, confirmed=False)


class TestCanonicalShapes:
    """Tests for wire names of the canonical models."""

    def test_transaction_wire_names(self):
        tx = Transaction(
            id="abc",
            from_address="alice",
            to_address="bob",
            value="1.25",
            confirmation=by_depth(6),
        )

        assert tx.to_dict() == {
            "id": "abc",
            "from": "alice",
            "to": "bob",
            "value": "1.25",
            "confirmations": {"threshold": 5, "confirmed": True, "value": 6},
        }

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("0"), "0"),
            (Decimal("0E-8"), "0"),
            (Decimal("0.75000000"), "0.75"),
            (Decimal("12"), "12"),
            (Decimal("1E+3"), "1000"),
            (Decimal("0.00000001"), "0.00000001"),
        ],
    )
    def test_decimal_string(self, value, expected):
        assert decimal_string(value) == expected
