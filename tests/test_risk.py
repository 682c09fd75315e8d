"""
Tests for RPN scoring.
"""

import itertools

import pytest

from reliatrack.services.risk import (
    HIGH_RISK_RPN,
    RPNMismatchError,
    compute_rpn,
    is_high_risk,
    verify_rpn,
)


class TestComputeRPN:
    """Tests for compute_rpn."""

    def test_product_of_ratings(self):
        assert compute_rpn(5, 4, 3) == 60

    def test_every_triple_in_range(self):
        """All 1000 triples give the product, bounded by 1 and 1000."""
        for s, o, d in itertools.product(range(1, 11), repeat=3):
            rpn = compute_rpn(s, o, d)
            assert rpn == s * o * d
            assert 1 <= rpn <= 1000

    @pytest.mark.parametrize("ratings", [(0, 5, 5), (5, 11, 5), (5, 5, -1)])
    def test_out_of_range_rejected(self, ratings):
        with pytest.raises(ValueError):
            compute_rpn(*ratings)

    @pytest.mark.parametrize("ratings", [(5.0, 5, 5), ("5", 5, 5), (True, 5, 5)])
    def test_non_integer_rejected(self, ratings):
        with pytest.raises(ValueError):
            compute_rpn(*ratings)


class TestVerifyRPN:
    """Tests for verify_rpn."""

    def test_matching_value_accepted(self):
        assert verify_rpn(8, 5, 5, 200) == 200

    def test_missing_value_computed(self):
        assert verify_rpn(2, 3, 4) == 24

    def test_mismatch_raises(self):
        with pytest.raises(RPNMismatchError):
            verify_rpn(2, 3, 4, 25)

    def test_mismatch_is_value_error(self):
        assert issubclass(RPNMismatchError, ValueError)


class TestHighRisk:
    def test_threshold(self):
        assert HIGH_RISK_RPN == 200
        assert is_high_risk(200)
        assert not is_high_risk(199)
