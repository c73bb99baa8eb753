# tests/test_alert_evaluator.py

"""Tests for best-price selection and trigger evaluation."""

import unittest

from src.models.product import TrackedProduct
from src.services.alert_evaluator import (
    PriceObservation,
    best_observation,
    evaluate,
)


def _product(target: int = 5000, triggered: bool = False) -> TrackedProduct:
    return TrackedProduct(
        id="p1",
        name="Widget",
        target_price_cents=target,
        created_at="2026-01-01T00:00:00.000Z",
        triggered=triggered,
    )


def _obs(retailer: str, cents: int) -> PriceObservation:
    return PriceObservation(
        retailer=retailer, url=f"https://{retailer}.com/p", price_cents=cents,
    )


class TestBestObservation(unittest.TestCase):
    """Minimum price with first-encounter tie breaking."""

    def test_picks_minimum(self) -> None:
        best = best_observation([_obs("a", 300), _obs("b", 100), _obs("c", 200)])
        assert best is not None
        self.assertEqual(best.retailer, "b")

    def test_tie_goes_to_first(self) -> None:
        best = best_observation([_obs("a", 300), _obs("b", 100), _obs("c", 100)])
        assert best is not None
        self.assertEqual(best.retailer, "b")

    def test_empty(self) -> None:
        self.assertIsNone(best_observation([]))


class TestEvaluate(unittest.TestCase):
    """Trigger latch and savings/deficit reporting."""

    def test_no_observations_no_evaluation(self) -> None:
        """A pass where every retailer failed yields nothing."""
        self.assertIsNone(evaluate(_product(), []))

    def test_above_target_reports_deficit(self) -> None:
        result = evaluate(_product(5000), [_obs("amazon", 6000)])
        assert result is not None
        self.assertFalse(result.should_trigger)
        self.assertFalse(result.is_savings)
        self.assertEqual(result.best.price_cents, 6000)
        self.assertEqual(result.difference_cents, 1000)

    def test_below_target_triggers_with_savings(self) -> None:
        result = evaluate(_product(5000), [_obs("amazon", 4500)])
        assert result is not None
        self.assertTrue(result.should_trigger)
        self.assertTrue(result.is_savings)
        self.assertEqual(result.difference_cents, 500)

    def test_equal_to_target_triggers(self) -> None:
        """The alert condition is inclusive."""
        result = evaluate(_product(5000), [_obs("amazon", 5000)])
        assert result is not None
        self.assertTrue(result.should_trigger)
        self.assertEqual(result.difference_cents, 0)
        self.assertTrue(result.is_savings)

    def test_already_triggered_does_not_retrigger(self) -> None:
        result = evaluate(
            _product(5000, triggered=True), [_obs("amazon", 100)]
        )
        assert result is not None
        self.assertTrue(result.any_at_or_below_target)
        self.assertFalse(result.should_trigger)

    def test_any_retailer_can_trigger(self) -> None:
        """One retailer under target is enough."""
        result = evaluate(
            _product(5000), [_obs("a", 9000), _obs("b", 4999)]
        )
        assert result is not None
        self.assertTrue(result.should_trigger)
        self.assertEqual(result.best.retailer, "b")


if __name__ == "__main__":
    unittest.main()
