# src/services/alert_evaluator.py

"""Best-price and trigger evaluation for a single checking pass."""

from dataclasses import dataclass

from src.models.product import TrackedProduct


@dataclass(frozen=True)
class PriceObservation:
    """A price successfully extracted for one retailer this pass."""

    retailer: str
    url: str
    price_cents: int


@dataclass(frozen=True)
class AlertEvaluation:
    """Outcome of comparing a pass's observations against the target."""

    best: PriceObservation
    target_price_cents: int
    any_at_or_below_target: bool
    should_trigger: bool

    @property
    def is_savings(self) -> bool:
        """True when the best price is at or below the target."""
        return self.best.price_cents <= self.target_price_cents

    @property
    def difference_cents(self) -> int:
        """Savings below target, or the drop still needed to reach it."""
        return abs(self.best.price_cents - self.target_price_cents)


def best_observation(
    observations: list[PriceObservation],
) -> PriceObservation | None:
    """Cheapest observation; ties go to the earliest one."""
    best: PriceObservation | None = None
    for obs in observations:
        if best is None or obs.price_cents < best.price_cents:
            best = obs
    return best


def evaluate(
    product: TrackedProduct,
    observations: list[PriceObservation],
) -> AlertEvaluation | None:
    """Evaluate a pass; ``None`` when no retailer was observed."""
    best = best_observation(observations)
    if best is None:
        return None

    target = product.target_price_cents
    hit = any(o.price_cents <= target for o in observations)
    return AlertEvaluation(
        best=best,
        target_price_cents=target,
        any_at_or_below_target=hit,
        should_trigger=hit and not product.triggered,
    )
