"""Half-life decay used for recency weighting.

Maps an age (in days) to a multiplier in ``[floor, 1.0]``:

    factor = floor + (1 - floor) * 0.5 ** (age_days / half_life_days)

A ``floor`` of 0 gives a plain exponential half-life curve, which is what
chat freshness uses.  Entity ranking keeps a floor so that old but
important items retain part of their weight.

Classes
-------
- HalfLifeDecay — compute decay multipliers for ages in days
"""
from __future__ import annotations


class HalfLifeDecay:
    """Compute half-life decay multipliers.

    Parameters
    ----------
    half_life_days:
        Age, in days, at which the decaying part of the factor halves.
        Smaller values make recency matter more.  Default: 14.
    floor:
        Minimum multiplier returned for arbitrarily old items, in
        ``[0.0, 1.0]``.  Default: 0.0.
    """

    def __init__(self, half_life_days: float = 14.0, floor: float = 0.0) -> None:
        self.half_life_days = half_life_days
        self.floor = floor

    # ------------------------------------------------------------------
    # Public scoring method
    # ------------------------------------------------------------------

    def factor(self, age_days: float) -> float:
        """Return the multiplier for an item aged ``age_days``.

        Negative ages (timestamps in the future) are treated as zero, so
        the result never exceeds 1.0.
        """
        age = max(0.0, age_days)
        if self.half_life_days <= 0:
            decay = 1.0 if age == 0 else 0.0
        else:
            decay = 0.5 ** (age / self.half_life_days)
        return self.floor + (1.0 - self.floor) * decay

    def factor_many(self, ages_days: list[float]) -> list[float]:
        """Return multipliers for a list of ages."""
        return [self.factor(age) for age in ages_days]

    def __repr__(self) -> str:
        return (
            f"HalfLifeDecay(half_life_days={self.half_life_days}, "
            f"floor={self.floor})"
        )
