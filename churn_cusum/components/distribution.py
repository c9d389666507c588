import numpy as np
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_DISTRIBUTION_KIND

DISTRIBUTION_KINDS = ('lognormal', 'normal')

class DistributionParams(BaseModel):
    """
    Parameters of a weekly activity count.

    frequency is the probability that any activity happens in a given week,
    mean/std_dev describe the count given that activity happens.
    """
    model_config = ConfigDict(frozen=True)

    mean: float = Field(..., ge=0)
    std_dev: float = Field(..., ge=0)
    frequency: float = Field(..., ge=0, le=1)

    def scaled(self, factor: float) -> "DistributionParams":
        """Same frequency, magnitude scaled by factor."""
        return DistributionParams(mean=self.mean * factor, std_dev=self.std_dev * factor,
                                  frequency=self.frequency)


def lognormal_moments(mean: float, std_dev: float):
    """
    Log-space (mu, sigma) of a log-normal whose mean/std match the given values.
    """
    if mean <= 0 or std_dev <= 0:
        raise ValueError(f"Log-normal moment matching requires mean > 0 and std_dev > 0 "
                         f"(got mean={mean}, std_dev={std_dev}).")
    log_mean = np.log(mean ** 2 / np.sqrt(std_dev ** 2 + mean ** 2))
    log_std = np.sqrt(np.log(1 + std_dev ** 2 / mean ** 2))
    return float(log_mean), float(log_std)


class CompoundCountDistribution:
    """
    Bernoulli(frequency) gate composed with a continuous magnitude, rounded to a
    non-negative integer count.

    kind='normal' clips negative draws at 0, kind='lognormal' moment-matches the
    (mean, std_dev) pair and is non-negative without truncation.
    """
    def __init__(self, params: DistributionParams, kind: str = DEFAULT_DISTRIBUTION_KIND):
        if kind not in DISTRIBUTION_KINDS:
            raise ValueError(f"kind must be one of {DISTRIBUTION_KINDS}, got '{kind}'")
        self.params = params
        self.kind = kind
        if kind == 'lognormal':
            self.log_mean_, self.log_std_ = lognormal_moments(params.mean, params.std_dev)

    def sample(self, rng: np.random.Generator, size: Optional[int] = None) -> Union[int, np.ndarray]:
        """
        Draws one count (size=None) or an int64 array of `size` counts.
        """
        n = 1 if size is None else size
        gate = rng.random(n) < self.params.frequency
        if self.kind == 'lognormal':
            magnitude = rng.lognormal(self.log_mean_, self.log_std_, n)
        else:
            magnitude = np.maximum(rng.normal(self.params.mean, self.params.std_dev, n), 0.0)
        # Round half up
        counts = np.where(gate, np.floor(magnitude + 0.5), 0).astype(np.int64)
        if size is None: return int(counts[0])
        return counts
