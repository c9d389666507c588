import logging
import numpy as np
import pandas as pd
from enum import Enum
from typing import Dict, List, Optional, Sequence
from pydantic import BaseModel, ConfigDict

from ..config import *
from ..components.distribution import DistributionParams, CompoundCountDistribution
from ..components.utils import RandomState, spawn_generators, mondays_between

logger = logging.getLogger(__name__)

ACTIVITY_COLUMNS = [CUSTOMER_ID_COLUMN, CUSTOMER_NAME_COLUMN, CHANNEL_COLUMN,
                    YEAR_COLUMN, WEEK_COLUMN, ACTIVITY_COUNT_COLUMN]

class RuleSelector(str, Enum):
    CHANNEL = "channel"
    INDUSTRY = "industry"
    COUNTRY = "country"
    PLAN = "plan"


class ActivityRule(BaseModel):
    """Distribution to use when `selector` equals `value` for a customer/channel."""
    model_config = ConfigDict(frozen=True)

    selector: RuleSelector
    value: str
    params: DistributionParams

    def matches(self, customer: Dict[str, str], channel: str) -> bool:
        if self.selector == RuleSelector.CHANNEL:
            return channel == self.value
        if self.selector == RuleSelector.INDUSTRY:
            return customer[INDUSTRY_COLUMN] == self.value
        if self.selector == RuleSelector.COUNTRY:
            return customer[COUNTRY_COLUMN] == self.value
        return customer[PLAN_COLUMN] == self.value


def find_rule(rules: Sequence[ActivityRule], customer: Dict[str, str], channel: str) -> Optional[ActivityRule]:
    """
    First rule in list order that matches, not the most specific one.
    """
    for rule in rules:
        if rule.matches(customer, channel):
            return rule
    return None


def random_channel_subset(rng: np.random.Generator,
                          popularity: Dict[str, float] = CHANNEL_POPULARITY) -> List[str]:
    """
    Each channel is kept with probability equal to its popularity. If every draw
    fails, one channel is picked with popularity weights so the subset is never empty.
    """
    names = list(popularity)
    weights = np.array([popularity[c] for c in names], dtype=float)
    keep = rng.random(len(names)) < weights
    if not keep.any():
        return [names[rng.choice(len(names), p=weights / weights.sum())]]
    return [c for c, k in zip(names, keep) if k]


def fallback_params(rng: np.random.Generator,
                    mean_min: float = FALLBACK_MEAN_MIN,
                    mean_max: float = FALLBACK_MEAN_MAX) -> DistributionParams:
    """
    Random parameters for customer/channel combinations no rule covers. std_dev and
    frequency follow the mean, floored away from zero.
    """
    mean = rng.uniform(mean_min, mean_max)
    std_dev = max(mean * FALLBACK_STD_RATIO, FALLBACK_MIN_STD)
    frequency = min(max(mean / mean_max, FALLBACK_MIN_FREQUENCY), 1.0)
    return DistributionParams(mean=mean, std_dev=std_dev, frequency=frequency)


class ActivitySignalGenerator:
    """
    Generates one weekly activity count per customer, channel and Monday of the
    contract (start and end inclusive).

    After a customer's churn date the selected parameters are scaled by
    `churn_activity_factor`, which is the drop the detector is meant to find.
    """
    def __init__(self, rules: Sequence[ActivityRule] = (),
                 channels: Optional[Sequence[str]] = None,
                 distribution_kind: str = DEFAULT_DISTRIBUTION_KIND,
                 churn_activity_factor: float = DEFAULT_CHURN_ACTIVITY_FACTOR,
                 random_state: RandomState = DEFAULT_RANDOM_STATE):
        self.rules = list(rules)
        self.channels = list(channels) if channels is not None else None
        self.distribution_kind = distribution_kind
        self.churn_activity_factor = churn_activity_factor
        self.random_state = random_state

    def generate(self, customers: pd.DataFrame) -> pd.DataFrame:
        if not 0.0 <= self.churn_activity_factor <= 1.0:
            raise ValueError(f"churn_activity_factor must be between 0 and 1, got {self.churn_activity_factor}.")
        if self.channels is not None and len(self.channels) == 0:
            raise ValueError("At least one channel is required (pass None for a random subset).")

        parts = []
        records = customers.to_dict('records')
        for customer, rng in zip(records, spawn_generators(self.random_state, len(records))):
            part = self._generate_customer(customer, rng)
            if part is not None:
                parts.append(part)

        if not parts:
            return pd.DataFrame(columns=ACTIVITY_COLUMNS)
        df = pd.concat(parts, ignore_index=True)
        logger.debug(f"Generated {len(df)} weekly activity points for {len(records)} customers")
        return df

    def _generate_customer(self, customer: Dict, rng: np.random.Generator) -> Optional[pd.DataFrame]:
        mondays = mondays_between(customer[CONTRACT_START_DATE_COLUMN], customer[CONTRACT_END_DATE_COLUMN])
        channels = self.channels if self.channels is not None else random_channel_subset(rng)
        if len(mondays) == 0:
            return None

        iso = mondays.isocalendar()
        churn_date = customer.get(CHURN_DATE_COLUMN)
        if churn_date is not None and not pd.isna(churn_date):
            after_churn = np.asarray(mondays >= pd.Timestamp(churn_date))
        else:
            after_churn = np.zeros(len(mondays), dtype=bool)

        n_weeks = len(mondays)
        counts = []
        for channel in channels:
            rule = find_rule(self.rules, customer, channel)
            params = rule.params if rule is not None else fallback_params(rng)
            active = CompoundCountDistribution(params, self.distribution_kind).sample(rng, n_weeks)
            if after_churn.any():
                if self.churn_activity_factor > 0:
                    dropped = CompoundCountDistribution(params.scaled(self.churn_activity_factor),
                                                        self.distribution_kind)
                    post = dropped.sample(rng, n_weeks)
                else:
                    post = np.zeros(n_weeks, dtype=np.int64)
                active = np.where(after_churn, post, active)
            counts.append(active)

        n_channels = len(channels)
        return pd.DataFrame({
            CUSTOMER_ID_COLUMN: customer[CUSTOMER_ID_COLUMN],
            CUSTOMER_NAME_COLUMN: customer[CUSTOMER_NAME_COLUMN],
            CHANNEL_COLUMN: np.repeat(channels, n_weeks),
            YEAR_COLUMN: np.tile(iso['year'].to_numpy(dtype=np.int64), n_channels),
            WEEK_COLUMN: np.tile(iso['week'].to_numpy(dtype=np.int64), n_channels),
            ACTIVITY_COUNT_COLUMN: np.concatenate(counts),
        })
