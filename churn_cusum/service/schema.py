from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Dict, Optional
from datetime import date
from enum import Enum

import pandas as pd

from churn_cusum.config import *
from churn_cusum.components.distribution import DISTRIBUTION_KINDS, DistributionParams
from churn_cusum.components.signal_cleaner import SignalCleaningType
from churn_cusum.simulation.activity import ActivityRule, RuleSelector

class ConfusionStatus(str, Enum):
    TRUE_POSITIVE = "True Positive"
    FALSE_POSITIVE = "False Positive"
    TRUE_NEGATIVE = "True Negative"
    FALSE_NEGATIVE = "False Negative"


class ChurnDetectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: str
    churn_date: Optional[date] = None
    churn_reason: Optional[str] = None
    detected_churn_date: Optional[date] = None
    detected_churn_reason: Optional[str] = None
    # detected - actual, truncated toward zero; only set for true positives
    detection_error_weeks: Optional[int] = None
    confusion_status: ConfusionStatus


class RunSummary(BaseModel):
    results: List[ChurnDetectionResult] = []
    true_positives: int = 0
    false_positives: int = 0
    true_negatives: int = 0
    false_negatives: int = 0
    failures: Dict[str, str] = {} # customer_id -> error message

    @property
    def n_evaluated(self) -> int:
        return self.true_positives + self.false_positives + self.true_negatives + self.false_negatives

    def rates(self) -> Dict[str, float]:
        """Fraction of evaluated customers per confusion status."""
        total = self.n_evaluated
        counts = {
            ConfusionStatus.TRUE_POSITIVE.value: self.true_positives,
            ConfusionStatus.FALSE_POSITIVE.value: self.false_positives,
            ConfusionStatus.TRUE_NEGATIVE.value: self.true_negatives,
            ConfusionStatus.FALSE_NEGATIVE.value: self.false_negatives,
        }
        return {k: (v / total if total else 0.0) for k, v in counts.items()}

    def detection_errors(self) -> List[int]:
        return [r.detection_error_weeks for r in self.results
                if r.confusion_status == ConfusionStatus.TRUE_POSITIVE]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.model_dump() for r in self.results])


class SimulationParams(BaseModel):
    number_of_customers: int = Field(DEFAULT_NUMBER_OF_CUSTOMERS, gt=0)
    percent_left_censored: float = Field(DEFAULT_PERCENT_LEFT_CENSORED, ge=0, le=1)
    percent_right_censored: float = Field(DEFAULT_PERCENT_RIGHT_CENSORED, ge=0, le=1)
    observation_period_years: int = Field(DEFAULT_OBSERVATION_PERIOD_YEARS, gt=0)
    churn_probability: float = Field(DEFAULT_CHURN_PROBABILITY, ge=0, le=1)
    full_lifetime: bool = DEFAULT_FULL_LIFETIME

    activity_rules: List[ActivityRule] = [
        ActivityRule(selector=RuleSelector.CHANNEL, value="Facebook",
                     params=DistributionParams(mean=200, std_dev=20, frequency=0.8)),
    ]
    channels: Optional[List[str]] = ["Facebook"] # None -> random popularity-weighted subset
    distribution_kind: str = DEFAULT_DISTRIBUTION_KIND
    churn_activity_factor: float = Field(DEFAULT_CHURN_ACTIVITY_FACTOR, ge=0, le=1)

    signal_cleaning: SignalCleaningType = SignalCleaningType(DEFAULT_SIGNAL_CLEANING)
    moving_average_window: int = Field(DEFAULT_MOVING_AVERAGE_WINDOW, gt=0)

    cusum_smoothing: float = Field(DEFAULT_CUSUM_SMOOTHING, ge=0, le=1)
    cusum_reference: float = DEFAULT_CUSUM_REFERENCE
    cusum_std_dev: float = Field(DEFAULT_CUSUM_STD_DEV, gt=0)
    cusum_threshold_k: float = DEFAULT_CUSUM_THRESHOLD_K
    cusum_threshold: Optional[float] = None # overrides reference + k * std_dev
    cusum_ignore_zero_values: bool = DEFAULT_CUSUM_IGNORE_ZERO_VALUES

    random_state: int = DEFAULT_RANDOM_STATE

    @model_validator(mode='after')
    def check_consistency(self):
        total = self.percent_left_censored + self.percent_right_censored
        if total > 1 + EPSILON_FLOAT:
            raise ValueError(f"percent_left_censored + percent_right_censored must be <= 1, got {total}")
        if self.distribution_kind not in DISTRIBUTION_KINDS:
            raise ValueError(f"distribution_kind must be one of {DISTRIBUTION_KINDS}, got '{self.distribution_kind}'")
        if self.channels is not None:
            unknown = [c for c in self.channels if c not in CHANNEL_POPULARITY]
            if unknown:
                raise ValueError(f"Unknown channels: {unknown}")
            if not self.channels:
                raise ValueError("channels cannot be empty (use None for a random subset)")
        return self

    @property
    def effective_threshold(self) -> float:
        if self.cusum_threshold is not None:
            return self.cusum_threshold
        return self.cusum_reference + self.cusum_threshold_k * self.cusum_std_dev
