import math
import logging
import numpy as np
import pandas as pd
from datetime import date
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from ..config import *
from ..components.utils import RandomState, spawn_generators

logger = logging.getLogger(__name__)

class ObservationWindow(BaseModel):
    """
    |--extended period--|--observation period--|--extended period--|

    Left-censored contracts start in the first extended period, right-censored
    contracts end in the second one.
    """
    model_config = ConfigDict(frozen=True)

    start: date = OBSERVATION_START_DATE
    years: int = Field(DEFAULT_OBSERVATION_PERIOD_YEARS, gt=0)
    extended_years: int = Field(EXTENDED_PERIOD_YEARS, ge=0)

    @property
    def end(self) -> date:
        return (pd.Timestamp(self.start) + pd.DateOffset(years=self.years)).date()

    @property
    def extended_start(self) -> date:
        return (pd.Timestamp(self.start) - pd.DateOffset(years=self.extended_years)).date()

    @property
    def extended_end(self) -> date:
        return (pd.Timestamp(self.end) + pd.DateOffset(years=self.extended_years)).date()


class LifecycleGenerator:
    """
    Generates the customer table: contract span (optionally censored) and an
    optional injected churn event that serves as ground truth.

    Customers [0, n_left) are left-censored, [n - n_right, n) right-censored,
    the rest uncensored, with n_left = floor(n * percent_left_censored) and
    n_right = floor(n * percent_right_censored).
    """
    def __init__(self, full_lifetime: bool = DEFAULT_FULL_LIFETIME,
                 random_state: RandomState = DEFAULT_RANDOM_STATE,
                 observation_start: date = OBSERVATION_START_DATE,
                 extended_period_years: int = EXTENDED_PERIOD_YEARS,
                 min_duration_for_churn: int = MIN_DURATION_FOR_CHURN_DAYS):
        self.full_lifetime = full_lifetime
        self.random_state = random_state
        self.observation_start = observation_start
        self.extended_period_years = extended_period_years
        self.min_duration_for_churn = min_duration_for_churn

    def generate_uncensored(self, number_of_customers: int, observation_period_years: int,
                            churn_probability: float = 0.0) -> pd.DataFrame:
        return self.generate(number_of_customers, 0.0, 0.0, observation_period_years, churn_probability)

    def generate(self, number_of_customers: int,
                 percent_left_censored: float = DEFAULT_PERCENT_LEFT_CENSORED,
                 percent_right_censored: float = DEFAULT_PERCENT_RIGHT_CENSORED,
                 observation_period_years: int = DEFAULT_OBSERVATION_PERIOD_YEARS,
                 churn_probability: float = 0.0) -> pd.DataFrame:
        self._validate(number_of_customers, percent_left_censored, percent_right_censored,
                       observation_period_years, churn_probability)
        n = number_of_customers
        n_left = math.floor(n * percent_left_censored)
        n_right = math.floor(n * percent_right_censored)
        if not self.full_lifetime and (n_left or n_right) and self.extended_period_years <= 0:
            raise ValueError("Censored customers require a positive extended period, "
                             f"got extended_period_years={self.extended_period_years} "
                             f"(left={n_left}, right={n_right}).")

        window = ObservationWindow(start=self.observation_start, years=observation_period_years,
                                   extended_years=self.extended_period_years)
        if self.full_lifetime and (n_left or n_right):
            logger.warning("full_lifetime is set, ignoring censoring percentages "
                           f"(left={percent_left_censored}, right={percent_right_censored})")

        obs_start, obs_end = window.start.toordinal(), window.end.toordinal()
        ext_start, ext_end = window.extended_start.toordinal(), window.extended_end.toordinal()

        starts = np.empty(n, dtype=np.int64)
        ends = np.empty(n, dtype=np.int64)
        churn_dates = [None] * n
        churn_reasons = [None] * n

        for i, rng in enumerate(spawn_generators(self.random_state, n)):
            # integers() excludes `high`, hence the +1 on inclusive bounds
            if self.full_lifetime:
                start, end = obs_start, obs_end
            elif i < n_left:
                start = rng.integers(ext_start, obs_start)
                end = rng.integers(obs_start, obs_end + 1)
            elif i >= n - n_right:
                start = rng.integers(obs_start, obs_end + 1)
                end = rng.integers(obs_end + 1, ext_end + 1)
            else:
                start = rng.integers(obs_start, obs_end + 1)
                end = rng.integers(start, obs_end + 1)

            if start > end:
                raise ValueError(f"Contract start {date.fromordinal(int(start))} is after "
                                 f"contract end {date.fromordinal(int(end))}.")
            starts[i], ends[i] = start, end

            if churn_probability > 0:
                churn = self._simulate_churn(rng, int(start), int(end), obs_start, obs_end, churn_probability)
                if churn is not None:
                    churn_dates[i], churn_reasons[i] = churn

        ids = [str(i) for i in range(n)]
        return pd.DataFrame({
            CUSTOMER_ID_COLUMN: ids,
            CUSTOMER_NAME_COLUMN: [f"Customer {i}" for i in range(n)],
            INDUSTRY_COLUMN: [INDUSTRY_VALUES[i % len(INDUSTRY_VALUES)] for i in range(n)],
            COUNTRY_COLUMN: [COUNTRY_VALUES[i % len(COUNTRY_VALUES)] for i in range(n)],
            PLAN_COLUMN: [PLAN_VALUES[i % len(PLAN_VALUES)] for i in range(n)],
            CONTRACT_START_DATE_COLUMN: _ordinals_to_datetimes(starts),
            CONTRACT_END_DATE_COLUMN: _ordinals_to_datetimes(ends),
            CHURN_DATE_COLUMN: pd.to_datetime(
                [date.fromordinal(d) if d is not None else None for d in churn_dates]),
            CHURN_REASON_COLUMN: pd.Series(churn_reasons, dtype=object),
        })

    def _simulate_churn(self, rng: np.random.Generator, start: int, end: int,
                        obs_start: int, obs_end: int, churn_probability: float) -> Optional[Tuple[int, str]]:
        if rng.random() >= churn_probability:
            return None

        overlap_start = max(start, obs_start)
        overlap_end = min(end, obs_end)
        duration = overlap_end - overlap_start
        if duration <= self.min_duration_for_churn:
            return None

        earliest = overlap_start + int(EARLIEST_POSSIBLE_CHURN * duration)
        latest = overlap_start + int(LATEST_POSSIBLE_CHURN * duration)
        churn_day = int(rng.integers(earliest, latest))
        reason = CHURN_REASON_VALUES[rng.integers(len(CHURN_REASON_VALUES))]
        return churn_day, reason

    @staticmethod
    def _validate(number_of_customers, percent_left, percent_right, observation_years, churn_probability):
        if number_of_customers <= 0:
            raise ValueError(f"Number of customers has to be positive, got {number_of_customers}.")
        if percent_left < 0 or percent_right < 0:
            raise ValueError("The percent of left censored customers and the percent of right censored "
                             f"customers cannot be negative (left={percent_left}, right={percent_right}).")
        if percent_left > 1 or percent_right > 1:
            raise ValueError("Censoring percentages cannot exceed 1 "
                             f"(left={percent_left}, right={percent_right}).")
        if percent_left + percent_right > 1 + EPSILON_FLOAT:
            raise ValueError("The sum of left and right censored percentages cannot be greater than 1 "
                             f"(got {percent_left + percent_right}).")
        if observation_years <= 0:
            raise ValueError(f"The observation period has to be positive, got {observation_years}.")
        if churn_probability < 0 or churn_probability > 1:
            raise ValueError(f"The churn probability has to be between 0 and 1, got {churn_probability}.")


def _ordinals_to_datetimes(ordinals: np.ndarray) -> pd.DatetimeIndex:
    return pd.to_datetime([date.fromordinal(int(d)) for d in ordinals])
