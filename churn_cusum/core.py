import logging
import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix
from typing import List, Dict, Optional, Sequence, Any, Callable

from .config import *
from .components.cusum import CusumDetector
from .components.signal_cleaner import SignalCleaner, SignalCleaningType
from .components.utils import as_seed_sequence, iso_week_monday, to_date
from .simulation.activity import ActivityRule, ActivitySignalGenerator
from .simulation.lifecycle import LifecycleGenerator
from .service.schema import ChurnDetectionResult, ConfusionStatus, RunSummary

logger = logging.getLogger(__name__)

WEEKLY_INDEX = [YEAR_COLUMN, WEEK_COLUMN]

class ChurnEvaluationHarness:
    """
    Simulates customers and their weekly activity, runs a CUSUM change-point
    detector on every customer's cleaned weekly signal and scores the detections
    against the injected churn dates.

    Attributes (after run/evaluate):
        customers_ (pd.DataFrame): Generated customer table.
        activity_ (pd.DataFrame): Weekly activity per customer and channel.
        summary_ (RunSummary): Per-customer results and confusion counts.
    """

    def __init__(self,
                 number_of_customers: int = DEFAULT_NUMBER_OF_CUSTOMERS,
                 percent_left_censored: float = DEFAULT_PERCENT_LEFT_CENSORED,
                 percent_right_censored: float = DEFAULT_PERCENT_RIGHT_CENSORED,
                 observation_period_years: int = DEFAULT_OBSERVATION_PERIOD_YEARS,
                 churn_probability: float = DEFAULT_CHURN_PROBABILITY,
                 full_lifetime: bool = DEFAULT_FULL_LIFETIME,
                 activity_rules: Sequence[ActivityRule] = (),
                 channels: Optional[Sequence[str]] = None,
                 distribution_kind: str = DEFAULT_DISTRIBUTION_KIND,
                 churn_activity_factor: float = DEFAULT_CHURN_ACTIVITY_FACTOR,
                 signal_cleaning: SignalCleaningType = DEFAULT_SIGNAL_CLEANING,
                 moving_average_window: int = DEFAULT_MOVING_AVERAGE_WINDOW,
                 cusum_smoothing: float = DEFAULT_CUSUM_SMOOTHING,
                 cusum_reference: float = DEFAULT_CUSUM_REFERENCE,
                 cusum_std_dev: float = DEFAULT_CUSUM_STD_DEV,
                 cusum_threshold_k: float = DEFAULT_CUSUM_THRESHOLD_K,
                 cusum_threshold: Optional[float] = None,
                 cusum_ignore_zero_values: bool = DEFAULT_CUSUM_IGNORE_ZERO_VALUES,
                 random_state: int = DEFAULT_RANDOM_STATE,
                 verbose: bool = DEFAULT_VERBOSE):

        self.number_of_customers = number_of_customers
        self.percent_left_censored = percent_left_censored
        self.percent_right_censored = percent_right_censored
        self.observation_period_years = observation_period_years
        self.churn_probability = churn_probability
        self.full_lifetime = full_lifetime
        self.activity_rules = list(activity_rules)
        self.channels = channels
        self.distribution_kind = distribution_kind
        self.churn_activity_factor = churn_activity_factor
        self.signal_cleaning = SignalCleaningType(signal_cleaning)
        self.moving_average_window = moving_average_window
        self.cusum_smoothing = cusum_smoothing
        self.cusum_reference = cusum_reference
        self.cusum_std_dev = cusum_std_dev
        self.cusum_threshold_k = cusum_threshold_k
        self.cusum_threshold = cusum_threshold
        self.cusum_ignore_zero_values = cusum_ignore_zero_values
        self.random_state = random_state
        self.verbose = verbose

        self.progress_cb = None

        # Components
        self.cleaner = SignalCleaner(window=moving_average_window)
        self.detector = CusumDetector(smoothing=cusum_smoothing,
                                      reference=cusum_reference,
                                      threshold=self.threshold,
                                      ignore_zero_values=cusum_ignore_zero_values)

        self._reset_state()

    def set_progress_callback(self, cb: Callable[[str, Dict[str, Any]], None]):
        self.progress_cb = cb

    def _notify_progress(self, stage: str, data: Dict[str, Any]):
        if self.progress_cb:
            self.progress_cb(stage, data)

    def _reset_state(self):
        self.customers_ = None
        self.activity_ = None
        self.summary_ = None

    @property
    def threshold(self) -> float:
        """Absolute CUSUM deviation that flags churn: reference + k * std_dev unless set explicitly."""
        if self.cusum_threshold is not None:
            return self.cusum_threshold
        return self.cusum_reference + self.cusum_threshold_k * self.cusum_std_dev

    def run(self) -> RunSummary:
        """
        Generate customers and activity, then evaluate every customer.
        """
        self._reset_state()
        lifecycle_seed, activity_seed = as_seed_sequence(self.random_state).spawn(2)

        customers = LifecycleGenerator(
            full_lifetime=self.full_lifetime, random_state=lifecycle_seed
        ).generate(
            self.number_of_customers,
            self.percent_left_censored,
            self.percent_right_censored,
            self.observation_period_years,
            self.churn_probability,
        )
        if self.verbose:
            print(f"--- Customers: {len(customers)} | Churned: {customers[CHURN_DATE_COLUMN].notna().sum()} ---")
        self._notify_progress("customers_generated", {"n_customers": len(customers)})

        activity = ActivitySignalGenerator(
            rules=self.activity_rules,
            channels=self.channels,
            distribution_kind=self.distribution_kind,
            churn_activity_factor=self.churn_activity_factor,
            random_state=activity_seed,
        ).generate(customers)
        self._notify_progress("activity_generated", {"n_points": len(activity)})

        return self.evaluate(customers, activity)

    def evaluate(self, customers: pd.DataFrame, activity: pd.DataFrame) -> RunSummary:
        """
        Detect churn for each customer of an existing customer/activity pair.
        """
        self.customers_ = customers
        self.activity_ = activity

        weekly = self.aggregate_weekly(activity)
        weekly_by_customer = {cid: grp.droplevel(0) for cid, grp in weekly.groupby(level=0, sort=False)}
        empty = pd.Series(dtype=float, index=pd.MultiIndex.from_arrays([[], []], names=WEEKLY_INDEX))

        results: List[ChurnDetectionResult] = []
        failures: Dict[str, str] = {}
        for customer in customers.to_dict('records'):
            customer_id = customer[CUSTOMER_ID_COLUMN]
            try:
                results.append(self.evaluate_customer(customer, weekly_by_customer.get(customer_id, empty)))
            except ValueError as e:
                logger.debug(f"Evaluation failed for customer {customer_id}: {e}")
                failures[customer_id] = str(e)
            except Exception as e:
                logger.warning(f"Unexpected error evaluating customer {customer_id}: {e}")
                raise

        self.summary_ = self._summarize(results, failures)
        self._notify_progress("evaluation_done", {"n_results": len(results), "n_failures": len(failures)})
        if self.verbose:
            self._print_summary(self.summary_)
        return self.summary_

    @staticmethod
    def aggregate_weekly(activity: pd.DataFrame) -> pd.Series:
        """
        Total activity per (customer, ISO year, ISO week) across channels,
        ordered by year then week within each customer.
        """
        return (activity.groupby([CUSTOMER_ID_COLUMN, YEAR_COLUMN, WEEK_COLUMN], sort=True)
                [ACTIVITY_COUNT_COLUMN].sum().astype(float))

    def evaluate_customer(self, customer: Dict[str, Any], weekly: pd.Series) -> ChurnDetectionResult:
        """
        weekly: activity totals indexed by (year, week), already ordered.
        """
        cleaned = self.cleaner.clean(weekly.to_numpy(), self.signal_cleaning)
        cusum = self.detector.compute(cleaned)

        detected_date = None
        detected_reason = None
        if cusum.anomaly_index is not None:
            year, week = weekly.index[cusum.anomaly_index]
            detected_date = iso_week_monday(year, week)
            detected_reason = ACTIVITY_DROP_REASON

        churn_date = to_date(customer.get(CHURN_DATE_COLUMN))
        churn_reason = customer.get(CHURN_REASON_COLUMN)
        if churn_date is None:
            churn_reason = None
        status, error_weeks = classify(churn_date, detected_date)

        return ChurnDetectionResult(
            customer_id=customer[CUSTOMER_ID_COLUMN],
            churn_date=churn_date,
            churn_reason=churn_reason,
            detected_churn_date=detected_date,
            detected_churn_reason=detected_reason,
            detection_error_weeks=error_weeks,
            confusion_status=status,
        )

    @staticmethod
    def _summarize(results: List[ChurnDetectionResult], failures: Dict[str, str]) -> RunSummary:
        actual = np.array([r.churn_date is not None for r in results], dtype=bool)
        detected = np.array([r.detected_churn_date is not None for r in results], dtype=bool)
        if len(results):
            tn, fp, fn, tp = confusion_matrix(actual, detected, labels=[False, True]).ravel()
        else:
            tn = fp = fn = tp = 0
        return RunSummary(results=results, true_positives=int(tp), false_positives=int(fp),
                          true_negatives=int(tn), false_negatives=int(fn), failures=failures)

    def _print_summary(self, summary: RunSummary):
        rates = summary.rates()
        print(f"--- Smoothing: {self.cusum_smoothing} | Cleaning: {self.signal_cleaning.value} "
              f"| Threshold: {self.threshold:.2f} ---")
        for label, rate in rates.items():
            print(f"{label:>15}: {100 * rate:6.2f}%")
        if summary.failures:
            print(f"Failed customers: {len(summary.failures)}")


def classify(churn_date, detected_date):
    """
    Confusion status and signed detection error in weeks (detected - actual,
    truncated toward zero; None unless both dates exist).
    """
    if churn_date is not None and detected_date is not None:
        return ConfusionStatus.TRUE_POSITIVE, int((detected_date - churn_date).days / 7)
    if detected_date is not None:
        return ConfusionStatus.FALSE_POSITIVE, None
    if churn_date is not None:
        return ConfusionStatus.FALSE_NEGATIVE, None
    return ConfusionStatus.TRUE_NEGATIVE, None
