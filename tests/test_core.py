import pytest
import numpy as np
import pandas as pd
from datetime import date

from churn_cusum.config import *
from churn_cusum.components.signal_cleaner import SignalCleaningType
from churn_cusum.core import ChurnEvaluationHarness, classify
from churn_cusum.service.schema import ConfusionStatus
from churn_cusum.simulation.activity import ActivitySignalGenerator


def weekly_series(values, year=2024, first_week=1):
    index = pd.MultiIndex.from_arrays(
        [[year] * len(values), list(range(first_week, first_week + len(values)))],
        names=[YEAR_COLUMN, WEEK_COLUMN])
    return pd.Series(np.asarray(values, dtype=float), index=index)


def test_classify():
    churn, detected = date(2024, 1, 10), date(2024, 1, 20)
    assert classify(churn, detected) == (ConfusionStatus.TRUE_POSITIVE, 1)
    assert classify(None, detected) == (ConfusionStatus.FALSE_POSITIVE, None)
    assert classify(churn, None) == (ConfusionStatus.FALSE_NEGATIVE, None)
    assert classify(None, None) == (ConfusionStatus.TRUE_NEGATIVE, None)


def test_classify_truncates_toward_zero():
    # -9 days is -1.29 weeks
    assert classify(date(2024, 1, 10), date(2024, 1, 1)) == (ConfusionStatus.TRUE_POSITIVE, -1)
    assert classify(date(2024, 1, 10), date(2024, 1, 16)) == (ConfusionStatus.TRUE_POSITIVE, 0)


def test_threshold_from_k():
    assert ChurnEvaluationHarness(cusum_reference=200, cusum_std_dev=20, cusum_threshold_k=5).threshold == 300
    assert ChurnEvaluationHarness(cusum_threshold=123.0).threshold == 123.0


def test_evaluate_customer_maps_index_to_monday():
    harness = ChurnEvaluationHarness(cusum_smoothing=0.16, cusum_reference=200, cusum_threshold=300)
    customer = {CUSTOMER_ID_COLUMN: "7", CHURN_DATE_COLUMN: pd.Timestamp("2024-03-11"),
                CHURN_REASON_COLUMN: ACTIVITY_DROP_REASON}
    # activity drops at week 11 (Monday 2024-03-11); the 11th low week crosses the threshold
    result = harness.evaluate_customer(customer, weekly_series([200] * 10 + [20] * 20))

    assert result.customer_id == "7"
    assert result.detected_churn_date == date(2024, 5, 20)
    assert result.detected_churn_reason == ACTIVITY_DROP_REASON
    assert result.churn_date == date(2024, 3, 11)
    assert result.confusion_status == ConfusionStatus.TRUE_POSITIVE
    assert result.detection_error_weeks == 10


def test_evaluate_customer_without_detection():
    harness = ChurnEvaluationHarness(cusum_reference=200, cusum_threshold=300)
    customer = {CUSTOMER_ID_COLUMN: "1", CHURN_DATE_COLUMN: pd.NaT, CHURN_REASON_COLUMN: None}
    result = harness.evaluate_customer(customer, weekly_series([200, 0, 201, 199, 0, 200]))
    assert result.detected_churn_date is None
    assert result.churn_date is None
    assert result.confusion_status == ConfusionStatus.TRUE_NEGATIVE
    assert result.detection_error_weeks is None


def test_aggregate_weekly_sums_channels():
    activity = pd.DataFrame({
        CUSTOMER_ID_COLUMN: ["0", "0", "0", "0"],
        CUSTOMER_NAME_COLUMN: ["Customer 0"] * 4,
        CHANNEL_COLUMN: ["Facebook", "Twitter", "Facebook", "Twitter"],
        YEAR_COLUMN: [2025, 2025, 2024, 2024],
        WEEK_COLUMN: [1, 1, 52, 52],
        ACTIVITY_COUNT_COLUMN: [3, 4, 10, 20],
    })
    weekly = ChurnEvaluationHarness.aggregate_weekly(activity)
    assert list(weekly.index) == [("0", 2024, 52), ("0", 2025, 1)]
    assert list(weekly) == [30.0, 7.0]


def test_run_detects_most_churners(harness_kwargs):
    harness = ChurnEvaluationHarness(**harness_kwargs)
    summary = harness.run()

    assert summary.n_evaluated + len(summary.failures) == harness_kwargs["number_of_customers"]
    churned = summary.true_positives + summary.false_negatives
    not_churned = summary.true_negatives + summary.false_positives
    assert churned > 0 and not_churned > 0

    tp_rate = summary.true_positives / churned
    fp_rate = summary.false_positives / not_churned
    assert tp_rate > 0.9
    assert fp_rate < 0.1

    errors = summary.detection_errors()
    assert len(errors) == summary.true_positives
    assert np.median(errors) > 0
    assert np.median(errors) < 30


def test_run_is_reproducible(harness_kwargs):
    harness_kwargs["number_of_customers"] = 40
    a = ChurnEvaluationHarness(**harness_kwargs).run()
    b = ChurnEvaluationHarness(**harness_kwargs).run()
    assert a.results == b.results


def test_run_populates_fitted_attributes(harness_kwargs):
    harness_kwargs["number_of_customers"] = 20
    harness = ChurnEvaluationHarness(**harness_kwargs)
    summary = harness.run()
    assert len(harness.customers_) == 20
    assert len(harness.activity_) > 0
    assert harness.summary_ is summary


def test_results_follow_customer_order(harness_kwargs):
    harness_kwargs["number_of_customers"] = 15
    summary = ChurnEvaluationHarness(**harness_kwargs).run()
    assert [r.customer_id for r in summary.results] == [str(i) for i in range(15)]


def test_customer_without_activity_is_a_failure(customer_factory, facebook_rule):
    customers = customer_factory(n_customers=5, full_lifetime=True)
    activity = ActivitySignalGenerator(rules=[facebook_rule], channels=["Facebook"],
                                       random_state=0).generate(customers)
    activity = activity[activity[CUSTOMER_ID_COLUMN] != "2"]

    summary = ChurnEvaluationHarness().evaluate(customers, activity)
    assert list(summary.failures) == ["2"]
    assert "empty signal" in summary.failures["2"]
    assert summary.n_evaluated == 4


def test_short_signal_with_moving_average_is_a_failure():
    customers = pd.DataFrame({
        CUSTOMER_ID_COLUMN: ["0"],
        CUSTOMER_NAME_COLUMN: ["Customer 0"],
        CHURN_DATE_COLUMN: [pd.NaT],
        CHURN_REASON_COLUMN: [None],
    })
    activity = pd.DataFrame({
        CUSTOMER_ID_COLUMN: ["0"] * 3,
        CUSTOMER_NAME_COLUMN: ["Customer 0"] * 3,
        CHANNEL_COLUMN: ["Facebook"] * 3,
        YEAR_COLUMN: [2024] * 3,
        WEEK_COLUMN: [1, 2, 3],
        ACTIVITY_COUNT_COLUMN: [200, 190, 210],
    })
    harness = ChurnEvaluationHarness(signal_cleaning="simple_moving_average", moving_average_window=5)
    summary = harness.evaluate(customers, activity)
    assert summary.n_evaluated == 0
    assert "window size" in summary.failures["0"]


@pytest.mark.parametrize("mode", [m.value for m in SignalCleaningType])
def test_every_cleaning_mode_runs(harness_kwargs, mode):
    harness_kwargs["number_of_customers"] = 20
    summary = ChurnEvaluationHarness(signal_cleaning=mode, **harness_kwargs).run()
    assert summary.n_evaluated + len(summary.failures) == 20


def test_progress_callback(harness_kwargs):
    harness_kwargs["number_of_customers"] = 10
    harness = ChurnEvaluationHarness(**harness_kwargs)
    stages = []
    harness.set_progress_callback(lambda stage, data: stages.append((stage, data)))
    harness.run()

    assert [s for s, _ in stages] == ["customers_generated", "activity_generated", "evaluation_done"]
    assert stages[0][1]["n_customers"] == 10
    assert stages[2][1]["n_results"] + stages[2][1]["n_failures"] == 10


def test_verbose_output(harness_kwargs, capsys):
    harness_kwargs["number_of_customers"] = 10
    ChurnEvaluationHarness(verbose=True, **harness_kwargs).run()
    out = capsys.readouterr().out
    assert "--- Customers: 10" in out
    assert "True Positive" in out
    assert "Threshold: 300.00" in out


@pytest.mark.slow
def test_ten_thousand_customer_scenario(facebook_rule):
    harness = ChurnEvaluationHarness(number_of_customers=10000, full_lifetime=True, observation_period_years=10,
                                     churn_probability=0.5, activity_rules=[facebook_rule],
                                     channels=["Facebook"], cusum_smoothing=0.16,
                                     cusum_reference=200, cusum_std_dev=20, cusum_threshold_k=5)
    summary = harness.run()
    rates = summary.rates()
    assert rates[ConfusionStatus.TRUE_POSITIVE.value] > rates[ConfusionStatus.FALSE_POSITIVE.value]
    assert rates[ConfusionStatus.TRUE_POSITIVE.value] > 0.4
