import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import matplotlib.pyplot as plt

from churn_cusum import ChurnEvaluationHarness, SignalCleaningType
from churn_cusum.components.distribution import DistributionParams
from churn_cusum.simulation.activity import ActivityRule, RuleSelector
from churn_cusum.visualizer import plot_cusum, plot_detection_errors


def run_cleaning_comparison(n_customers=500):

    print("\n=== CUSUM Churn Detection: Signal Cleaning Comparison ===")

    rule = ActivityRule(selector=RuleSelector.CHANNEL, value="Facebook",
                        params=DistributionParams(mean=200, std_dev=20, frequency=0.8))

    harness = None
    for mode in SignalCleaningType:
        harness = ChurnEvaluationHarness(number_of_customers=n_customers, full_lifetime=True,
                                         observation_period_years=10, churn_probability=0.5,
                                         activity_rules=[rule], channels=["Facebook"],
                                         signal_cleaning=mode, verbose=True)
        harness.run()

    # Trace of the first churned customer of the last run
    weekly = harness.aggregate_weekly(harness.activity_)
    churned = harness.customers_[harness.customers_['churn_date'].notna()]
    if not churned.empty:
        customer_id = churned['customer_id'].iloc[0]
        series = weekly.loc[customer_id]
        cleaned = harness.cleaner.clean(series.to_numpy(), harness.signal_cleaning)
        fig = plot_cusum(cleaned, harness.detector.compute(cleaned), harness.threshold)
        if fig is not None:
            fig.savefig("cusum_trace.png")

    fig = plot_detection_errors(harness.summary_)
    if fig is not None:
        fig.savefig("detection_errors.png")
    plt.close('all')


if __name__ == "__main__":
    run_cleaning_comparison()
