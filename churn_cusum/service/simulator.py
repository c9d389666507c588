import logging
from typing import Optional, Callable, Dict, Any
import time

from churn_cusum.core import ChurnEvaluationHarness
from churn_cusum.service.schema import SimulationParams, RunSummary

class SimulationService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def build_harness(self, params: SimulationParams, verbose: bool = False) -> ChurnEvaluationHarness:
        return ChurnEvaluationHarness(
            number_of_customers=params.number_of_customers,
            percent_left_censored=params.percent_left_censored,
            percent_right_censored=params.percent_right_censored,
            observation_period_years=params.observation_period_years,
            churn_probability=params.churn_probability,
            full_lifetime=params.full_lifetime,
            activity_rules=params.activity_rules,
            channels=params.channels,
            distribution_kind=params.distribution_kind,
            churn_activity_factor=params.churn_activity_factor,
            signal_cleaning=params.signal_cleaning,
            moving_average_window=params.moving_average_window,
            cusum_smoothing=params.cusum_smoothing,
            cusum_reference=params.cusum_reference,
            cusum_std_dev=params.cusum_std_dev,
            cusum_threshold_k=params.cusum_threshold_k,
            cusum_threshold=params.cusum_threshold,
            cusum_ignore_zero_values=params.cusum_ignore_zero_values,
            random_state=params.random_state,
            verbose=verbose,
        )

    def run_simulation(
        self,
        params: SimulationParams,
        progress_cb: Optional[Callable[[str, Dict[str, Any]], None]] = None
    ) -> RunSummary:
        """
        Run one simulation-and-detection pass and return the confusion summary.
        """
        self.logger.info(f"Starting simulation: customers={params.number_of_customers}, "
                         f"cleaning={params.signal_cleaning.value}, smoothing={params.cusum_smoothing}")
        harness = self.build_harness(params)
        if progress_cb is not None:
            harness.set_progress_callback(progress_cb)

        start_time = time.time()
        try:
            summary = harness.run()
        except Exception as e:
            self.logger.error(f"Simulation failed: {e}")
            raise e

        self.logger.info(f"Simulation finished in {time.time() - start_time:.2f}s: "
                         f"TP={summary.true_positives} FP={summary.false_positives} "
                         f"TN={summary.true_negatives} FN={summary.false_negatives} "
                         f"failed={len(summary.failures)}")
        return summary
