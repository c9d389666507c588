from .core import ChurnEvaluationHarness
from .components.cusum import CusumDetector, CusumResult
from .components.distribution import DistributionParams, CompoundCountDistribution
from .components.signal_cleaner import SignalCleaner, SignalCleaningType
from .components.wavelets import WaveletTransform
from .simulation.activity import ActivityRule, ActivitySignalGenerator, RuleSelector
from .simulation.lifecycle import LifecycleGenerator, ObservationWindow
from .service.schema import ChurnDetectionResult, ConfusionStatus, RunSummary, SimulationParams

__all__ = [
    "ChurnEvaluationHarness",
    "CusumDetector",
    "CusumResult",
    "DistributionParams",
    "CompoundCountDistribution",
    "SignalCleaner",
    "SignalCleaningType",
    "WaveletTransform",
    "ActivityRule",
    "ActivitySignalGenerator",
    "RuleSelector",
    "LifecycleGenerator",
    "ObservationWindow",
    "ChurnDetectionResult",
    "ConfusionStatus",
    "RunSummary",
    "SimulationParams",
]
