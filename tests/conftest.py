import pytest
import numpy as np

from churn_cusum.components.distribution import DistributionParams
from churn_cusum.simulation.activity import ActivityRule, RuleSelector
from churn_cusum.simulation.lifecycle import LifecycleGenerator


def pytest_addoption(parser):
    parser.addoption("--runslow", action="store_true", default=False, help="run slow end-to-end scenarios")


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running end-to-end scenarios")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def customer_factory():
    def _generate(n_customers=50, left=0.0, right=0.0, years=5, churn_probability=0.0,
                  full_lifetime=False, seed=42):
        generator = LifecycleGenerator(full_lifetime=full_lifetime, random_state=seed)
        return generator.generate(n_customers, left, right, years, churn_probability)
    return _generate


@pytest.fixture
def facebook_rule():
    return ActivityRule(selector=RuleSelector.CHANNEL, value="Facebook",
                        params=DistributionParams(mean=200, std_dev=20, frequency=0.8))


@pytest.fixture
def noisy_sine():
    """
    64 samples of a sine wave with Gaussian noise (power-of-two length, no padding).
    """
    rng = np.random.default_rng(0)
    t = np.arange(64)
    return 10 * np.sin(2 * np.pi * t / 32.0) + rng.normal(0, 2.0, 64)


@pytest.fixture
def harness_kwargs(facebook_rule):
    """Small full-lifetime scenario with a single Facebook channel."""
    return dict(number_of_customers=200, full_lifetime=True, observation_period_years=10,
                churn_probability=0.5, activity_rules=[facebook_rule], channels=["Facebook"],
                cusum_smoothing=0.16, random_state=42)
