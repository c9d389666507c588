import numpy as np
import pandas as pd
from datetime import date
from typing import List, Union, Optional

RandomState = Union[int, np.random.SeedSequence, None]

def next_power_of_two(n: int) -> int:
    """
    Smallest power of two >= n (1 for n <= 1).
    """
    if n <= 1: return 1
    return 1 << (int(n) - 1).bit_length()

def log2_exact(n: int) -> int:
    """
    Returns L such that 2**L == n, raising ValueError otherwise.
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"Coefficient array length must be a power of 2, got {n}.")
    return n.bit_length() - 1

def as_seed_sequence(random_state: RandomState) -> np.random.SeedSequence:
    # Fresh copy so repeated spawning from the same seed yields the same children
    if isinstance(random_state, np.random.SeedSequence):
        return np.random.SeedSequence(entropy=random_state.entropy, spawn_key=random_state.spawn_key,
                                      pool_size=random_state.pool_size)
    return np.random.SeedSequence(random_state)

def spawn_generators(random_state: RandomState, n: int) -> List[np.random.Generator]:
    """
    Independent generator per entity. Entity i always receives the same stream
    for a given seed, regardless of how many entities are processed or in which order.
    """
    children = as_seed_sequence(random_state).spawn(n)
    return [np.random.default_rng(child) for child in children]

def mondays_between(start, end) -> pd.DatetimeIndex:
    """
    All Mondays in [start, end], both ends inclusive.
    """
    return pd.date_range(pd.Timestamp(start).normalize(), pd.Timestamp(end).normalize(), freq='W-MON')

def iso_week_monday(year: int, week: int) -> date:
    return date.fromisocalendar(int(year), int(week), 1)

def to_date(value) -> Optional[date]:
    """
    Converts Timestamp/datetime64/date to datetime.date, mapping NaT/None to None.
    """
    if value is None or pd.isna(value): return None
    return pd.Timestamp(value).date()
