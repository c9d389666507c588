import math
from typing import Any
import numpy as np

def sanitize_for_json(obj: Any) -> Any:
    """
    Makes a `model_dump(mode="json")` payload strictly JSON-safe: NaN becomes
    None, +/-inf become "Infinity"/"-Infinity" and numpy scalars/arrays become
    native values. Dates and enums are left to pydantic.
    """
    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, np.ndarray)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float) and not math.isfinite(obj):
        if math.isnan(obj):
            return None
        return "Infinity" if obj > 0 else "-Infinity"
    return obj
