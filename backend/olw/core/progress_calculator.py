"""Single source of truth for completion percentages."""

import math


def calculate_percent(completed: int, total: int) -> int:
    """Return ``completed / total`` as a whole percentage (0-100).

    Halves round up, and an empty total yields 0 rather than dividing by zero.
    """
    if total <= 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)
