"""Cubic bezier easing solver used by the loading animation."""

from __future__ import annotations

from typing import Sequence

from src.exceptions import ExtractionError


X_TOLERANCE = 0.00001


class Cubic:
    """Ease curve from (0, 0) to (1, 1) with control points (x1, y1) and (x2, y2).

    Solving assumes x(m) is monotonic for the given controls; for other inputs
    the bisection still terminates but the result is not meaningful.
    """

    def __init__(self, curves: Sequence[float]):
        if len(curves) < 4:
            raise ExtractionError(f"Cubic curve needs 4 control values, got {len(curves)}.")
        self.curves = [float(value) for value in curves[:4]]

    def get_value(self, target_time: float) -> float:
        x1, y1, x2, y2 = self.curves
        start_gradient = 0.0
        end_gradient = 0.0
        start = 0.0
        middle = 0.0
        end = 1.0

        if target_time <= 0.0:
            if x1 > 0.0:
                start_gradient = y1 / x1
            elif y1 == 0.0 and x2 > 0.0:
                start_gradient = y2 / x2
            return start_gradient * target_time

        if target_time >= 1.0:
            if x2 < 1.0:
                end_gradient = (y2 - 1.0) / (x2 - 1.0)
            elif x2 == 1.0 and x1 < 1.0:
                end_gradient = (y1 - 1.0) / (x1 - 1.0)
            return 1.0 + end_gradient * (target_time - 1.0)

        while start < end:
            previous, middle = middle, (start + end) / 2
            if middle == previous:
                # Interval can no longer shrink in float precision.
                break
            x_estimate = self.calculate(x1, x2, middle)
            if abs(target_time - x_estimate) < X_TOLERANCE:
                return self.calculate(y1, y2, middle)
            if x_estimate < target_time:
                start = middle
            else:
                end = middle
        return self.calculate(y1, y2, middle)

    @staticmethod
    def calculate(first: float, second: float, middle: float) -> float:
        return (
            3.0 * first * (1 - middle) * (1 - middle) * middle
            + 3.0 * second * (1 - middle) * middle * middle
            + middle * middle * middle
        )
