"""Animation key: a sampled keyframe of the loading animation, hex encoded."""

from __future__ import annotations

from functools import reduce
import math
import re
from typing import Sequence

from src.config import TOTAL_ANIMATION_TIME
from src.exceptions import ArgumentMismatchError, ExtractionError
from src.transaction.cubic import Cubic
from src.transaction.extraction import OnDemandIndices


MIN_FRAME_ROW_LENGTH = 11
_SEPARATOR_RE = re.compile(r"[.-]")


def build_animation_key(
    key_bytes: Sequence[int],
    indices: OnDemandIndices,
    grid: list[list[int]],
) -> str:
    """Select the keyed grid row, sample it at the keyed time and encode it."""
    if indices.row_index >= len(key_bytes):
        raise ExtractionError(f"Row byte index {indices.row_index} out of key range.")
    row_index = key_bytes[indices.row_index] % 16
    if row_index >= len(grid):
        raise ExtractionError(f"Animation row index {row_index} out of range ({len(grid)} rows).")
    return animate(grid[row_index], frame_time(key_bytes, indices.key_byte_indices))


def frame_time(key_bytes: Sequence[int], key_byte_indices: Sequence[int]) -> float:
    """Normalized sample time in [0, 1)."""
    try:
        factors = [key_bytes[index] % 16 for index in key_byte_indices]
    except IndexError as exc:
        raise ExtractionError("Key byte index out of key range.") from exc
    product = reduce(lambda left, right: left * right, factors, 1)
    return (product % TOTAL_ANIMATION_TIME) / TOTAL_ANIMATION_TIME


def animate(frames: Sequence[int], target_time: float) -> str:
    if len(frames) < MIN_FRAME_ROW_LENGTH:
        raise ExtractionError("Animation row has insufficient data points.")

    from_color = [float(item) for item in [*frames[:3], 1]]
    to_color = [float(item) for item in [*frames[3:6], 1]]
    from_rotation = [0.0]
    to_rotation = [solve(float(frames[6]), 60.0, 360.0, rounding=True)]
    curves = [
        solve(float(value), is_odd(index), 1.0, rounding=False)
        for index, value in enumerate(frames[7:])
    ]

    progress = Cubic(curves).get_value(target_time)
    color = [max(0.0, value) for value in interpolate(from_color, to_color, progress)]
    rotation = interpolate(from_rotation, to_rotation, progress)
    matrix = rotation_to_matrix(rotation[0])

    serialized = [format(int(js_round(value)), "x") for value in color[:-1]]
    for value in matrix:
        hex_value = float_to_hex(abs(round(value, 2)))
        if hex_value.startswith("."):
            serialized.append(f"0{hex_value}".lower())
        else:
            serialized.append(hex_value.lower() if hex_value else "0")
    serialized.extend(["0", "0"])
    return _SEPARATOR_RE.sub("", "".join(serialized))


def solve(value: float, minimum: float, maximum: float, *, rounding: bool) -> float:
    scaled = value * (maximum - minimum) / 255 + minimum
    return math.floor(scaled) if rounding else round(scaled, 2)


def is_odd(index: int) -> float:
    return -1.0 if index % 2 else 0.0


def interpolate(start: Sequence[float], end: Sequence[float], ratio: float) -> list[float]:
    if len(start) != len(end):
        raise ArgumentMismatchError(f"Mismatched interpolation args {list(start)} vs {list(end)}")
    return [start_value * (1 - ratio) + end_value * ratio for start_value, end_value in zip(start, end)]


def rotation_to_matrix(degrees: float) -> list[float]:
    radians = math.radians(degrees)
    return [math.cos(radians), -math.sin(radians), math.sin(radians), math.cos(radians)]


def js_round(value: float) -> float:
    """Half-up rounding as JavaScript's Math.round does it."""
    return math.floor(value + 0.5)


def float_to_hex(value: float, *, max_fraction_digits: int = 24) -> str:
    result: list[str] = []
    quotient = int(value)
    fraction = value - quotient

    while quotient > 0:
        quotient = int(value / 16)
        remainder = int(value - (float(quotient) * 16))
        result.insert(0, chr(remainder + 55) if remainder > 9 else str(remainder))
        value = float(quotient)

    if fraction == 0:
        return "".join(result)

    result.append(".")
    fraction_digits = 0
    while fraction > 0 and fraction_digits < max_fraction_digits:
        fraction *= 16
        integer_part = int(fraction)
        fraction -= float(integer_part)
        result.append(chr(integer_part + 55) if integer_part > 9 else str(integer_part))
        fraction_digits += 1

    return "".join(result)
