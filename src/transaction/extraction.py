"""Pull the hidden key material out of the home page and on-demand script."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import re

from src.config import DEFAULT_ONDEMAND_FILE_URL, FRAME_ID_PREFIX, VERIFICATION_META_NAME
from src.exceptions import ExtractionError
from src.transaction.markup import MarkupDocument


ON_DEMAND_FILE_REGEX = re.compile(r"""['"]ondemand\.s['"]:\s*['"](\w+)['"]""")
INDICES_REGEX = re.compile(r"\(\w\[(\d{1,2})\],\s*16\)")
_NON_DIGIT_RE = re.compile(r"[^\d]+")

# Leading "M 10,30 C" move command in front of the curve rows.
PATH_PREFIX_LENGTH = 9
FRAME_SELECTOR_BYTE = 5


@dataclass(frozen=True)
class OnDemandIndices:
    """Indices into the key bytes found in the on-demand script."""

    row_index: int
    key_byte_indices: tuple[int, ...]


def extract_ondemand_hash(html: str) -> str | None:
    match = ON_DEMAND_FILE_REGEX.search(html)
    if not match or not match.group(1):
        return None
    return match.group(1)


def extract_ondemand_file_url(document: MarkupDocument) -> str | None:
    filename = extract_ondemand_hash(document.source())
    if filename is None:
        return None
    return DEFAULT_ONDEMAND_FILE_URL.format(filename=filename)


def extract_indices(ondemand_script: str) -> OnDemandIndices:
    """First match selects the grid row, the rest feed the frame time."""
    candidates = [int(match.group(1)) for match in INDICES_REGEX.finditer(ondemand_script)]
    if len(candidates) < 2:
        raise ExtractionError("Could not extract key-byte indices from ondemand script.")
    return OnDemandIndices(row_index=candidates[0], key_byte_indices=tuple(candidates[1:]))


def extract_verification_key(document: MarkupDocument) -> str:
    value = document.meta_content(VERIFICATION_META_NAME)
    if value is None:
        raise ExtractionError(f"Could not find {VERIFICATION_META_NAME} meta key.")
    if not value:
        raise ExtractionError(f"{VERIFICATION_META_NAME} key is empty.")
    return value


def decode_key_bytes(key: str) -> tuple[int, ...]:
    try:
        padded = key + "=" * (-len(key) % 4)
        return tuple(base64.b64decode(padded.encode("utf-8")))
    except (binascii.Error, ValueError) as exc:
        raise ExtractionError(f"Verification key is not valid base64: {key!r}") from exc


def select_frame_grid(document: MarkupDocument, key_bytes: tuple[int, ...]) -> list[list[int]]:
    """Pick the animation frame chosen by the key and parse its path data."""
    frames = document.elements_by_id_prefix(FRAME_ID_PREFIX)
    if not frames:
        raise ExtractionError(f"Could not find {FRAME_ID_PREFIX} frames in home page.")
    if len(key_bytes) <= FRAME_SELECTOR_BYTE:
        raise ExtractionError("Verification key is too short to select a frame.")
    frame_index = key_bytes[FRAME_SELECTOR_BYTE] % 4
    if frame_index >= len(frames):
        raise ExtractionError(f"Frame index {frame_index} out of range ({len(frames)} frames).")
    frame = frames[frame_index]

    groups = document.child_elements(frame)
    if not groups:
        raise ExtractionError(f"{FRAME_ID_PREFIX} frame has no children.")
    paths = document.child_elements(groups[0])
    if len(paths) < 2:
        raise ExtractionError(f"{FRAME_ID_PREFIX} frame is missing expected path nodes.")

    path_data = document.attribute(paths[1], "d")
    if not path_data:
        raise ExtractionError(f"{FRAME_ID_PREFIX} path has no 'd' attribute.")
    return parse_frame_grid(path_data)


def parse_frame_grid(path_data: str) -> list[list[int]]:
    if len(path_data) <= PATH_PREFIX_LENGTH:
        raise ExtractionError(f"{FRAME_ID_PREFIX} path data is empty.")

    rows: list[list[int]] = []
    for segment in path_data[PATH_PREFIX_LENGTH:].split("C"):
        values = _NON_DIGIT_RE.sub(" ", segment).split()
        if values:
            rows.append([int(value) for value in values])
    if not rows:
        raise ExtractionError("Could not parse animation frame rows.")
    return rows
