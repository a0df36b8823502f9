"""In-repo generator for X x-client-transaction-id header."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import hashlib
import math
import random
import time
from typing import Any, Callable

from src.config import (
    DEFAULT_ADDITIONAL_RANDOM_NUMBER,
    DEFAULT_RANDOM_KEYWORD,
    EPOCH_OFFSET_SECONDS,
)
from src.exceptions import ExtractionError, TransactionDecodeError
from src.transaction.animation import build_animation_key
from src.transaction.extraction import (
    decode_key_bytes,
    extract_indices,
    extract_verification_key,
    select_frame_grid,
)
from src.transaction.markup import MarkupDocument


RandomByteSource = Callable[[], int]
DIGEST_PREFIX_LENGTH = 16


@dataclass(frozen=True)
class DecodedTransaction:
    """Unmasked content of a transaction id."""

    random_byte: int
    payload: bytes


def _default_random_byte() -> int:
    return random.randint(0, 255)


def current_time_offset() -> int:
    return math.floor(time.time() - EPOCH_OFFSET_SECONDS)


def build_hash_input(
    method: str,
    path: str,
    time_now: int,
    animation_key: str,
    *,
    random_keyword: str = DEFAULT_RANDOM_KEYWORD,
) -> str:
    return f"{method}!{path}!{time_now}{random_keyword}{animation_key}"


def decode_transaction_id(transaction_id: str) -> DecodedTransaction:
    padded = transaction_id + "=" * (-len(transaction_id) % 4)
    try:
        raw = base64.b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise TransactionDecodeError(f"Transaction id is not valid base64: {transaction_id!r}") from exc
    if not raw:
        raise TransactionDecodeError("Transaction id is empty.")
    random_byte = raw[0]
    return DecodedTransaction(
        random_byte=random_byte,
        payload=bytes(item ^ random_byte for item in raw[1:]),
    )


class XClientTransaction:
    """Generate x-client-transaction-id with in-repo algorithm.

    Key bytes, indices and the animation key are derived once here; generating
    ids afterwards only reads that state.
    """

    def __init__(
        self,
        *,
        home_page: MarkupDocument,
        ondemand_script: str,
        random_keyword: str = DEFAULT_RANDOM_KEYWORD,
        random_number: int = DEFAULT_ADDITIONAL_RANDOM_NUMBER,
        random_byte: RandomByteSource | None = None,
    ) -> None:
        if not isinstance(ondemand_script, str):
            raise TypeError(f"ondemand_script must be str, got: {type(ondemand_script).__name__}")

        self.random_keyword = random_keyword
        self.random_number = random_number
        self._random_byte = random_byte or _default_random_byte

        indices = extract_indices(ondemand_script)
        self.row_index = indices.row_index
        self.key_byte_indices = indices.key_byte_indices
        self.key = extract_verification_key(home_page)
        self.key_bytes = decode_key_bytes(self.key)
        if not self.key_bytes:
            raise ExtractionError("twitter-site-verification key decodes to no bytes.")
        grid = select_frame_grid(home_page, self.key_bytes)
        self.animation_key = build_animation_key(self.key_bytes, indices, grid)

    def generate_transaction_id(
        self,
        *,
        method: str,
        path: str,
        time_now: int | None = None,
        random_num: int | None = None,
    ) -> str:
        unix_delta_seconds = time_now if time_now is not None else current_time_offset()
        time_now_bytes = [(unix_delta_seconds >> (index * 8)) & 0xFF for index in range(4)]
        hash_input = build_hash_input(
            method,
            path,
            unix_delta_seconds,
            self.animation_key,
            random_keyword=self.random_keyword,
        )
        digest_bytes = list(hashlib.sha256(hash_input.encode()).digest())
        random_byte = random_num if random_num is not None else self._random_byte()
        if not 0 <= random_byte <= 255:
            raise ValueError(f"random byte out of range: {random_byte}")
        payload = [
            *self.key_bytes,
            *time_now_bytes,
            *digest_bytes[:DIGEST_PREFIX_LENGTH],
            self.random_number,
        ]
        obfuscated = bytearray([random_byte, *[item ^ random_byte for item in payload]])
        return base64.b64encode(obfuscated).decode().rstrip("=")

    def describe(self) -> dict[str, Any]:
        """Helper for local diagnostics."""
        return {
            "row_index": self.row_index,
            "key_byte_indices": list(self.key_byte_indices),
            "key_len": len(self.key_bytes),
            "animation_key_len": len(self.animation_key),
        }
