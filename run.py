from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Callable

from src.client.home_page import create_transaction
from src.exceptions import TransactionError
from src.logging_utils import Logger, TeeStream, build_logger
from src.transaction.x_transaction import XClientTransaction, decode_transaction_id


TransactionFactory = Callable[[Logger], XClientTransaction]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate an X x-client-transaction-id header value."
    )
    parser.add_argument("method", help="HTTP method of the target request, e.g. GET")
    parser.add_argument("path", help="Request path, e.g. /i/api/graphql/<id>/TweetDetail")
    parser.add_argument(
        "--time-now",
        type=int,
        default=None,
        help="Seconds since the transaction epoch (default: wall clock)",
    )
    parser.add_argument(
        "--random-num",
        type=int,
        default=None,
        help="Fixed mask byte 0-255 for reproducible output",
    )
    parser.add_argument(
        "--log-file",
        default="",
        help="Optional file that receives a copy of stdout/stderr",
    )
    parser.add_argument(
        "--decode",
        action="store_true",
        help="Also print the unmasked payload of the generated id",
    )
    return parser.parse_args(argv)


def _default_factory(logger: Logger) -> XClientTransaction:
    return create_transaction(logger=logger)


def _generate(args: argparse.Namespace, factory: TransactionFactory) -> int:
    logger = build_logger()
    try:
        transaction = factory(logger)
        transaction_id = transaction.generate_transaction_id(
            method=args.method,
            path=args.path,
            time_now=args.time_now,
            random_num=args.random_num,
        )
        decoded = decode_transaction_id(transaction_id) if args.decode else None
    except TransactionError as exc:
        logger(f"[错误] {type(exc).__name__}: {exc}")
        return 1

    print(transaction_id, flush=True)
    if decoded is not None:
        logger(f"[解码] random_byte={decoded.random_byte} payload={decoded.payload.hex()}")
    return 0


def main(argv: list[str] | None = None, *, factory: TransactionFactory = _default_factory) -> int:
    args = _parse_args(argv)
    if args.random_num is not None and not 0 <= args.random_num <= 255:
        print("[错误] --random-num 必须在 0~255 之间", file=sys.stderr)
        return 2

    if not args.log_file:
        return _generate(args, factory)

    log_path = Path(args.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    original_stdout = sys.stdout
    original_stderr = sys.stderr
    with log_path.open("w", encoding="utf-8") as log_fp:
        sys.stdout = TeeStream(original_stdout, log_fp)
        sys.stderr = TeeStream(original_stderr, log_fp)
        try:
            print(f"[日志] 运行日志文件: {log_path}", file=sys.stderr, flush=True)
            return _generate(args, factory)
        finally:
            sys.stdout = original_stdout
            sys.stderr = original_stderr


if __name__ == "__main__":
    raise SystemExit(main())
