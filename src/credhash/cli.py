"""Command-line interface for hashing and verifying passwords."""

import argparse
import logging
import sys

import credhash

from .constants import FIELD_SEPARATOR
from .errors import CredentialError, InvalidParameters
from .hasher import CredentialHasher
from .params import ARGON2ID_LOW_MEMORY, SCRYPT_INTERACTIVE, Algorithm, ParameterSet
from .tuning import calibrate

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_PROFILES = {
    Algorithm.SCRYPT: SCRYPT_INTERACTIVE,
    Algorithm.ARGON2ID: ARGON2ID_LOW_MEMORY,
}


def _add_param_options(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        "--algorithm", choices=[a.value for a in Algorithm], default=None
    )
    sub.add_argument("--cost", type=int, default=None)
    sub.add_argument("--block-size", type=int, default=None)
    sub.add_argument("--parallelism", type=int, default=None)


def _recommended(parser: argparse.ArgumentParser, args) -> ParameterSet:
    """Return parameters selected by the command-line options."""

    base = ParameterSet.current_recommended()
    if args.algorithm is not None and args.algorithm != base.algorithm.value:
        base = _PROFILES[Algorithm(args.algorithm)]
    changes = {
        name: value
        for name, value in (
            ("cost_n", args.cost),
            ("block_size_r", args.block_size),
            ("parallelism_p", args.parallelism),
        )
        if value is not None
    }
    try:
        return base.replace(**changes)
    except InvalidParameters as exc:
        parser.error(str(exc))


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and hash, verify or calibrate.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        int: ``0`` on success, ``1`` when password verification fails and
        ``2`` when the token or parameters are rejected.
    """

    parser = argparse.ArgumentParser(prog="credhash")
    parser.add_argument("--version", action="version", version=credhash.__version__)
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    h = sub.add_parser("hash")
    h.add_argument("password")
    _add_param_options(h)

    v = sub.add_parser("verify")
    v.add_argument("password")
    v.add_argument("token")
    _add_param_options(v)

    c = sub.add_parser("calibrate")
    c.add_argument("--target-ms", type=int, default=250)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT)

    if args.cmd == "calibrate":
        if args.target_ms <= 0:
            parser.error("--target-ms must be positive")
        try:
            params = calibrate(args.target_ms / 1000)
        except CredentialError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        print(
            FIELD_SEPARATOR.join(
                [
                    params.algorithm.value,
                    str(params.cost_n),
                    str(params.block_size_r),
                    str(params.parallelism_p),
                ]
            )
        )
        return 0

    try:
        hasher = CredentialHasher(recommended=_recommended(parser, args))
        if args.cmd == "hash":
            print(hasher.enroll(args.password))
            return 0
        result = hasher.verify(args.password, args.token)
    except CredentialError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if not result.matched:
        print("NOPE")
        return 1
    print("OK upgrade" if result.needs_upgrade else "OK")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
