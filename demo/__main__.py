#!/usr/bin/env python3
"""
Command-line entry point for the xc220b3 demo.
"""

import argparse
import sys
from typing import List, Optional

from xc220b3.config import ConfigurationError, DemoConfig, configure_logging
from xc220b3.primitives import CryptoError

from .driver import run_demo, run_interactive


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xc220b3-demo",
        description="Exchange keys between two in-process sessions and send an encrypted message"
    )
    parser.add_argument("--message", help="Message to encrypt (default: Hello)")
    parser.add_argument("--tamper-count", type=int, help="Bytes to overwrite in the tampered copy")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    parser.add_argument(
        "--interactive",
        action="store_true",
        default=None,
        help="Type messages interactively instead of running the scripted demo"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = DemoConfig.from_env(
            message=args.message,
            tamper_count=args.tamper_count,
            log_level=args.log_level,
            interactive=args.interactive
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)

    try:
        if config.interactive:
            run_interactive(config)
        else:
            run_demo(config)
    except CryptoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")

    return 0


if __name__ == "__main__":
    sys.exit(main())
