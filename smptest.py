#!/usr/bin/env python3
"""SMP pairing conformance test tool."""

import argparse
import logging
import sys

from channel.serial_link import SerialChannel
from common.connection import Role
from common.device import open_serial
from common.protocol import DEFAULT_BAUDRATE, DEFAULT_CASE_TIMEOUT_S
from harness.cases import CATALOG, TestCase, select_cases
from harness.runner import (
    CaseRunner,
    ExitCode,
    LinkFactory,
    exit_code,
    loopback_link,
    serial_link_factory,
)
from peer.runner import run_peer
from session.report import SuiteReport

logger = logging.getLogger(__name__)


def list_cases(cases: list[TestCase]) -> int:
    """Print the selected cases."""
    for case in cases:
        print(f"{case.name}  [{case.role.value}, {len(case.script)} rounds]")
        if case.description:
            print(f"    {case.description}")
    return ExitCode.SUCCESS if cases else ExitCode.NO_CASES


def run_cases(cases: list[TestCase], link_factory: LinkFactory, timeout_s: float) -> int:
    """Run the selected cases and print the suite report."""
    if not cases:
        logger.warning("No test cases selected")
        return ExitCode.NO_CASES

    runner = CaseRunner(link_factory, timeout_s=timeout_s)
    results = runner.run_suite(cases)
    report = SuiteReport(results=results)
    report.print()
    return exit_code(report)


def run_serial(
    cases: list[TestCase], device: str, baudrate: int, rtscts: bool, timeout_s: float
) -> int:
    """Run the selected cases against a remote peer on a serial port."""
    try:
        ser = open_serial(device, baudrate, rtscts)
    except Exception as e:
        logger.error(f"Failed to open serial port: {e}")
        return ExitCode.SETUP_FAILED

    try:
        channel = SerialChannel(ser)
        return run_cases(cases, serial_link_factory(channel), timeout_s)
    finally:
        ser.close()
        logger.info(f"Closed {device}")


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    """Add case filter arguments to a parser."""
    parser.add_argument(
        "-k",
        "--filter",
        type=str,
        default=None,
        help="Only cases whose name contains this text (case-insensitive)",
    )
    parser.add_argument(
        "-r",
        "--role",
        type=str,
        choices=[r.value for r in Role],
        default=None,
        help="Only cases where the harness plays this role",
    )


def _add_serial_args(parser: argparse.ArgumentParser, required: bool) -> None:
    """Add device, baudrate and flow control arguments to a parser."""
    parser.add_argument(
        "-d",
        "--device",
        type=str,
        required=required,
        help="Serial device path (e.g., /dev/ttyUSB0)",
    )
    parser.add_argument(
        "-b",
        "--baudrate",
        type=int,
        default=DEFAULT_BAUDRATE,
        help=f"Baud rate (default: {DEFAULT_BAUDRATE})",
    )
    parser.add_argument(
        "-f",
        "--flow-control",
        type=str,
        choices=["none", "ctsrts"],
        default="none",
        help="Flow control (default: none)",
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Scripted SMP pairing conformance tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                              List test cases
  %(prog)s run loopback                      Run all cases against the simulated device
  %(prog)s run -d /dev/ttyUSB0 -k server     Run server cases against a remote peer
  %(prog)s peer -d /dev/ttyUSB1              Play the device under test over serial
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List test cases")
    _add_selection_args(list_parser)

    run_parser = subparsers.add_parser("run", help="Run test cases")
    run_parser.add_argument(
        "target",
        nargs="?",
        choices=["loopback"],
        help="Run against the in-memory simulated device",
    )
    _add_selection_args(run_parser)
    _add_serial_args(run_parser, required=False)
    run_parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=DEFAULT_CASE_TIMEOUT_S,
        help=f"Per-case deadline in seconds (default: {DEFAULT_CASE_TIMEOUT_S})",
    )

    peer_parser = subparsers.add_parser("peer", help="Play the device under test over serial")
    _add_serial_args(peer_parser, required=True)

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.command == "peer":
        return run_peer(args.device, args.baudrate, args.flow_control == "ctsrts")

    if args.command not in ("list", "run"):
        parser.print_help()
        return 2

    role = Role(args.role) if args.role else None
    cases = select_cases(CATALOG, name_filter=args.filter, role=role)

    if args.command == "list":
        return list_cases(cases)

    if args.target == "loopback":
        return run_cases(cases, loopback_link, args.timeout)

    if args.device:
        return run_serial(
            cases, args.device, args.baudrate, args.flow_control == "ctsrts", args.timeout
        )

    run_parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
