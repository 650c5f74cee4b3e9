import argparse
import sys
from typing import Callable, List, Optional, TextIO

from . import constants
from .config import ProbeConfig, build_config, parse_ipv4
from .errors import BadArgumentsError, MulticastTestError, StdInError
from .interfaces import guess_primary_ipv4, list_ipv4_interfaces
from .logger import ConsoleLogger, LogLevel
from .session import run_broadcaster, run_receiver

SENDER_MODE = "sender"
RECEIVER_MODE = "receiver"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise BadArgumentsError(ValueError(message))


class Console:
    """Line-oriented operator I/O. Swappable so prompts can be driven from tests."""
    def __init__(self, read: Callable[[], str] = input, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._read = read
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def print(self, msg: str = ""):
        print(msg, file=self.out, flush=True)

    def error(self, msg: str):
        print(msg, file=self.err, flush=True)

    def read_line(self) -> str:
        try:
            return self._read().strip("\r\n")
        except (EOFError, OSError) as e:
            raise StdInError(e) from e

    def separator(self):
        self.print(constants.SEPARATOR)

    def pause(self, msg: str):
        self.print(msg)
        self.read_line()


def _ipv4_arg(value: str) -> str:
    try:
        return parse_ipv4(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an IPv4 address")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="multicast-tester", description="Network Multicast Tester")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--sender", dest="mode", action="store_const", const=SENDER_MODE, help="Run as the broadcaster")
    mode.add_argument("--receiver", dest="mode", action="store_const", const=RECEIVER_MODE, help="Run as the receiver")
    parser.add_argument("--bind", type=_ipv4_arg, help="IPv4 address of this system (prompted for when omitted)")
    parser.add_argument("--config", help="JSON file with tester settings")
    parser.add_argument("--log-level", default="INFO", choices=[l.name for l in LogLevel], type=str.upper)
    parser.add_argument("--no-pause", action="store_true", help="Do not wait for key presses")
    parser.add_argument("--list-interfaces", action="store_true", help="List IPv4 interfaces and exit")
    return parser


def prompt_bind_address(console: Console, hint: Optional[str] = None) -> str:
    console.print("Please enter this systems in-use IPv4 address: ")
    if hint:
        console.print(f"(press enter to use the detected address {hint})")
    while True:
        answer = console.read_line().strip()
        if not answer and hint:
            return hint
        try:
            return parse_ipv4(answer)
        except ValueError:
            console.error("An improper IP address was entered, please try again!")


def prompt_mode(console: Console) -> str:
    console.print("No mode specified, falling back to selection!")
    while True:
        console.print("Enter 'S' for broadcaster mode or 'R' for receiver mode: ")
        choice = console.read_line().strip().upper()
        if choice == "S":
            return SENDER_MODE
        if choice == "R":
            return RECEIVER_MODE


def launch_broadcaster(config: ProbeConfig, console: Console, logger, pause: bool = True):
    console.separator()
    console.print("Testing as the broadcaster!")
    console.print("Make sure the listener is ready before starting")

    wait = (lambda: console.pause("Press any key to start tests: ")) if pause else None
    report = run_broadcaster(config, logger, wait_for_start=wait)

    console.separator()
    for line in report.lines():
        console.print(line)
    console.separator()
    if pause:
        console.pause("Test completed, press any key to exit...")
    return report


def launch_receiver(config: ProbeConfig, console: Console, logger, pause: bool = True):
    console.separator()
    console.print("Testing as the receiver!")
    console.separator()

    count = run_receiver(config, logger)

    console.separator()
    if pause:
        console.pause("Test completed, press any key to exit!")
    else:
        console.print("Test completed!")
    return count


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    console = console or Console()
    try:
        args = build_parser().parse_args(argv)

        if args.list_interfaces:
            for nic, ip in list_ipv4_interfaces(include_loopback=True):
                console.print(f"{nic:20} {ip}")
            return 0

        console.print("Network Multicast Tester")
        console.separator()

        logger = ConsoleLogger(LogLevel.parse(args.log_level), stream=console.out)
        bind_ip = args.bind or prompt_bind_address(console, guess_primary_ipv4())
        config = build_config(bind_ip, args.config)
        mode = args.mode or prompt_mode(console)

        if mode == SENDER_MODE:
            launch_broadcaster(config, console, logger, pause=not args.no_pause)
        else:
            launch_receiver(config, console, logger, pause=not args.no_pause)
        return 0
    except MulticastTestError as e:
        console.error(f"An error occured: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
