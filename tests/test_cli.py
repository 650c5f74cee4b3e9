import io

import pytest

import multicast_tester.cli as cli
from multicast_tester.cli import Console, build_parser, main, prompt_bind_address, prompt_mode
from multicast_tester.errors import BadArgumentsError, StdInError
from multicast_tester.ledger import SlotState
from multicast_tester.report import ProbeReport


def scripted(*answers):
    out, err = io.StringIO(), io.StringIO()
    lines = iter(answers)

    def read():
        try:
            return next(lines)
        except StopIteration:
            raise EOFError()

    return Console(read=read, out=out, err=err)


def test_parse_mode_flags():
    assert build_parser().parse_args(["--sender"]).mode == "sender"
    assert build_parser().parse_args(["--receiver"]).mode == "receiver"
    assert build_parser().parse_args([]).mode is None


def test_bad_arguments():
    with pytest.raises(BadArgumentsError):
        build_parser().parse_args(["--bogus"])
    with pytest.raises(BadArgumentsError):
        build_parser().parse_args(["--sender", "--receiver"])
    with pytest.raises(BadArgumentsError):
        build_parser().parse_args(["--bind", "999.1.1.1"])


def test_prompt_bind_address_retries():
    console = scripted("nope", "192.168.1.10\r")
    assert prompt_bind_address(console) == "192.168.1.10"
    assert "An improper IP address was entered, please try again!" in console.err.getvalue()


def test_prompt_bind_address_uses_hint_on_empty_answer():
    console = scripted("")
    assert prompt_bind_address(console, hint="10.1.1.5") == "10.1.1.5"


def test_prompt_mode():
    assert prompt_mode(scripted("x", "s")) == "sender"
    assert prompt_mode(scripted("R")) == "receiver"


def test_closed_stdin():
    with pytest.raises(StdInError):
        prompt_mode(scripted())


def test_main_runs_broadcaster(monkeypatch):
    calls = {}

    def fake_run(config, logger, wait_for_start=None):
        calls["config"] = config
        calls["wait"] = wait_for_start
        return ProbeReport((SlotState.ACKNOWLEDGED,) * 3 + (SlotState.UNACKNOWLEDGED,) * 7)

    monkeypatch.setattr(cli, "run_broadcaster", fake_run)
    monkeypatch.setattr(cli, "guess_primary_ipv4", lambda: None)
    console = scripted("192.168.1.10", "S")

    assert main(["--no-pause"], console=console) == 0

    out = console.out.getvalue()
    assert calls["config"].bind_ip == "192.168.1.10"
    assert calls["wait"] is None
    assert "Testing as the broadcaster!" in out
    assert "We saw responses to 3/10 of the multicast packets" in out
    assert "partially working" in out


def test_main_runs_receiver(monkeypatch):
    monkeypatch.setattr(cli, "run_receiver", lambda config, logger: 10)
    console = scripted("")

    assert main(["--receiver", "--bind", "192.168.1.20"], console=console) == 0
    assert "Test completed, press any key to exit!" in console.out.getvalue()


def test_main_reports_errors(monkeypatch):
    console = scripted()
    assert main(["--what"], console=console) == 1
    assert console.err.getvalue().strip() == "An error occured: Invalid CLI arguments were supplied!"


def test_list_interfaces(monkeypatch):
    monkeypatch.setattr(cli, "list_ipv4_interfaces", lambda include_loopback: [("lo", "127.0.0.1"), ("eth0", "10.0.0.2")])
    console = scripted()
    assert main(["--list-interfaces"], console=console) == 0
    assert "eth0" in console.out.getvalue()
