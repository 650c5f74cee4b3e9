import pytest

from mocks import MockConn, MockDatagramSocket, MockListenSocket
from multicast_tester.collector import AckCollector
from multicast_tester.config import ProbeConfig
from multicast_tester.emitter import ProbeEmitter, ProbeKind, probe_kind
from multicast_tester.errors import ReadDataError, SendDataError
from multicast_tester.ledger import AckLedger
from multicast_tester.logger import LogLevel
from multicast_tester.report import Verdict
from multicast_tester.tasks import BackgroundTask


@pytest.fixture
def config():
    return ProbeConfig("192.168.1.10", send_interval=1.0)


def make_emitter(config, logger, sock=None):
    ledger = AckLedger()
    sleeps = []
    emitter = ProbeEmitter(config, ledger, logger, sock=sock or MockDatagramSocket(), sleep=sleeps.append)
    return emitter, ledger, sleeps


def start_collector(ledger, logger, acks=0, conns=None, idle=True):
    conns = [MockConn() for _ in range(acks)] if conns is None else conns
    collector = AckCollector(ledger, "192.168.1.10", 14000, logger,
                             sock=MockListenSocket(conns, idle=idle), poll_interval=0.01)
    return collector, BackgroundTask.spawn("response_listener", collector.run)


def test_payload_kinds():
    kinds = [probe_kind(i, 10) for i in range(10)]
    assert kinds[:9] == [ProbeKind.MARKER] * 9
    assert kinds[9] == ProbeKind.TERMINAL_MARKER
    assert ProbeKind.MARKER.payload == b"General Kenobi!"
    assert ProbeKind.TERMINAL_MARKER.payload == b"Until next time!"


def test_sends_exactly_ten_paced_datagrams(config, logger):
    emitter, ledger, sleeps = make_emitter(config, logger)
    sock = emitter.sock

    emitter.run(*start_collector(ledger, logger))

    assert len(sock.sent) == 10
    assert all(addr == ("239.0.0.3", 14000) for _, addr in sock.sent)
    assert [d for d, _ in sock.sent[:9]] == [b"General Kenobi!"] * 9
    assert sock.sent[9][0] == b"Until next time!"
    assert sleeps == [1.0] * 10
    assert sock.closed


def test_partial_acknowledgment_report(config, logger):
    emitter, ledger, _ = make_emitter(config, logger)
    collector, task = start_collector(ledger, logger, acks=3)

    report = emitter.run(collector, task)

    assert not task.thread.is_alive()
    assert collector.sock.closed
    assert report.acknowledged == 3
    assert report.verdict == Verdict.PARTIALLY_WORKING
    assert "We saw responses to 3/10 of the multicast packets" in report.lines()


def test_full_and_empty_reports(config, logger):
    emitter, ledger, _ = make_emitter(config, logger)
    assert emitter.run(*start_collector(ledger, logger, acks=10)).verdict == Verdict.WORKING

    emitter, ledger, _ = make_emitter(config, logger)
    report = emitter.run(*start_collector(ledger, logger, acks=0))
    assert report.verdict == Verdict.NOT_WORKING
    assert report.acknowledged == 0


def test_send_failure_aborts_batch_and_ends_collector(config, logger):
    sock = MockDatagramSocket(fail_send_at=4)
    emitter, ledger, sleeps = make_emitter(config, logger, sock=sock)
    collector, task = start_collector(ledger, logger, acks=2)

    with pytest.raises(SendDataError):
        emitter.run(collector, task)

    assert len(sock.sent) == 4
    assert emitter.sent == 4
    assert len(sleeps) == 4
    assert not task.thread.is_alive()
    assert collector.sock.closed


def test_collector_failure_propagates(config, logger):
    emitter, ledger, _ = make_emitter(config, logger)
    collector, task = start_collector(ledger, logger, conns=[MockConn(fail=True)], idle=False)
    with pytest.raises(ReadDataError):
        emitter.run(collector, task)


def test_send_failure_wins_over_collector_failure(config, logger):
    emitter, ledger, _ = make_emitter(config, logger, sock=MockDatagramSocket(fail_send_at=0))
    collector, task = start_collector(ledger, logger, conns=[MockConn(fail=True)], idle=False)

    with pytest.raises(SendDataError):
        emitter.run(collector, task)

    warnings = [m for lvl, c, m in logger.records if lvl == LogLevel.WARN and c == "Emitter"]
    assert warnings == ["Response listener also failed: Failed to read data from a peer!"]


def test_packet_dump_logs_every_datagram(logger):
    config = ProbeConfig("192.168.1.10", send_interval=0, packet_dump=True)
    emitter, ledger, _ = make_emitter(config, logger)
    emitter.run(*start_collector(ledger, logger))
    dumps = logger.messages("DUMP")
    assert len(dumps) == 10
    assert "TERMINAL_MARKER" in dumps[-1]
