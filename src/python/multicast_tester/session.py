import socket
from typing import Callable, Optional

from .collector import AckCollector
from .config import ProbeConfig
from .emitter import ProbeEmitter
from .ledger import AckLedger
from .listener import MulticastListener
from .logger import ConsoleLogger, ILogger, LogLevel
from .report import ProbeReport
from .tasks import BackgroundTask


def run_broadcaster(config: ProbeConfig, logger: Optional[ILogger] = None,
                    wait_for_start: Optional[Callable[[], None]] = None,
                    sender_sock: Optional[socket.socket] = None) -> ProbeReport:
    """
    Runs one probe session as the broadcaster.

    The acknowledgment listener is bound on this thread before the collector task
    starts, so a busy address fails the session before any probe is sent.
    """
    logger = logger or ConsoleLogger()
    ledger = AckLedger()
    collector = AckCollector(ledger, config.bind_ip, config.port, logger)
    collector.bind()

    task = BackgroundTask.spawn("response_listener", collector.run)
    logger.log(LogLevel.INFO, "Session", "Response listener started")

    if wait_for_start:
        wait_for_start()

    emitter = ProbeEmitter(config, ledger, logger, sock=sender_sock)
    report = emitter.run(collector, task)
    logger.log(LogLevel.INFO, "Session", f"Probe session finished: {report.acknowledged}/{report.total} acknowledged")
    return report


def run_receiver(config: ProbeConfig, logger: Optional[ILogger] = None,
                 listener: Optional[MulticastListener] = None) -> int:
    logger = logger or ConsoleLogger()
    listener = listener or MulticastListener(config, logger)
    count = listener.run()
    logger.log(LogLevel.INFO, "Session", f"Acknowledged {count} multicast packets")
    return count
