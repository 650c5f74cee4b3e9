from .collector import AckCollector
from .config import ProbeConfig, build_config
from .emitter import ProbeEmitter, ProbeKind
from .errors import (MulticastTestError, SocketBindError, PeerConnectionError, ReadDataError,
                     SendDataError, BadArgumentsError, StdInError, ConfigError)
from .ledger import AckLedger, SlotState
from .listener import MulticastListener
from .logger import LogLevel, ILogger, ConsoleLogger
from .report import ProbeReport, Verdict
from .session import run_broadcaster, run_receiver
from .tasks import BackgroundTask

__version__ = "0.1.0"
