import datetime
import sys
from enum import Enum
from typing import Optional, TextIO

class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

    @classmethod
    def parse(cls, name: str) -> 'LogLevel':
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level '{name}'")

class ILogger:
    def log(self, level: LogLevel, component: str, msg: str):
        pass

class ConsoleLogger(ILogger):
    def __init__(self, min_level: LogLevel = LogLevel.INFO, stream: Optional[TextIO] = None):
        self.min_level = min_level
        self.stream = stream

    def log(self, level: LogLevel, component: str, msg: str):
        if level.value < self.min_level.value:
            return
        ts = datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]
        print(f"[{ts}] [{level.name:5}] [{component}] {msg}", file=self.stream or sys.stdout)
