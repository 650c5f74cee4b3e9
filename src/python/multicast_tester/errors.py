from typing import Optional


class MulticastTestError(Exception):
    """Base class for every failure that aborts a probe session."""
    message = "Multicast test failed"

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(self.describe())

    def describe(self) -> str:
        return self.message


class SocketBindError(MulticastTestError):
    message = "Failed to bind to a socket"

    def describe(self) -> str:
        return f"{self.message}: {self.cause}"


class PeerConnectionError(MulticastTestError):
    message = "Failed to connect to a peer"

    def describe(self) -> str:
        return f"{self.message}: {self.cause}"


class ReadDataError(MulticastTestError):
    message = "Failed to read data from a peer!"


class SendDataError(MulticastTestError):
    message = "Failed to respond with data to a caster, check your connection!"


class BadArgumentsError(MulticastTestError):
    message = "Invalid CLI arguments were supplied!"


class StdInError(MulticastTestError):
    message = "Failed to read data from the command line!"


class ConfigError(MulticastTestError):
    message = "Invalid configuration"

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        self.detail = detail
        super().__init__(cause)

    def describe(self) -> str:
        return f"{self.message}: {self.detail}"
