from __future__ import annotations
from enum import Enum


class ErrorKind(Enum):
    """
    Failure categories of a single transform request.
    The value doubles as the process exit code of the command line tool.
    """
    DECODE_FAILURE = 2
    ALLOCATION_FAILURE = 3
    UNSUPPORTED_CHANNEL_LAYOUT = 4
    ENCODE_FAILURE = 5
    INVALID_PARAMETER = 6
    CONFIGURATION_ERROR = 7

    @property
    def exit_code(self) -> int:
        return self.value


class TransformError(Exception):
    """Base class, every subclass is tagged with its ErrorKind."""
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.name}] {self.message}"


class DecodeFailure(TransformError):
    kind = ErrorKind.DECODE_FAILURE


class AllocationFailure(TransformError):
    kind = ErrorKind.ALLOCATION_FAILURE


class UnsupportedChannelLayout(TransformError):
    kind = ErrorKind.UNSUPPORTED_CHANNEL_LAYOUT


class EncodeFailure(TransformError):
    kind = ErrorKind.ENCODE_FAILURE


class InvalidParameter(TransformError):
    kind = ErrorKind.INVALID_PARAMETER


class ConfigurationError(TransformError):
    kind = ErrorKind.CONFIGURATION_ERROR
