from .clock import BlockClock
from .errors import ErrorCode, ErrorKind, Result

__all__ = ["BlockClock", "ErrorCode", "ErrorKind", "Result"]
