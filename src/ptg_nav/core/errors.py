from __future__ import annotations


class PTGError(Exception):
    """Base class for all trajectory-generator errors."""


class ConfigurationError(PTGError, ValueError):
    """Missing or invalid parameter, unknown collision behavior or family."""


class CodecError(PTGError, ValueError):
    """Malformed serialized parameter buffer."""


class UnsupportedVersionError(CodecError):
    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported serialization version: {version}")
        self.version = version


class ContractViolation(PTGError, RuntimeError):
    """Programming error: the caller broke an operation's precondition."""


class NotInitializedError(ContractViolation):
    pass


class PathIndexError(ContractViolation, IndexError):
    pass
