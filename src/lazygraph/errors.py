from __future__ import annotations


class LazyGraphError(Exception):
    """Base error with a short machine-readable code."""

    def __init__(self, message: str, code: str = "ELAZYGRAPH") -> None:
        super().__init__(message)
        self.code = code


class EncodingError(LazyGraphError):
    """Host value cannot be represented as a tensor."""

    def __init__(self, message: str, code: str = "EENCODE") -> None:
        super().__init__(message, code=code)


class BuildError(LazyGraphError):
    """Engine rejected an operation while a deferred node was being resolved."""

    def __init__(
        self, message: str, code: str = "EBUILD", op_name: str | None = None
    ) -> None:
        super().__init__(message, code=code)
        self.op_name = op_name


class ExecutionError(LazyGraphError):
    """Failure while a session executes fetches."""

    def __init__(
        self, message: str, code: str = "EEXEC", op_name: str | None = None
    ) -> None:
        super().__init__(message, code=code)
        self.op_name = op_name


class EngineNotFoundError(LazyGraphError):
    def __init__(self, message: str, code: str = "EENGINE") -> None:
        super().__init__(message, code=code)


class ProgramError(LazyGraphError):
    def __init__(self, message: str, code: str = "EPROGRAM") -> None:
        super().__init__(message, code=code)
