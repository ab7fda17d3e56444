"""
Exceptions raised by the repeat HMM aligner.

All errors carry a message, an optional suggestion and an optional context
string so the pipeline can log them in one consistent format.
"""

from typing import Optional


class RepeatHMMError(Exception):
    """Base exception for all repeat_hmm errors.

    Args:
        message: Error message describing what went wrong
        suggestion: What the caller should do to fix the error
        context: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[str] = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context
        super().__init__(self.formatted())

    def formatted(self) -> str:
        """Get fully formatted error message for display."""
        msg = f"[ERROR] {self.message}"

        if self.context:
            msg += f"\n  Context: {self.context}"

        if self.suggestion:
            msg += f"\n  Suggestion: {self.suggestion}"

        return msg

    def __str__(self) -> str:
        return self.formatted()


class InputTooLong(RepeatHMMError, ValueError):
    """Sequence longer than the fixed DP dimension.

    Args:
        what: Which input was too long ("read", "motif")
        length: Actual length
        max_length: Largest supported length
    """

    def __init__(self, what: str, length: int, max_length: int):
        super().__init__(
            f"{what.capitalize()} of length {length} exceeds the {max_length} currently supported",
            suggestion=f"Truncate the {what} to at most {max_length} bases before aligning",
        )
        self.what = what
        self.length = length
        self.max_length = max_length


class InvalidInput(RepeatHMMError, ValueError):
    """Malformed read, quality string or motif."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, suggestion=suggestion)


class TracebackInvariantViolation(RepeatHMMError, RuntimeError):
    """Traceback did not reach the start state.

    Indicates a corrupted move table or transition matrix.

    Args:
        reason: What went wrong during the walk
        position: (probe, read) cell where the walk stopped
    """

    def __init__(self, reason: str, position: Optional[tuple] = None):
        super().__init__(
            f"Traceback failed: {reason}",
            context=f"Stopped at cell {position}" if position is not None else None,
        )
        self.reason = reason
        self.position = position


class ConfigError(RepeatHMMError, ValueError):
    """Invalid model or pipeline configuration value.

    Args:
        param_name: Name of the parameter
        value: Actual value provided
        expected: Expected value or range
    """

    def __init__(self, param_name: str, value, expected: str):
        super().__init__(
            f"Invalid value for {param_name}: {value}",
            suggestion=f"Expected: {expected}",
        )
        self.param_name = param_name
        self.value = value
        self.expected = expected


__all__ = [
    'RepeatHMMError',
    'InputTooLong',
    'InvalidInput',
    'TracebackInvariantViolation',
    'ConfigError',
]
