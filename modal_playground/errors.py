"""
Error taxonomy for the playground.

User-facing errors (ValidationError, UnknownVariableError, ParseError,
EvaluationError) are recoverable: they are shown inline and the session
stays usable. ContractViolation marks a caller bug inside the edit engine
and is meant to propagate.
"""

from typing import Iterable


class PlaygroundError(Exception):
    """Base class for every user-facing playground error."""

    kind = 'error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PlaygroundError):
    """Missing input: no formula entered, no state selected, wrong mode."""

    kind = 'validation'


class UnknownVariableError(PlaygroundError):
    """Formula mentions variables outside the active set."""

    kind = 'unknown_variable'

    def __init__(self, names: Iterable[str]):
        self.names = list(dict.fromkeys(names))
        super().__init__(f"Invalid variables in formula: {', '.join(self.names)}")


class ParseError(PlaygroundError):
    """Malformed formula syntax."""

    kind = 'parse'

    def __init__(self, message: str, position: int = -1):
        super().__init__(message)
        self.position = position


class EvaluationError(PlaygroundError):
    """The checker could not evaluate a (parsed) formula."""

    kind = 'evaluation'


class ContractViolation(AssertionError):
    """An edit operation was issued with a broken precondition."""


class TransitionNotFound(ContractViolation):
    def __init__(self, source: int, target: int):
        super().__init__(f"No transition {source} -> {target} to remove")
        self.source = source
        self.target = target
