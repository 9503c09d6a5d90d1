"""
ModelChecker Protocol Definition.

The playground depends on formula parsing and truth evaluation only through
this interface, so tests can swap in a stub checker.
"""

from typing import Any, Protocol, runtime_checkable

from modal_playground.model import RelationalModel


@runtime_checkable
class ModelChecker(Protocol):
    """
    Abstract protocol for modal-logic checkers.
    """

    def parse(self, text: str) -> Any:
        """
        Parse formula text into an AST.

        Raises:
            ParseError: on malformed syntax
        """
        ...

    def evaluate(self, model: RelationalModel, state_id: int, ast: Any) -> bool:
        """
        Decide whether the formula holds at a state of the model.

        Raises:
            EvaluationError: on an ill-formed AST or an unknown state/variable
        """
        ...

    def to_display_form(self, text: str) -> str:
        """Return a typeset rendition of the formula text."""
        ...
