"""
Mode controller: Edit / Evaluate switching and formula evaluation.

Evaluation never raises for bad user input. It returns an Evaluation value
carrying either the truth value or one of the user-facing errors, which the
page shows inline.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from modal_playground.errors import (
    EvaluationError,
    ParseError,
    PlaygroundError,
    UnknownVariableError,
    ValidationError,
)
from modal_playground.logic.protocol import ModelChecker
from modal_playground.session import EditorSession, Mode

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r'\w+')

CHECK_MARK = '✓'
CROSS_MARK = '✗'


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating a formula at a state."""
    formula: str
    state_id: Optional[int] = None
    value: Optional[bool] = None
    display: str = ''
    error: Optional[PlaygroundError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def marker(self) -> str:
        if not self.ok:
            return ''
        return CHECK_MARK if self.value else CROSS_MARK

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return f'{self.marker} {self.display}'


def satisfaction_line(state_id: int, value: bool, formula_display: str) -> str:
    """e.g. 'w₁ ⊨ □p' or 'w₁ ⊭ □p'."""
    subscript = str(state_id).translate(str.maketrans('0123456789', '₀₁₂₃₄₅₆₇₈₉'))
    relation = '⊨' if value else '⊭'
    return f'w{subscript} {relation} {formula_display}'


def unknown_variables(text: str, allowed: List[str]) -> List[str]:
    return [token for token in _IDENTIFIER.findall(text) if token not in allowed]


class ModeController:
    """
    Switches the session between Edit and Evaluate.

    Args:
        session: the EditorSession to control
        checker: ModelChecker used for formula evaluation
        interaction: InteractionStateMachine whose gesture is reset on switches
        renderer: GraphRenderer whose node dragging follows the mode
    """

    def __init__(self, session: EditorSession, checker: ModelChecker,
                 interaction=None, renderer=None):
        self.session = session
        self.checker = checker
        self.interaction = interaction
        self.renderer = renderer

    @property
    def mode(self) -> Mode:
        return self.session.mode

    def set_mode(self, mode: Mode) -> None:
        session = self.session
        session.mode = mode
        session.clear_selection()
        if self.interaction is not None:
            self.interaction.reset()
        if mode is Mode.EVALUATE:
            session.formula_text = ''
            session.last_result = None
        if self.renderer is not None:
            self.renderer.set_node_drag(mode is Mode.EVALUATE)
            self.renderer.redraw(session)
        logger.info(f"Mode switched to {mode.value}")

    def toggle(self) -> Mode:
        self.set_mode(Mode.EVALUATE if self.mode is Mode.EDIT else Mode.EDIT)
        return self.mode

    # --- Variables panel ---

    def set_var_count(self, count: int) -> None:
        declared = len(self.session.model.propvars)
        if not 1 <= count <= declared:
            raise ValidationError(f"Variable count must be between 1 and {declared}")
        self.session.var_count = count
        if self.renderer is not None:
            self.renderer.redraw(self.session)

    def set_selected_valuation(self, engine, index: int, value: bool) -> None:
        """Set one variable of the selected state (Edit mode only)."""
        node = self.session.selected_node
        if self.mode is not Mode.EDIT:
            raise ValidationError("Valuations can only be changed in Edit mode")
        if node is None:
            raise ValidationError("No state selected")
        if not 0 <= index < self.session.var_count:
            raise ValidationError(f"Variable {index} is not active")
        engine.set_valuation(node.id, index, value)

    def assignment_label(self, node) -> str:
        """Active variables of a node, negated where false, e.g. '¬p, q'."""
        names = self.session.active_propvars
        return ', '.join(('' if node.valuation[i] else '¬') + name
                         for i, name in enumerate(names) if i < len(node.valuation))

    def selected_label(self) -> str:
        node = self.session.selected_node
        return f'State {node.id}' if node is not None else 'No state selected'

    def evaluate_label(self) -> str:
        node = self.session.selected_node
        return f'Evaluate at State {node.id}' if node is not None else 'Evaluate'

    # --- Evaluation ---

    def evaluate(self, text: Optional[str] = None) -> Evaluation:
        session = self.session
        if text is not None:
            session.formula_text = text
        formula = (session.formula_text or '').strip()
        result = self._evaluate(formula)
        session.last_result = result
        if not result.ok:
            logger.warning(f"Evaluation of '{formula}' rejected: {result.error.message}")
        return result

    def _evaluate(self, formula: str) -> Evaluation:
        session = self.session
        if not formula:
            return Evaluation(formula, error=ValidationError("No formula!"))
        if session.mode is not Mode.EVALUATE:
            return Evaluation(formula, error=ValidationError("Switch to Evaluate mode first"))
        node = session.selected_node
        if node is None:
            return Evaluation(formula, error=ValidationError("No state selected"))

        bad = unknown_variables(formula, session.active_propvars)
        if bad:
            return Evaluation(formula, node.id, error=UnknownVariableError(bad))

        try:
            ast = self.checker.parse(formula)
            value = bool(self.checker.evaluate(session.model, node.id, ast))
            display = self.checker.to_display_form(formula)
        except (ParseError, EvaluationError) as e:
            return Evaluation(formula, node.id, error=e)

        return Evaluation(formula, node.id, value, satisfaction_line(node.id, value, display))
