"""
Logical Kripke model: propositional variables, per-state valuations and the
accessibility relation as adjacency lists.

State ids are list indices. Deleting a state tombstones its slot instead of
removing it, so ids stay stable and are never handed out twice.
"""

import logging
from typing import List, Optional, Sequence

from modal_playground.errors import ContractViolation, TransitionNotFound

logger = logging.getLogger(__name__)


class RelationalModel:
    """
    A Kripke model in the layout the evaluator reads:

      propvars  = ['p', 'q', ...]
      states    = [[False, True, ...], ...]   # one vector per state id
      relation  = [[1], [1, 2], []]           # successors per state id
    """

    def __init__(self, propvars: Sequence[str]):
        self.propvars: List[str] = list(propvars)
        self.states: List[List[bool]] = []
        self.relation: List[List[int]] = []
        self._tombstones = set()

    @classmethod
    def from_lists(cls, propvars: Sequence[str], states: Sequence[Sequence[bool]],
                   relation: Sequence[Sequence[int]]) -> 'RelationalModel':
        """Build a model from literal lists, checking their shapes."""
        if len(states) != len(relation):
            raise ContractViolation(
                f"{len(states)} states but {len(relation)} relation entries"
            )
        model = cls(propvars)
        for valuation in states:
            model.add_state(valuation)
        for source, targets in enumerate(relation):
            for target in targets:
                if not 0 <= target < len(states):
                    raise ContractViolation(f"Transition {source} -> {target} leaves the model")
                if model.has_transition(source, target):
                    raise ContractViolation(f"Duplicate transition {source} -> {target}")
                model.add_transition(source, target)
        return model

    @property
    def size(self) -> int:
        """Number of id slots handed out, tombstones included."""
        return len(self.states)

    def is_live(self, state_id: int) -> bool:
        return 0 <= state_id < len(self.states) and state_id not in self._tombstones

    def live_states(self) -> List[int]:
        return [sid for sid in range(len(self.states)) if sid not in self._tombstones]

    def _require_live(self, state_id: int) -> None:
        if not self.is_live(state_id):
            raise ContractViolation(f"State {state_id} does not exist")

    def add_state(self, valuation: Sequence[bool]) -> int:
        values = [bool(v) for v in valuation]
        if len(values) != len(self.propvars):
            raise ContractViolation(
                f"Valuation has {len(values)} entries, expected {len(self.propvars)}"
            )
        self.states.append(values)
        self.relation.append([])
        return len(self.states) - 1

    def tombstone_state(self, state_id: int) -> None:
        """Blank a state's valuation and outgoing transitions; keep its slot."""
        self._require_live(state_id)
        self.states[state_id] = []
        self.relation[state_id] = []
        self._tombstones.add(state_id)

    def valuation(self, state_id: int) -> List[bool]:
        self._require_live(state_id)
        return self.states[state_id]

    def successors(self, state_id: int) -> List[int]:
        self._require_live(state_id)
        return self.relation[state_id]

    def has_transition(self, source: int, target: int) -> bool:
        if not 0 <= source < len(self.relation):
            return False
        return target in self.relation[source]

    def add_transition(self, source: int, target: int) -> None:
        self._require_live(source)
        self._require_live(target)
        self.relation[source].append(target)

    def remove_transition(self, source: int, target: int) -> None:
        if not self.has_transition(source, target):
            raise TransitionNotFound(source, target)
        self.relation[source].remove(target)

    def value_of(self, state_id: int, name: str) -> Optional[bool]:
        """Truth of a variable at a state, or None for an undeclared name."""
        try:
            index = self.propvars.index(name)
        except ValueError:
            return None
        return self.valuation(state_id)[index]
