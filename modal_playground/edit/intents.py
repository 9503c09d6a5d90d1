"""
Edit intents emitted by the interaction state machine.

Each intent maps onto exactly one SyncEngine operation.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from modal_playground.graph_view import LinkKey


@dataclass(frozen=True)
class CreateNode:
    position: Tuple[float, float]


@dataclass(frozen=True)
class DeleteNode:
    node_id: int


@dataclass(frozen=True)
class CreateOrUpdateLink:
    dragged_from: int
    dragged_to: int


@dataclass(frozen=True)
class DeleteLink:
    link: LinkKey


@dataclass(frozen=True)
class SetLinkDirection:
    link: LinkKey
    left: bool
    right: bool


@dataclass(frozen=True)
class ToggleReflexive:
    node_id: int


@dataclass(frozen=True)
class SetValuation:
    node_id: int
    index: int
    value: bool


Intent = Union[CreateNode, DeleteNode, CreateOrUpdateLink, DeleteLink,
               SetLinkDirection, ToggleReflexive, SetValuation]
