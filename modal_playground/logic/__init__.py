"""
Formula checking for the playground.

- ModelChecker: protocol the mode controller depends on
- MPLChecker: bundled modal propositional logic implementation
"""

from modal_playground.logic.protocol import ModelChecker
from modal_playground.logic.mpl import Formula, MPLChecker, parse_formula, truth

__all__ = [
    'ModelChecker',
    'MPLChecker',
    'Formula',
    'parse_formula',
    'truth',
]
