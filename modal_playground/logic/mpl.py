"""
Modal propositional logic (MPL) checker.

Syntax, loosest binding first:

    <->          equivalence      (right-associative)
    ->           implication      (right-associative)
    |            disjunction
    &            conjunction
    ~  []  <>    negation, necessity, possibility (prefix)
    atoms        \\w+  e.g. p, q1
    ( ... )      grouping

Truth is the standard Kripke semantics: []A holds at w when A holds at every
successor of w, <>A when A holds at some successor.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from modal_playground.errors import EvaluationError, ParseError
from modal_playground.model import RelationalModel

UNARY_OPS = ('~', '[]', '<>')
BINARY_OPS = ('&', '|', '->', '<->')

_WORD = re.compile(r'\w+')

UNICODE_SYMBOLS = {
    '~': '¬', '[]': '□', '<>': '◇',
    '&': '∧', '|': '∨', '->': '→', '<->': '↔',
}


@dataclass(frozen=True)
class Formula:
    """A node in the MPL syntax tree."""
    op: str                                 # 'atom' or one of UNARY_OPS / BINARY_OPS
    name: Optional[str] = None              # for atoms
    left: Optional['Formula'] = None
    right: Optional['Formula'] = None

    def __repr__(self):
        if self.op == 'atom':
            return self.name
        if self.op in UNARY_OPS:
            return f'{self.op}{self.left!r}'
        return f'({self.left!r} {self.op} {self.right!r})'

    def atoms(self) -> List[str]:
        if self.op == 'atom':
            return [self.name]
        names = self.left.atoms() if self.left else []
        if self.right:
            names += [n for n in self.right.atoms() if n not in names]
        return names


Token = Tuple[str, Union[str, None], int]


def tokenize(src: str) -> List[Token]:
    """Split formula text into (kind, value, position) tokens."""
    tokens: List[Token] = []
    i = 0
    while i < len(src):
        ch = src[i]
        if ch.isspace():
            i += 1
        elif src.startswith('<->', i):
            tokens.append(('op', '<->', i))
            i += 3
        elif src.startswith('->', i) or src.startswith('[]', i) or src.startswith('<>', i):
            tokens.append(('op', src[i:i + 2], i))
            i += 2
        elif ch in '~&|':
            tokens.append(('op', ch, i))
            i += 1
        elif ch in '()':
            tokens.append((ch, ch, i))
            i += 1
        else:
            match = _WORD.match(src, i)
            if not match:
                raise ParseError(f"Unexpected character '{ch}' at position {i}", i)
            tokens.append(('atom', match.group(), i))
            i = match.end()
    tokens.append(('eof', None, len(src)))
    return tokens


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def _is_op(self, op: str) -> bool:
        kind, value, _ = self.peek()
        return kind == 'op' and value == op

    def eat(self, kind: str) -> Token:
        tok = self.peek()
        if tok[0] != kind:
            raise ParseError(self._unexpected(tok, expected=kind), tok[2])
        self.pos += 1
        return tok

    @staticmethod
    def _unexpected(tok: Token, expected: str = None) -> str:
        found = 'end of formula' if tok[0] == 'eof' else f"'{tok[1]}'"
        if expected:
            wanted = 'end of formula' if expected == 'eof' else f"'{expected}'"
            return f"Expected {wanted} but found {found} at position {tok[2]}"
        return f"Unexpected {found} at position {tok[2]}"

    def parse(self) -> Formula:
        if self.peek()[0] == 'eof':
            raise ParseError("Empty formula", 0)
        formula = self.parse_equivalence()
        self.eat('eof')
        return formula

    def parse_equivalence(self) -> Formula:
        left = self.parse_implication()
        if self._is_op('<->'):
            self.pos += 1
            return Formula('<->', left=left, right=self.parse_equivalence())
        return left

    def parse_implication(self) -> Formula:
        left = self.parse_disjunction()
        if self._is_op('->'):
            self.pos += 1
            return Formula('->', left=left, right=self.parse_implication())
        return left

    def parse_disjunction(self) -> Formula:
        left = self.parse_conjunction()
        while self._is_op('|'):
            self.pos += 1
            left = Formula('|', left=left, right=self.parse_conjunction())
        return left

    def parse_conjunction(self) -> Formula:
        left = self.parse_unary()
        while self._is_op('&'):
            self.pos += 1
            left = Formula('&', left=left, right=self.parse_unary())
        return left

    def parse_unary(self) -> Formula:
        kind, value, _ = self.peek()
        if kind == 'op' and value in UNARY_OPS:
            self.pos += 1
            return Formula(value, left=self.parse_unary())
        return self.parse_atom()

    def parse_atom(self) -> Formula:
        tok = self.peek()
        if tok[0] == '(':
            self.pos += 1
            inner = self.parse_equivalence()
            self.eat(')')
            return inner
        if tok[0] == 'atom':
            self.pos += 1
            return Formula('atom', name=tok[1])
        raise ParseError(self._unexpected(tok), tok[2])


def parse_formula(src: str) -> Formula:
    try:
        return Parser(tokenize(src)).parse()
    except RecursionError:
        raise ParseError("Formula is nested too deeply", 0) from None


def render(formula: Formula, symbols: dict, top: bool = True) -> str:
    """Print a formula with the given operator symbols, bracketing inner binaries."""
    if formula.op == 'atom':
        return formula.name
    if formula.op in UNARY_OPS:
        return symbols[formula.op] + render(formula.left, symbols, top=False)
    if formula.op not in BINARY_OPS:
        raise EvaluationError(f"Unknown operator '{formula.op}'")
    text = f"{render(formula.left, symbols, False)} {symbols[formula.op]} {render(formula.right, symbols, False)}"
    return text if top else f'({text})'


def truth(model: RelationalModel, state_id: int, formula: Formula) -> bool:
    """Evaluate a formula at a state."""
    if not isinstance(formula, Formula):
        raise EvaluationError(f"Not a formula: {formula!r}")
    if not model.is_live(state_id):
        raise EvaluationError(f"State {state_id} does not exist")

    op = formula.op
    if op == 'atom':
        value = model.value_of(state_id, formula.name)
        if value is None:
            raise EvaluationError(f"Unknown variable '{formula.name}'")
        return value
    if op in UNARY_OPS or op in BINARY_OPS:
        if formula.left is None or (op in BINARY_OPS and formula.right is None):
            raise EvaluationError(f"Operator '{op}' is missing an operand")
    if op == '~':
        return not truth(model, state_id, formula.left)
    if op == '[]':
        return all(truth(model, succ, formula.left) for succ in model.successors(state_id))
    if op == '<>':
        return any(truth(model, succ, formula.left) for succ in model.successors(state_id))
    if op == '&':
        return truth(model, state_id, formula.left) and truth(model, state_id, formula.right)
    if op == '|':
        return truth(model, state_id, formula.left) or truth(model, state_id, formula.right)
    if op == '->':
        return (not truth(model, state_id, formula.left)) or truth(model, state_id, formula.right)
    if op == '<->':
        return truth(model, state_id, formula.left) == truth(model, state_id, formula.right)
    raise EvaluationError(f"Unknown operator '{op}'")


class MPLChecker:
    """ModelChecker implementation for modal propositional logic."""

    def parse(self, text: str) -> Formula:
        return parse_formula(text)

    def evaluate(self, model: RelationalModel, state_id: int, ast: Formula) -> bool:
        try:
            return truth(model, state_id, ast)
        except RecursionError:
            raise EvaluationError("Formula is nested too deeply") from None

    def to_display_form(self, text: str) -> str:
        ast = parse_formula(text)
        try:
            return render(ast, UNICODE_SYMBOLS)
        except RecursionError:
            raise EvaluationError("Formula is nested too deeply") from None
