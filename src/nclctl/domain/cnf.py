"""CNF formula parsing. Pure functions, no graph dependencies.

Accepted shape::

    (a || !b) && (b) && (!a || c)

Whitespace is ignored. Every clause is fully parenthesized (no nesting),
literals are single letters with an optional leading ``!``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from nclctl.domain.errors import FormatError

AND = "&&"
OR = "||"
NOT = "!"

_CLAUSE_PATTERN = re.compile(r"^\(([^()]*)\)$")
_LITERAL_PATTERN = re.compile(r"^(!?)([a-zA-Z])$")


@dataclass(frozen=True)
class Literal:
    """A possibly negated propositional variable."""

    variable: str
    negated: bool = False

    @property
    def port(self) -> str:
        """Name of the CNF gadget port carrying this literal."""
        return f"{NOT}{self.variable}" if self.negated else self.variable

    def evaluate(self, assignment: Mapping[str, bool]) -> bool:
        return assignment[self.variable] != self.negated

    def __str__(self) -> str:
        return self.port


@dataclass(frozen=True)
class CNFFormula:
    """A parsed conjunction of clauses.

    Attributes:
        text: The source string as given.
        clauses: One frozenset of literals per clause, in source order.
        variables: Variable names in order of first appearance.
    """

    text: str
    clauses: tuple[frozenset[Literal], ...]
    variables: tuple[str, ...]

    def evaluate(self, assignment: Mapping[str, bool]) -> bool:
        """True iff every clause has at least one true literal."""
        return all(any(lit.evaluate(assignment) for lit in clause) for clause in self.clauses)

    @property
    def pretty(self) -> str:
        """Logic-notation rendering (``a ∨ ¬b ∧ (b)`` style)."""
        compact = re.sub(r"\s", "", self.text)
        return compact.replace(NOT, "¬").replace(AND, " ∧ ").replace(OR, " ∨ ")


def parse_literal(text: str) -> Literal:
    """Parse a single ``x`` / ``!x`` literal."""
    match = _LITERAL_PATTERN.match(text)
    if match is None:
        msg = f"Invalid literal {text!r}: expected a single letter with optional '!'"
        raise FormatError(msg)
    return Literal(variable=match.group(2), negated=bool(match.group(1)))


def parse_cnf(formula: str) -> CNFFormula:
    """Parse a CNF string into clauses of literals.

    Raises:
        FormatError: a clause is not fully parenthesized, or a literal is
            not a single optionally negated letter.
    """
    text = str(formula)
    compact = re.sub(r"\s", "", text)

    variables: list[str] = []
    clauses: list[frozenset[Literal]] = []
    for clause_text in compact.split(AND):
        match = _CLAUSE_PATTERN.match(clause_text)
        if match is None:
            msg = f"Invalid clause {clause_text!r}: clauses must be wrapped in parentheses"
            raise FormatError(msg)
        literals: list[Literal] = []
        for literal_text in match.group(1).split(OR):
            literal = parse_literal(literal_text)
            if literal.variable not in variables:
                variables.append(literal.variable)
            literals.append(literal)
        clauses.append(frozenset(literals))

    return CNFFormula(text=text, clauses=tuple(clauses), variables=tuple(variables))
