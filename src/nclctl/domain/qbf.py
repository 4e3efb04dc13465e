"""Quantified Boolean Formula parsing.

Grammar::

    qbf        := prefix ":" formula
    prefix     := quantifier+
    quantifier := ("forall" | "exists") WS letter

The formula part is a CNF string (see :mod:`nclctl.domain.cnf`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from nclctl.domain.cnf import CNFFormula, parse_cnf
from nclctl.domain.errors import FormatError
from nclctl.domain.types import QuantifierKind

_VARIABLE_PATTERN = re.compile(r"^[a-zA-Z]$")


@dataclass(frozen=True)
class Quantifier:
    kind: QuantifierKind
    variable: str

    @property
    def symbol(self) -> str:
        return "∀" if self.kind is QuantifierKind.FORALL else "∃"

    def __str__(self) -> str:
        return f"{self.kind} {self.variable}"


@dataclass(frozen=True)
class QuantifiedFormula:
    """A quantifier prefix over a CNF matrix."""

    text: str
    quantifiers: tuple[Quantifier, ...]
    formula: CNFFormula

    @property
    def variables(self) -> tuple[str, ...]:
        """Bound variables in binding order."""
        return tuple(q.variable for q in self.quantifiers)

    def truth(self) -> bool:
        """Truth value by quantifier expansion.

        Raises:
            FormatError: the matrix uses a variable the prefix does not bind.
        """
        unbound = [v for v in self.formula.variables if v not in self.variables]
        if unbound:
            msg = f"Unbound variable(s) in formula: {', '.join(unbound)}"
            raise FormatError(msg)
        return _expand(self.quantifiers, self.formula, {})


def _expand(
    quantifiers: tuple[Quantifier, ...],
    formula: CNFFormula,
    assignment: dict[str, bool],
) -> bool:
    if not quantifiers:
        return formula.evaluate(assignment)
    head, rest = quantifiers[0], quantifiers[1:]
    branches = (
        _expand(rest, formula, {**assignment, head.variable: value}) for value in (False, True)
    )
    if head.kind is QuantifierKind.FORALL:
        return all(branches)
    return any(branches)


def parse_qbf(text: str) -> QuantifiedFormula:
    """Validate and parse a QBF string.

    Raises:
        FormatError: missing ``:``, an empty or malformed prefix, an
            unknown quantifier keyword, a variable bound twice, or a
            malformed CNF matrix.
    """
    source = str(text)
    prefix, sep, matrix = source.partition(":")
    if not sep:
        msg = f"Invalid QBF {source!r}: expected '<quantifiers> : <formula>'"
        raise FormatError(msg)

    tokens = prefix.split()
    if not tokens or len(tokens) % 2:
        msg = f"Invalid quantifier prefix {prefix.strip()!r}"
        raise FormatError(msg)

    quantifiers: list[Quantifier] = []
    seen: set[str] = set()
    for keyword, variable in zip(tokens[::2], tokens[1::2], strict=True):
        try:
            kind = QuantifierKind(keyword)
        except ValueError as exc:
            msg = f"Unknown quantifier {keyword!r}: expected 'forall' or 'exists'"
            raise FormatError(msg) from exc
        if _VARIABLE_PATTERN.match(variable) is None:
            msg = f"Invalid variable {variable!r}: expected a single letter"
            raise FormatError(msg)
        if variable in seen:
            msg = f"Variable {variable!r} is bound more than once"
            raise FormatError(msg)
        seen.add(variable)
        quantifiers.append(Quantifier(kind=kind, variable=variable))

    if not matrix.strip():
        msg = f"Invalid QBF {source!r}: empty formula"
        raise FormatError(msg)

    return QuantifiedFormula(
        text=source,
        quantifiers=tuple(quantifiers),
        formula=parse_cnf(matrix),
    )
