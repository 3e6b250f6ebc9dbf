"""Derived numeric record fields compiled from SymPy expressions.

Purpose
-------
Datasets rarely carry every quantity worth plotting. A sales rank spanning
six orders of magnitude, for example, is usually charted as
``log10(sales_rank)``. ``DerivedField`` describes such a column as a small
expression over other numeric fields; the expression is parsed with SymPy
and compiled to a vectorized NumPy callable once, then evaluated over whole
columns at load time.

Examples
--------
>>> import numpy as np
>>> f = DerivedField("log_sales_rank", "log10(sales_rank)")
>>> f.inputs
('sales_rank',)
>>> f.evaluate({"sales_rank": np.array([10.0, 1000.0])})
array([1., 3.])

Notes
-----
Expressions are parsed with :func:`sympy.sympify`, which evaluates Python
syntax. Only use expressions from trusted configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
import sympy as sp

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

# Functions sympify leaves undefined but datasets commonly need.
FIELD_FUNCTIONS: dict[str, Callable[..., np.ndarray]] = {
    "log10": np.log10,
    "log2": np.log2,
    "log1p": np.log1p,
}

_COMPILE_CACHE_MAXSIZE = 128


@dataclass(frozen=True)
class CompiledExpression:
    """A parsed expression and its NumPy callable.

    Parameters
    ----------
    source : str
        Expression text as configured.
    expr : sympy.Basic
        Parsed expression.
    inputs : tuple[str, ...]
        Field names in positional-argument order.
    fn : callable
        Vectorized callable taking one array per input.
    """

    source: str
    expr: sp.Basic
    inputs: tuple[str, ...]
    fn: Callable[..., np.ndarray]


@lru_cache(maxsize=_COMPILE_CACHE_MAXSIZE)
def compile_expression(source: str) -> CompiledExpression:
    """Parse and compile ``source`` into a NumPy callable (cached).

    Raises
    ------
    ValueError
        If the text does not parse to a SymPy expression with at least one
        field symbol.
    """
    try:
        expr = sp.sympify(source)
    except (sp.SympifyError, SyntaxError, TypeError) as e:
        raise ValueError(f"Could not parse derived-field expression {source!r}") from e
    if not isinstance(expr, sp.Basic):
        raise ValueError(f"Derived-field expression {source!r} is not symbolic")

    symbols = sorted(expr.free_symbols, key=sp.default_sort_key)
    if not symbols:
        raise ValueError(
            f"Derived-field expression {source!r} does not reference any field"
        )
    inputs = tuple(s.name for s in symbols)
    fn = sp.lambdify(symbols, expr, modules=[FIELD_FUNCTIONS, "numpy"])
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("compiled derived expression %r over %s", source, inputs)
    return CompiledExpression(source=source, expr=expr, inputs=inputs, fn=fn)


@dataclass(frozen=True)
class DerivedField:
    """A numeric field computed from other fields at load time.

    Parameters
    ----------
    name : str
        Target field name stored on each record.
    expression : str
        SymPy expression over other numeric field names.
    """

    name: str
    expression: str

    @property
    def compiled(self) -> CompiledExpression:
        """Return the cached compiled expression."""
        return compile_expression(self.expression)

    @property
    def inputs(self) -> tuple[str, ...]:
        """Return the field names this derived field reads."""
        return self.compiled.inputs

    def evaluate(self, columns: Mapping[str, np.ndarray]) -> np.ndarray:
        """Evaluate over column arrays and return a float array.

        Raises
        ------
        KeyError
            If a required input column is missing.
        """
        compiled = self.compiled
        missing = [name for name in compiled.inputs if name not in columns]
        if missing:
            raise KeyError(
                f"Derived field {self.name!r} needs missing field(s): {', '.join(missing)}"
            )
        args = [np.asarray(columns[name], dtype=float) for name in compiled.inputs]
        with np.errstate(divide="ignore", invalid="ignore"):
            out = compiled.fn(*args)
        n = len(args[0])
        return np.broadcast_to(np.asarray(out, dtype=float), (n,)).copy()


def normalize_derived(
    derived: Mapping[str, str] | Iterable[DerivedField] | None,
) -> tuple[DerivedField, ...]:
    """Accept a ``{name: expression}`` mapping or ``DerivedField`` iterable."""
    if derived is None:
        return ()
    if isinstance(derived, Mapping):
        return tuple(DerivedField(str(k), str(v)) for k, v in derived.items())
    return tuple(derived)


__all__ = [
    "FIELD_FUNCTIONS",
    "CompiledExpression",
    "DerivedField",
    "compile_expression",
    "normalize_derived",
]
