# === SECTION: field_convert [id: field_convert]===
from __future__ import annotations

import math
from typing import Any


def to_number(obj: Any, *, field: str = "", allow_nonfinite: bool = False) -> float:
    """
    Coerce a raw dataset value to ``float``.

    Dataset rows often carry numbers as strings (``"1,024"``, ``" 312 "``).
    This mirrors the numeric coercion a browser applies with ``+value`` while
    rejecting values that would silently become ``NaN``. Dataset values are
    untrusted, so strings are never evaluated as expressions: ``"3/4"`` or
    ``"pi"`` are not numbers here.

    Rules:
    - ``bool`` is rejected (``True`` is not a page count).
    - ``int``/``float`` are cast directly.
    - Strings are stripped, thousands separators (``,`` and ``_``) are
      dropped, then the rest must be a plain ``float()`` literal.
    - Anything else is passed through ``float()``.

    Parameters
    ----------
    obj:
        Raw value.
    field:
        Field name used in error messages.
    allow_nonfinite:
        Accept ``nan``/``inf`` results. Off by default because a non-finite
        value cannot be placed on a linear scale.

    Raises
    ------
    ValueError
        If the value cannot be converted, or converts to a non-finite number
        while ``allow_nonfinite`` is False.
    """
    where = f" for field {field!r}" if field else ""

    if isinstance(obj, bool):
        raise ValueError(f"Could not convert boolean {obj!r} to a number{where}.")

    if isinstance(obj, (int, float)):
        value = float(obj)
    elif isinstance(obj, str):
        s = obj.strip().replace(",", "").replace("_", "")
        if s == "":
            raise ValueError(f"Cannot convert empty string to a number{where}.")
        try:
            value = float(s)
        except ValueError as e:
            raise ValueError(f"Could not convert {obj!r} to a number{where}.") from e
    else:
        try:
            value = float(obj)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Could not convert {obj!r} to a number{where}.") from e

    if not allow_nonfinite and not math.isfinite(value):
        raise ValueError(f"Value {obj!r} is not a finite number{where}.")
    return value


__all__ = ["to_number"]

# === END OF SECTION: field_convert [id: field_convert]===
