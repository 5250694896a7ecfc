from __future__ import annotations

import math


def parse_finite_float(value) -> float | None:
    """Coerce a textual number from a filing into a float.

    - None/"" -> None
    - "100", " 12.50 ", "1e3" -> float
    - anything unparsable, "NaN", "inf" -> None

    Never returns 0 as a stand-in for a missing or bad value.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        n = float(value)
    else:
        s = str(value).strip()
        if s == "":
            return None
        try:
            n = float(s)
        except ValueError:
            return None

    return n if math.isfinite(n) else None
