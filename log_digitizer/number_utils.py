from __future__ import annotations

import math
import re
from typing import Optional

_POW10 = re.compile(r"^([+-]?\d+(?:\.\d*)?)?\s*[x×*]?\s*10\s*\^\s*([+-]?\d+)$")
_SUPERSCRIPT = str.maketrans("0123456789-+", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺")


def parse_number(s: str) -> Optional[float]:
    """
    Parse user-typed numbers: "1,000", "1 000", "1_000", "1e3", "10^3",
    "2x10^-4". Returns None for anything that is not a finite number.
    """
    s = (s or "").strip()
    if not s:
        return None
    s = s.replace(",", "").replace("_", "").replace(" ", "")
    m = _POW10.match(s)
    try:
        if m:
            mant = float(m.group(1)) if m.group(1) else 1.0
            v = mant * 10.0 ** int(m.group(2))
        else:
            v = float(s)
    except (ValueError, OverflowError):
        return None
    return v if math.isfinite(v) else None


def coerce_float(v: object, default: float) -> float:
    """Best-effort float for untrusted payload values; non-finite -> default."""
    if isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        f = float(v)
    elif isinstance(v, str):
        parsed = parse_number(v)
        if parsed is None:
            return default
        f = parsed
    else:
        return default
    return f if math.isfinite(f) else default


def format_number(v: float, step: Optional[float] = None) -> str:
    """Tick-label style: fixed decimals sized to the value (or grid step), exponent when huge/tiny."""
    if not math.isfinite(v):
        return ""
    a = abs(v)
    if a == 0:
        return "0"
    if step is not None:
        d = max(0, min(6, -math.floor(math.log10(max(1e-12, abs(step))))))
    else:
        d = max(0, min(6, 3 - math.floor(math.log10(max(1e-12, a)))))
    if a >= 1e5 or a < 1e-3:
        return f"{v:.2e}"
    return f"{v:.{d}f}"


def superscript(exp: int) -> str:
    return str(exp).translate(_SUPERSCRIPT)


def pow10_label(n: int) -> str:
    return f"10{superscript(n)}"
