"""Deterministic string hashing for layout ordering, float phases and edge curves.

``hash_number`` is the classic 31-multiplier rolling hash over UTF-16 code units,
wrapped to a signed 32-bit integer after every step and returned as its
absolute value::

    h = 0
    for unit in utf16(value):
        h = int32(h * 31 + unit)
    return abs(h)

Layout positions and animation phases derive from it; changing it moves every
rendered graph.
"""

_MASK = 0xFFFFFFFF


def _int32(value: int) -> int:
    value &= _MASK
    return value - 0x100000000 if value & 0x80000000 else value


def hash_number(value: str) -> int:
    raw = value.encode("utf-16-le")
    h = 0
    for i in range(0, len(raw), 2):
        unit = raw[i] | (raw[i + 1] << 8)
        h = _int32((h << 5) - h + unit)
    return abs(h)
