# measurement.py
"""
Free-form measurement parsing.

Order fields arrive as whatever the counter staff typed: "16 1/2", "2-1/2",
"3/4", "20", 20.0 or nothing at all. Everything is resolved once, here, into
a float. Parsing never raises; anything unreadable is 0.
"""
import re
from dataclasses import dataclass
from typing import Optional, Union

_MIXED_RE = re.compile(r"^(\d+(?:\.\d+)?)[\s-]+(\d+)\s*/\s*(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


@dataclass(frozen=True)
class Empty:
    def value(self) -> float:
        return 0.0


@dataclass(frozen=True)
class DecimalValue:
    number: float

    def value(self) -> float:
        return self.number


@dataclass(frozen=True)
class FractionValue:
    whole: float
    num: int
    den: int

    def value(self) -> float:
        # "5/0" is nonsense input, not an error
        if self.den == 0:
            return self.whole
        return self.whole + self.num / self.den


Measurement = Union[Empty, DecimalValue, FractionValue]


def tokenize(raw: Optional[Union[str, int, float]]) -> Measurement:
    if raw is None or isinstance(raw, bool):
        return Empty()

    if isinstance(raw, (int, float)):
        if raw != raw:  # NaN
            return Empty()
        return DecimalValue(float(raw))

    text = str(raw).strip()
    if not text:
        return Empty()

    m = _MIXED_RE.match(text)
    if m:
        return FractionValue(float(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _FRACTION_RE.match(text)
    if m:
        return FractionValue(0.0, int(m.group(1)), int(m.group(2)))

    try:
        number = float(text)
    except ValueError:
        return Empty()

    if number != number or number in (float("inf"), float("-inf")):
        return Empty()
    return DecimalValue(number)


def parse_measurement(raw: Optional[Union[str, int, float]]) -> float:
    return tokenize(raw).value()


def parse_currency(raw: Optional[Union[str, int, float]]) -> float:
    """
    Currency-tolerant parse for deposit style fields ("$1,250.00", "100 cash").
    Strips everything but digits, '.' and '-'; unreadable input is 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw) if raw == raw else 0.0

    cleaned = _NON_NUMERIC_RE.sub("", str(raw))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0
