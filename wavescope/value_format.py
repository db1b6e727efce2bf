"""Multi-radix display formatting for waveform values.

Bus values arrive in one of two encodings: uppercase hex for fully defined
changes, or the raw bit string when any bit is x/z. Formatting expands either
encoding to bits and regroups them for the requested radix, with x/z
propagated per digit group.
"""

from enum import Enum
from typing import Dict

from .data_model import Binary, WaveValue


class Radix(Enum):
    BIN = 2
    OCT = 8
    DEC = 10
    HEX = 16

    @classmethod
    def from_string(cls, s: str) -> 'Radix':
        """Parse "bin"/"oct"/"dec"/"hex" (or 2/8/10/16)."""
        key = s.strip().lower()
        if key in _RADIX_NAMES:
            return _RADIX_NAMES[key]
        raise ValueError(f"Unknown radix: {s}")

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]


_RADIX_NAMES: Dict[str, Radix] = {
    "bin": Radix.BIN, "b": Radix.BIN, "2": Radix.BIN,
    "oct": Radix.OCT, "o": Radix.OCT, "8": Radix.OCT,
    "dec": Radix.DEC, "d": Radix.DEC, "10": Radix.DEC,
    "hex": Radix.HEX, "h": Radix.HEX, "x": Radix.HEX, "16": Radix.HEX,
}

_PREFIXES: Dict[Radix, str] = {
    Radix.BIN: "0b",
    Radix.OCT: "0o",
    Radix.DEC: "0d",
    Radix.HEX: "0x",
}

_UNDEFINED = frozenset("xXzZ")
_BIT_CHARS = frozenset("01xXzZ")
_MAX_U64 = (1 << 64) - 1


def has_undefined(s: str) -> bool:
    """True if the string contains any x/z character."""
    return any(c in _UNDEFINED for c in s)


def is_raw_bits(s: str) -> bool:
    """True for a raw bit string as the parser leaves it (contains x/z)."""
    return bool(s) and set(s) <= _BIT_CHARS and has_undefined(s)


def _normalize_case(s: str, uppercase: bool) -> str:
    return s.upper() if uppercase else s.lower()


def expand_to_binary(s: str) -> str:
    """Expand a Bus string to its full bit string, without trimming.

    Raw bit strings are returned as-is (x/z lowercased). Hex strings expand
    each digit to 4 bits and each x/z digit to a run of 4 x/z, so canonical
    "1" expands to "0001".
    """
    if is_raw_bits(s):
        return s.lower()
    bits = []
    for c in s.lower():
        if c in "xz":
            bits.append(c * 4)
        else:
            try:
                bits.append(format(int(c, 16), "04b"))
            except ValueError:
                continue  # Skip characters that are not hex digits
    return "".join(bits)


def _pass_through(s: str, uppercase: bool) -> str:
    """Emit the source digits unchanged, only normalizing the case of x/z.

    Used for octal and decimal values that hold x/z bits; this is an
    approximation, not a mixed-radix conversion.
    """
    return "".join(_normalize_case(c, uppercase) if c in _UNDEFINED else c for c in s)


def _strip_leading_zeros(bits: str) -> str:
    return bits.lstrip("0") or "0"


def _regroup(bits: str, group_width: int, uppercase: bool) -> str:
    """Pack a bit string into radix digits, group_width bits per digit.

    The left side is zero-padded to a whole number of groups. A group holding
    an x bit becomes 'x', else a group holding a z bit becomes 'z'.
    """
    padding = (group_width - len(bits) % group_width) % group_width
    padded = "0" * padding + bits
    digits = []
    for i in range(0, len(padded), group_width):
        group = padded[i:i + group_width]
        if "x" in group:
            digits.append("x")
        elif "z" in group:
            digits.append("z")
        else:
            digits.append(format(int(group, 2), "x"))
    result = _strip_leading_zeros("".join(digits))
    return _normalize_case(result, uppercase)


def format_bus(s: str, radix: Radix, uppercase: bool = False) -> str:
    """Render a Bus string in the given radix (no prefix)."""
    if not s:
        return "0"
    if s.startswith(('r', 'R')):
        # Real values are opaque labels
        return s

    if radix is Radix.BIN:
        if set(s) <= _BIT_CHARS:
            return _normalize_case(s, uppercase)
        return _normalize_case(_strip_leading_zeros(expand_to_binary(s)), uppercase)

    if radix is Radix.DEC:
        if not has_undefined(s):
            try:
                number = int(s, 16)
            except ValueError:
                number = None
            if number is not None and number <= _MAX_U64:
                return str(number)
        return _pass_through(s, uppercase)

    if radix is Radix.OCT and has_undefined(s):
        return _pass_through(s, uppercase)

    bits = _strip_leading_zeros(expand_to_binary(s))
    group_width = 3 if radix is Radix.OCT else 4
    return _regroup(bits, group_width, uppercase)


def format_value(value: WaveValue, radix: Radix = Radix.HEX, uppercase: bool = False,
                 prefix: bool = False) -> str:
    """Format a waveform value for display.

    Scalar values always render as their single character (0, 1, X, Z)
    whatever the radix. Bus values take an optional radix prefix; the hex
    prefix follows the requested case ("0x" or "0X").
    """
    if isinstance(value, Binary):
        return str(value.value)

    text = format_bus(value.value, radix, uppercase)
    if not prefix or value.is_real:
        return text
    p = radix.prefix
    if radix is Radix.HEX and uppercase:
        p = "0X"
    return p + text
