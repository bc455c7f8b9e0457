"""Release version value — strict major.minor.patch triples."""

import re
from dataclasses import dataclass
from enum import Enum

# ASCII digits only; str.isdigit() and \d both accept other scripts
_TRIPLE_RE = re.compile(r'([0-9]+)\.([0-9]+)\.([0-9]+)')


class Comparison(Enum):
    LESS_THAN = -1
    EQUAL = 0
    GREATER_THAN = 1


class ParseErrorKind(Enum):
    MALFORMED = "malformed"


class ParseError(ValueError):
    """Raised when a string is not a dotted numeric triple."""

    def __init__(self, raw, kind: ParseErrorKind = ParseErrorKind.MALFORMED):
        self.raw = raw
        self.kind = kind
        super().__init__(f"Malformed version string: {raw!r}")


@dataclass(frozen=True, order=True)
class Version:
    """An application release. Field order drives the numeric ordering."""
    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for part in (self.major, self.minor, self.patch):
            if not isinstance(part, int) or isinstance(part, bool) or part < 0:
                raise ValueError(f"Version components must be non-negative ints, got {part!r}")

    def __str__(self) -> str:
        return format_version(self)


def parse(raw: str) -> Version:
    """Parse ``"a.b.c"`` into a :class:`Version`.

    Anything else (two or four segments, letters, signs, surrounding
    whitespace) raises :class:`ParseError` carrying the raw input.
    """
    if not isinstance(raw, str):
        raise ParseError(raw)
    match = _TRIPLE_RE.fullmatch(raw)
    if match is None:
        raise ParseError(raw)
    major, minor, patch = (int(g) for g in match.groups())
    return Version(major, minor, patch)


def compare(a: Version, b: Version) -> Comparison:
    """Compare major, then minor, then patch as integers."""
    left = (a.major, a.minor, a.patch)
    right = (b.major, b.minor, b.patch)
    if left < right:
        return Comparison.LESS_THAN
    if left > right:
        return Comparison.GREATER_THAN
    return Comparison.EQUAL


def format_version(version: Version) -> str:
    return f"{version.major}.{version.minor}.{version.patch}"
