"""Version token parsing and bumping.

A version token is a dotted string such as ``1.2.3``, ``0.1.B``,
``2.32.beta`` or ``3.2.1.rc1``. Segments are kept as text so that a
leading zero in one segment (``2026.02.A``) survives a bump of another.

Non-numeric segments advance with :func:`successor`: Greek letter names
step through the alphabet, anything else increments like a counter with
carry (``B`` -> ``C``, ``Z`` -> ``AA``, ``rc1`` -> ``rc2``, ``a9`` -> ``b0``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, TypeAlias

from reissue_py.exceptions import FormatError, InvalidSegmentError

if TYPE_CHECKING:
    from collections.abc import Callable

# major.minor.patch with an optional trailing pre-release group
VERSION_PATTERN = re.compile(r"\d+\.[0-9A-Za-z]+\.[0-9A-Za-z]+(?:\.[0-9A-Za-z]+)?")

_DOTTED = re.compile(r"\d+(?:\.[0-9A-Za-z]+)*")
_RUNS = re.compile(r"\d+|[A-Za-z]+")

GREEK_LETTERS = (
    "alpha",
    "beta",
    "gamma",
    "delta",
    "epsilon",
    "zeta",
    "eta",
    "theta",
    "iota",
    "kappa",
    "lambda",
    "mu",
    "nu",
    "xi",
    "omicron",
    "pi",
    "rho",
    "sigma",
    "tau",
    "upsilon",
    "phi",
    "chi",
    "psi",
    "omega",
)


class Segment(StrEnum):
    """Version segment a bump can target."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PRE = "pre"


# Precedence used when several bumps are requested at once
SEGMENT_PRECEDENCE = {Segment.PATCH: 1, Segment.MINOR: 2, Segment.MAJOR: 3}

RedoFunc: TypeAlias = "Callable[[VersionToken, str], VersionToken | str]"


@dataclass(frozen=True)
class VersionToken:
    """Immutable dotted version.

    Attributes:
        parts: Segments as text; ``parts[0]`` is always numeric
    """

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise FormatError("A version needs at least one segment")
        if not self.parts[0].isdigit():
            raise FormatError(f"Major version must be numeric, got {self.parts[0]!r}")
        for part in self.parts:
            if not part.isalnum() or not part.isascii():
                raise FormatError(f"Invalid version segment {part!r}")

    @classmethod
    def parse(cls, text: str) -> VersionToken:
        """Extract the first version from text.

        Args:
            text: Text containing a version (a whole file is fine)

        Returns:
            Parsed version token

        Raises:
            FormatError: If no version-like substring is found
        """
        match = VERSION_PATTERN.search(text)
        if match:
            return cls(tuple(match.group(0).split(".")))

        stripped = text.strip()
        if _DOTTED.fullmatch(stripped):
            return cls(tuple(stripped.split(".")))

        raise FormatError(f"No version found in {text!r}")

    @property
    def major(self) -> int:
        return int(self.parts[0])

    def bump(self, segment: str, redo: RedoFunc | None = None) -> VersionToken:
        """Return the next version for the given segment.

        Args:
            segment: One of major, minor, patch or pre
            redo: Optional replacement for the whole algorithm. It receives
                this token and the segment; a string result is parsed back
                into a token. Use :meth:`bump_text` to keep it verbatim.

        Returns:
            New version token

        Raises:
            InvalidSegmentError: If segment is unknown and no redo is given
            FormatError: If the token cannot be advanced at that segment
        """
        if redo is not None:
            result = redo(self, str(segment))
            return result if isinstance(result, VersionToken) else VersionToken.parse(str(result))

        try:
            selected = Segment(str(segment).lower())
        except ValueError:
            raise InvalidSegmentError(str(segment), [s.value for s in Segment]) from None

        parts = list(self.parts)
        if selected is Segment.MAJOR:
            return VersionToken((str(self.major + 1), "0", "0"))

        minor = parts[1] if len(parts) > 1 else "0"
        if selected is Segment.MINOR:
            next_minor = str(int(minor) + 1) if minor.isdigit() else successor(minor)
            return VersionToken((parts[0], next_minor, "0"))

        if selected is Segment.PATCH:
            head = [parts[0], minor]
            tail = parts[2:] or ["0"]
        else:
            if len(parts) < 4:
                raise FormatError(f"Version {self} has no pre-release segment to bump")
            head = parts[:3]
            tail = parts[3:]

        tail[-1] = successor(tail[-1])
        return VersionToken(tuple(head + tail))

    def bump_text(self, segment: str, redo: RedoFunc | None = None) -> str:
        """Return the next version as the text to write into a file.

        A redo result is returned exactly as given, so schemes the dotted
        pattern cannot represent (``2.0.0-rc.1``, ``release-7``) survive.
        """
        if redo is not None:
            return str(redo(self, str(segment)))
        return str(self.bump(segment))

    def sort_key(self) -> tuple[tuple[int, int, str], ...]:
        """Key ordering versions the way release tooling does.

        Digit runs compare numerically, letter runs sort below digits so a
        pre-release comes before its release.
        """
        key: list[tuple[int, int, str]] = []
        for part in self.parts:
            for run in _RUNS.findall(part):
                key.append((1, int(run), "") if run.isdigit() else (0, 0, run.lower()))
        while key and key[-1] == (1, 0, ""):
            key.pop()
        return tuple(key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        mine, theirs = _aligned(self.sort_key(), other.sort_key())
        return mine < theirs

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return other < self

    def __le__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return not other < self

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return not self < other

    def __str__(self) -> str:
        return ".".join(self.parts)


def _aligned(left: tuple, right: tuple) -> tuple[tuple, tuple]:
    # a missing segment compares as a released 0
    width = max(len(left), len(right))
    pad = ((1, 0, ""),)
    return left + pad * (width - len(left)), right + pad * (width - len(right))


def successor(token: str) -> str:
    """Return the next value of a single version segment.

    Examples:
        >>> successor("9")
        '10'
        >>> successor("B")
        'C'
        >>> successor("beta")
        'gamma'
        >>> successor("Zz")
        'AAa'

    Raises:
        FormatError: If token is empty or is the last Greek letter
    """
    if not token:
        raise FormatError("Cannot advance an empty version segment")

    lowered = token.lower()
    if lowered in GREEK_LETTERS:
        index = GREEK_LETTERS.index(lowered)
        if index == len(GREEK_LETTERS) - 1:
            raise FormatError(f"{token!r} is the last Greek letter and has no successor")
        return _match_case(GREEK_LETTERS[index + 1], token)

    if token.isdigit():
        return str(int(token) + 1).zfill(len(token))

    chars = list(token)
    for i in range(len(chars) - 1, -1, -1):
        char = chars[i]
        if char == "9":
            chars[i] = "0"
        elif char == "z":
            chars[i] = "a"
        elif char == "Z":
            chars[i] = "A"
        else:
            chars[i] = chr(ord(char) + 1)
            return "".join(chars)

    first = token[0]
    carry = "1" if first.isdigit() else ("a" if first.islower() else "A")
    return carry + "".join(chars)


def _match_case(name: str, like: str) -> str:
    if like.isupper():
        return name.upper()
    if like[0].isupper():
        return name.capitalize()
    return name


def highest_segment(segments: list[Segment]) -> Segment | None:
    """Reduce several requested bumps to the one with highest precedence."""
    ranked = [s for s in segments if s in SEGMENT_PRECEDENCE]
    if not ranked:
        return None
    return max(ranked, key=SEGMENT_PRECEDENCE.__getitem__)
