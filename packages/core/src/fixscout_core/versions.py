"""Version parsing and ordering for SDK release tags.

Tags are compared by semantic-version precedence after stripping a leading
"v". A hyphen suffix (``1.2.3-1``, ``7.0.0-canary.1``) is a pre-release, as
SemVer defines it; build metadata after "+" is ignored. Tags that are not
SemVer but are valid PEP 440 (``4.0.0a1``, ``2.1``) are read with
``packaging.version`` and mapped onto the same ordering.

Anything that parses as neither is "not a version": comparisons involving
it are False and it never appears in a stable range.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

_SEMVER_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def _identifier_key(identifier: int | str) -> tuple[int, int, str]:
    # Numeric identifiers sort below alphanumeric ones.
    if isinstance(identifier, int):
        return (0, identifier, "")
    return (1, 0, identifier)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SdkVersion:
    release: tuple[int, ...]
    prerelease: tuple[int | str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _key(self) -> tuple:
        release = list(self.release)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        if not self.prerelease:
            return (tuple(release), (1,))
        return (tuple(release), (0, tuple(_identifier_key(i) for i in self.prerelease)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SdkVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SdkVersion) -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = ".".join(str(n) for n in self.release)
        if self.prerelease:
            text += "-" + ".".join(str(i) for i in self.prerelease)
        return text


def _from_pep440(text: str) -> SdkVersion | None:
    try:
        parsed = Version(text)
    except InvalidVersion:
        return None
    if parsed.pre is not None:
        return SdkVersion(parsed.release, parsed.pre)
    if parsed.dev is not None:
        return SdkVersion(parsed.release, ("dev", parsed.dev))
    return SdkVersion(parsed.release)


def parse_version(text: str | None) -> SdkVersion | None:
    """Return the parsed version, or None when ``text`` is not a version."""
    if not text:
        return None
    cleaned = text.strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:]

    match = _SEMVER_RE.match(cleaned)
    if match is None:
        return _from_pep440(cleaned)
    release = tuple(int(n) for n in match.group("release").split("."))
    pre = match.group("pre")
    if pre is None:
        return SdkVersion(release)
    return SdkVersion(release, tuple(int(i) if i.isdigit() else i for i in pre.split(".")))


def is_prerelease(text: str) -> bool:
    parsed = parse_version(text)
    return parsed is not None and parsed.is_prerelease


def is_stable(text: str) -> bool:
    parsed = parse_version(text)
    return parsed is not None and not parsed.is_prerelease


def version_after(candidate: str, reference: str) -> bool:
    """True iff ``candidate`` is strictly newer than ``reference``. Never raises."""
    a = parse_version(candidate)
    b = parse_version(reference)
    if a is None or b is None:
        return False
    return a > b


def display_version(tag: str) -> str:
    """Strip the redundant leading "v" for display: "v8.1.0" -> "8.1.0"."""
    tag = tag.strip()
    if tag[:1] in ("v", "V") and tag[1:2].isdigit():
        return tag[1:]
    return tag


def sort_key(tag: str) -> SdkVersion:
    parsed = parse_version(tag)
    if parsed is None:
        raise ValueError(f"Not a version: {tag!r}")
    return parsed


def stable_span(tags: list[str]) -> tuple[str, str] | None:
    """Return (oldest, newest) stable tag, or None when there are no stable tags."""
    stable = sorted((t for t in tags if is_stable(t)), key=sort_key)
    if not stable:
        return None
    return stable[0], stable[-1]
