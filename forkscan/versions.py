"""Dot-separated numeric version comparison.

Versions are compared segment by segment as integers, with missing
trailing segments treated as ``0`` (so ``1.2`` equals ``1.2.0``).
Pre-release and build-metadata tags are not modeled: a segment that is
not a plain integer is rejected with ``InvalidVersionError``.
"""


class InvalidVersionError(ValueError):
    """Raised when a version string has a non-numeric segment."""


def parse_version(version: str) -> tuple[int, ...]:
    """Split a version string into integer segments.

    Args:
        version: A version such as ``5.3.0``.

    Returns:
        Tuple of integer segments.

    Raises:
        InvalidVersionError: if any segment is not a non-negative integer.
    """
    if not isinstance(version, str):
        raise InvalidVersionError(f"Version must be a string, got {type(version).__name__}")
    text = version.strip()
    segments: list[int] = []
    for part in text.split("."):
        if not part.isdigit() or not part.isascii():
            raise InvalidVersionError(f"Unparseable version {version!r}")
        segments.append(int(part))
    return tuple(segments)


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Args:
        a: Left-hand version.
        b: Right-hand version.

    Returns:
        ``-1`` if ``a < b``, ``0`` if equal, ``1`` if ``a > b``.

    Raises:
        InvalidVersionError: if either version cannot be parsed.
    """
    pa = parse_version(a)
    pb = parse_version(b)
    for i in range(max(len(pa), len(pb))):
        na = pa[i] if i < len(pa) else 0
        nb = pb[i] if i < len(pb) else 0
        if na > nb:
            return 1
        if na < nb:
            return -1
    return 0
