"""OSV record parsing and fork-point matching logic.

Pure functions for reading package URLs, folding OSV affected-range
events into bounds, and deciding whether a vulnerability affects a
given fork point. No I/O or network calls — all inputs are in-memory
data structures.
"""

import re
from typing import Any

from .versions import InvalidVersionError, compare_versions, parse_version

ZERO_VERSION = "0.0.0"

# purl type → OSV ecosystem name
REGISTRY_ALIASES = {
    "gem": "RubyGems",
    "maven": "Maven",
    "composer": "Packagist",
    "npm": "npm",
    "pypi": "PyPI",
    "golang": "Go",
    "cargo": "crates.io",
    "nuget": "NuGet",
    "hex": "Hex",
    "pub": "Pub",
}

_PURL_RE = re.compile(r"^pkg:([^/]+)/([^@]+)(?:@(.+))?")


def parse_purl(identifier: str) -> dict[str, Any] | None:
    """Parse a package URL into registry, component path, and version.

    Args:
        identifier: A string like ``pkg:composer/symfony/console@5.3.0``.

    Returns:
        Dict with ``registry`` (normalized ecosystem name), ``component``
        and ``version`` (``None`` when absent), or ``None`` if the
        identifier is not a package URL.
    """
    if not isinstance(identifier, str):
        return None
    m = _PURL_RE.match(identifier.strip())
    if not m:
        return None
    token = m.group(1)
    return {
        "registry": REGISTRY_ALIASES.get(token, token),
        "component": m.group(2),
        "version": m.group(3) or None,
    }


def query_purl(identifier: str) -> str | None:
    """Return the package URL without its version part.

    Args:
        identifier: Component package URL.

    Returns:
        ``pkg:<type>/<path>`` or ``None`` if the identifier is not a purl.
    """
    if not isinstance(identifier, str):
        return None
    m = _PURL_RE.match(identifier.strip())
    if not m:
        return None
    return f"pkg:{m.group(1)}/{m.group(2)}"


def build_osv_query(identifier: str) -> dict[str, Any] | None:
    """Build the OSV ``/v1/query`` request body for a component.

    Args:
        identifier: Component package URL.

    Returns:
        Request payload, or ``None`` if the component should be skipped.
    """
    purl = query_purl(identifier)
    if purl is None:
        return None
    return {"package": {"purl": purl}}


def _iter_ranges(vuln: dict[str, Any]):
    affected = vuln.get("affected") or []
    if not isinstance(affected, list):
        return
    for a in affected:
        if not isinstance(a, dict):
            continue
        ranges = a.get("ranges") or []
        if not isinstance(ranges, list):
            continue
        for r in ranges:
            if isinstance(r, dict):
                yield r


def _iter_events(rng: dict[str, Any]):
    events = rng.get("events") or []
    if not isinstance(events, list):
        return
    for e in events:
        if isinstance(e, dict):
            yield e


def range_bounds(rng: dict[str, Any]) -> tuple[str, str | None]:
    """Fold a range's events into its effective ``(introduced, fixed)`` bounds.

    Later events overwrite earlier ones. An unset, empty or ``"0"``
    introduced bound becomes ``0.0.0``; ``fixed`` stays ``None`` for
    ranges that are still vulnerable.

    Args:
        rng: One entry of an OSV ``affected[].ranges`` list.

    Returns:
        Tuple of (introduced, fixed).
    """
    introduced = None
    fixed = None
    for e in _iter_events(rng):
        if e.get("introduced") is not None:
            introduced = e["introduced"]
        if e.get("fixed") is not None:
            fixed = e["fixed"]
    if not introduced or introduced == "0":
        introduced = ZERO_VERSION
    return introduced, fixed or None


def _range_covers(rng: dict[str, Any], target: str) -> bool:
    introduced, fixed = range_bounds(rng)
    if compare_versions(target, introduced) < 0:
        return False
    if fixed is not None and compare_versions(target, fixed) >= 0:
        return False
    return True


def is_affected(vuln: dict[str, Any], target: str) -> bool:
    """Check whether a vulnerability affects a target version.

    The target is affected when any range of any affected entry has
    ``introduced <= target`` and, if a fixed bound exists,
    ``target < fixed``. Ranges of type ``GIT`` and ranges with bounds
    that do not parse are skipped; a vulnerability without range data is
    never affected.

    Args:
        vuln: Raw OSV vulnerability dict.
        target: Fork point version to test.

    Returns:
        True if at least one range covers the target.

    Raises:
        InvalidVersionError: if ``target`` itself cannot be parsed.
    """
    parse_version(target)
    for rng in _iter_ranges(vuln):
        if str(rng.get("type") or "").upper() == "GIT":
            continue
        try:
            if _range_covers(rng, target):
                return True
        except InvalidVersionError as e:
            print(f"  Warning: skipping range of {vuln.get('id') or '?'}: {e}")
    return False


def extract_fixed_versions(vuln: dict[str, Any]) -> list[str]:
    """Collect every ``fixed`` event value of a vulnerability.

    Args:
        vuln: Raw OSV vulnerability dict.

    Returns:
        Deduplicated list of fixed versions in first-seen order.
    """
    fixes: dict[str, None] = {}
    for rng in _iter_ranges(vuln):
        for e in _iter_events(rng):
            if e.get("fixed"):
                fixes[str(e["fixed"])] = None
    return list(fixes)
