"""Catalog scraping and per-component fork point resolution.

The catalog API is paginated; the first page reports ``totalPages`` and
the remaining pages are fetched sequentially with a fixed delay between
requests. For every component only the highest fork point is kept.
"""

import time
from typing import Any, Callable

from .versions import InvalidVersionError, compare_versions, parse_version


class CatalogError(RuntimeError):
    """Raised when a catalog page cannot be fetched."""


class ForkPointResolver:
    """Keeps the maximum fork point seen per component.

    Ties keep the first value seen. Insertion order of components is
    preserved in ``results()``.
    """

    def __init__(self) -> None:
        self._fork_points: dict[str, str] = {}

    def observe(self, component: str, fork_point: str) -> bool:
        """Offer one fork point for a component.

        Args:
            component: Component identifier.
            fork_point: Fork point version.

        Returns:
            True if the stored fork point changed.

        Raises:
            InvalidVersionError: if ``fork_point`` cannot be parsed.
        """
        current = self._fork_points.get(component)
        if current is None:
            parse_version(fork_point)
            self._fork_points[component] = fork_point
            return True
        if compare_versions(fork_point, current) > 0:
            self._fork_points[component] = fork_point
            return True
        return False

    def add_page(self, results: Any) -> int:
        """Fold one page of catalog entries into the resolver.

        Entries without a component, versions without an
        ``oss.forkPoint``, and unparseable fork points are skipped.

        Args:
            results: The page's ``results`` list.

        Returns:
            Number of fork points accepted.
        """
        accepted = 0
        if not isinstance(results, list):
            return accepted
        for entry in results:
            if not isinstance(entry, dict):
                continue
            component = entry.get("component")
            if not component or not isinstance(component, str):
                continue
            versions = entry.get("versions") or []
            if not isinstance(versions, list):
                continue
            for version in versions:
                oss = version.get("oss") if isinstance(version, dict) else None
                fork_point = oss.get("forkPoint") if isinstance(oss, dict) else None
                if not fork_point or not isinstance(fork_point, str):
                    continue
                try:
                    self.observe(component, fork_point)
                    accepted += 1
                except InvalidVersionError as e:
                    print(f"  Warning: skipping {component}: {e}")
        return accepted

    def results(self) -> list[dict[str, str]]:
        """Return ``[{"component", "forkPoint"}]`` in first-seen order."""
        return [{"component": c, "forkPoint": fp} for c, fp in self._fork_points.items()]

    def __len__(self) -> int:
        return len(self._fork_points)


def scrape_catalog(
    fetch_page: Callable[[int], dict[str, Any]],
    page_delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    resolver: ForkPointResolver | None = None,
) -> ForkPointResolver:
    """Walk every catalog page and resolve fork points.

    The page count is read once from page 1. Later pages reporting a
    different ``totalPages`` are logged but not reconciled; the catalog
    is assumed not to change during a scrape.

    Args:
        fetch_page: Callable returning the page dict for a 1-based page.
        page_delay: Seconds to sleep before each page after the first.
        sleep: Sleep function (injectable for tests).
        resolver: Optional resolver to accumulate into.

    Returns:
        The populated ``ForkPointResolver``.

    Raises:
        CatalogError: if any page fails to download.
    """
    resolver = resolver if resolver is not None else ForkPointResolver()

    def _fetch(page: int) -> dict[str, Any]:
        try:
            return fetch_page(page)
        except Exception as e:
            raise CatalogError(f"Failed to fetch catalog page {page}: {e}") from e

    first = _fetch(1)
    try:
        total_pages = int(first.get("totalPages") or 1)
    except (TypeError, ValueError):
        total_pages = 1
    resolver.add_page(first.get("results"))

    for page in range(2, total_pages + 1):
        sleep(page_delay)
        data = _fetch(page)
        try:
            reported = int(data["totalPages"])
        except (KeyError, TypeError, ValueError):
            reported = None
        if reported is not None and reported != total_pages:
            print(f"  Warning: page {page} reports totalPages={reported}, continuing with {total_pages}")
        resolver.add_page(data.get("results"))

    print(f"Resolved fork points for {len(resolver)} components across {total_pages} page(s)")
    return resolver
