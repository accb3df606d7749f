"""Command-line entry points for both pipeline stages.

Neither command takes flags; settings come from ``forkscan.yaml`` (see
``forkscan.config``) or the built-in defaults.
"""

from pathlib import Path

from pydantic import ValidationError

from .catalog import CatalogError, scrape_catalog
from .config import ScanConfig, resolve_config
from .downloaders import fetch_catalog_page, requests_session
from .pool import WorkItem
from .report import format_remediation_summary, write_summary_report
from .scanner import run_scan
from .state import ForkPointFileError, load_fork_points, write_fork_points, write_results


def _load_config() -> ScanConfig | None:
    try:
        return resolve_config()
    except (OSError, ValueError, ValidationError) as e:
        print(f"❌ Invalid configuration: {e}")
        return None


def main_catalog(config: ScanConfig | None = None) -> int:
    """Stage 1: scrape the catalog and write resolved fork points.

    Returns:
        Process exit code.
    """
    config = config or _load_config()
    if config is None:
        return 1

    session = requests_session()
    try:
        resolver = scrape_catalog(
            lambda page: fetch_catalog_page(session, config.catalog_url, page),
            page_delay=config.page_delay,
        )
    except CatalogError as e:
        print(f"❌ Error fetching pages: {e}")
        return 1

    entries = resolver.results()
    print(f"Collected components and fork points: {len(entries)}")
    write_fork_points(config.fork_points_file, entries)
    print(f"Saved results to {config.fork_points_file}")
    return 0


def main_scan(config: ScanConfig | None = None) -> int:
    """Stage 2: scan every component against OSV and write results.

    Returns:
        Process exit code; ``1`` if the fork point file is unusable.
    """
    config = config or _load_config()
    if config is None:
        return 1

    try:
        entries = load_fork_points(Path(config.fork_points_file))
    except ForkPointFileError as e:
        print(f"❌ {e}")
        return 1

    print(f"Checking {len(entries)} components")
    items = [WorkItem(e.component, e.fork_point) for e in entries]
    aggregator = run_scan(items, config)

    records = aggregator.records()
    counts = aggregator.remediation_counts()
    failures = aggregator.failures()
    write_results(config.results_file, records)
    write_summary_report(config.summary_file, records, counts, failures)

    print()
    print(format_remediation_summary(counts))
    if failures:
        print(f"\n⚠️ {len(failures)} component(s) failed; see {config.summary_file}")
    print(f"\n✅ Saved {len(records)} unique vulnerabilities to {config.results_file}")
    return 0
