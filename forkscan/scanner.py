"""Per-component vulnerability scan and the concurrent scan driver.

Each work item is queried against OSV, filtered to the vulnerabilities
that affect its fork point, and merged into the shared aggregator. All
failures are contained within the item: they are logged, recorded on
the aggregator, and the lane moves on.
"""

import threading
from typing import Callable, Iterable

import requests

from .aggregator import ResultAggregator
from .config import ScanConfig
from .downloaders import OsvClient, PermanentQueryError, requests_session
from .parsers import build_osv_query, extract_fixed_versions, is_affected
from .pool import QueryOutcome, WorkItem, run_pool
from .versions import InvalidVersionError, parse_version


def _fail(outcome: QueryOutcome, aggregator: ResultAggregator, reason: str) -> QueryOutcome:
    print(f"  ❌ {outcome.item}: {reason}")
    aggregator.record_failure(outcome.item.component, outcome.item.fork_point, reason)
    outcome.error = reason
    return outcome


def _scan(item: WorkItem, client: OsvClient, aggregator: ResultAggregator, outcome: QueryOutcome) -> QueryOutcome:
    try:
        parse_version(item.fork_point)
    except InvalidVersionError as e:
        return _fail(outcome, aggregator, f"invalid fork point: {e}")

    payload = build_osv_query(item.component)
    if payload is None:
        return _fail(outcome, aggregator, "not a package URL")

    print(f"Querying {item.component}")
    try:
        outcome.vulns = client.query(payload, context=str(item))
    except PermanentQueryError as e:
        return _fail(outcome, aggregator, str(e))

    if not outcome.vulns:
        print(f"  No vulns for {item.component}")

    remediated = 0
    for vuln in outcome.vulns:
        if not isinstance(vuln, dict) or not vuln.get("id"):
            continue
        if not is_affected(vuln, item.fork_point):
            continue
        outcome.relevant.append(str(vuln["id"]))
        if extract_fixed_versions(vuln):
            remediated += 1
        aggregator.record(vuln, item.component)

    aggregator.set_remediated(item.component, remediated)
    return outcome


def scan_component(item: WorkItem, client: OsvClient, aggregator: ResultAggregator) -> QueryOutcome:
    """Query, filter, and record vulnerabilities for one component.

    Any error raised while scanning is recorded as a failure of this
    item rather than propagated to the lane.

    Args:
        item: Component and fork point to scan.
        client: OSV client used for the lookup.
        aggregator: Shared result store.

    Returns:
        ``QueryOutcome`` describing what happened.
    """
    outcome = QueryOutcome(item=item)
    try:
        return _scan(item, client, aggregator, outcome)
    except Exception as e:
        return _fail(outcome, aggregator, f"unexpected error: {e}")


def run_scan(
    items: Iterable[WorkItem],
    config: ScanConfig,
    session_factory: Callable[[], requests.Session] = requests_session,
    client: OsvClient | None = None,
) -> ResultAggregator:
    """Scan every work item with ``config.concurrency`` parallel lanes.

    Unless ``client`` is given, each lane thread builds its own session
    and OSV client on first use, so no ``requests.Session`` is shared
    across threads.

    Args:
        items: Work items to scan.
        config: Scan settings (concurrency, retry, endpoint).
        session_factory: Builds one session per lane.
        client: Optional pre-built OSV client shared by every lane.

    Returns:
        The populated ``ResultAggregator``.
    """
    aggregator = ResultAggregator()
    lane_state = threading.local()

    def _lane_client() -> OsvClient:
        if client is not None:
            return client
        own = getattr(lane_state, "client", None)
        if own is None:
            own = OsvClient(
                session_factory(),
                url=config.osv_url,
                retry_limit=config.retry_limit,
                initial_delay=config.initial_delay,
                timeout=config.http_timeout,
            )
            lane_state.client = own
        return own

    run_pool(items, config.concurrency, lambda item: scan_component(item, _lane_client(), aggregator))
    return aggregator
