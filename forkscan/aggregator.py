"""Thread-safe merging of vulnerability findings across components.

One ``ResultAggregator`` is shared by every worker lane. It owns the map
from vulnerability ID to merged record, the per-component remediated
counts, and the list of failed work items; a single lock serializes all
mutation.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

from .parsers import extract_fixed_versions


@dataclass
class VulnerabilityRecord:
    """A vulnerability merged across every component it was found in.

    Attributes:
        id: OSV identifier (e.g. ``GHSA-xxxx-xxxx-xxxx``).
        summary: One-line summary.
        details: Long description.
        severity: Raw OSV severity entries.
        affected: Raw OSV affected-range data from the first report.
        fixed_versions: Deduplicated fixed versions, first-seen order.
        references: Reference URLs.
        affected_components: Components whose fork point is affected.
    """

    id: str
    summary: str = ""
    details: str = ""
    severity: list[Any] = field(default_factory=list)
    affected: list[Any] = field(default_factory=list)
    fixed_versions: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)
    affected_components: list[str] = field(default_factory=list)

    @classmethod
    def from_osv(cls, vuln: dict[str, Any], component: str) -> "VulnerabilityRecord":
        """Build a record from a raw OSV vulnerability dict."""
        refs = vuln.get("references") or []
        return cls(
            id=str(vuln["id"]),
            summary=vuln.get("summary") or "",
            details=vuln.get("details") or "",
            severity=list(vuln.get("severity") or []),
            affected=list(vuln.get("affected") or []),
            fixed_versions=extract_fixed_versions(vuln),
            references=[r["url"] for r in refs if isinstance(r, dict) and r.get("url")],
            affected_components=[component],
        )

    def merge(self, fixed_versions: list[str], component: str) -> None:
        """Union in another report of the same vulnerability."""
        for v in fixed_versions:
            if v not in self.fixed_versions:
                self.fixed_versions.append(v)
        if component not in self.affected_components:
            self.affected_components.append(component)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "details": self.details,
            "severity": self.severity,
            "affected": self.affected,
            "fixedVersions": list(self.fixed_versions),
            "references": list(self.references),
            "affectedComponents": list(self.affected_components),
        }


@dataclass
class FailedItem:
    """A work item that produced no results."""

    component: str
    fork_point: str
    reason: str


class ResultAggregator:
    """Deduplicating, lock-guarded store of vulnerability findings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, VulnerabilityRecord] = {}
        self._remediated: dict[str, int] = {}
        self._failures: list[FailedItem] = []

    def record(self, vuln: dict[str, Any], component: str) -> None:
        """Merge one vulnerability reported for ``component``.

        A new ID creates a record seeded with ``component``; a known ID
        gains any new fixed versions and the component (once).

        Args:
            vuln: Raw OSV vulnerability dict; must carry an ``id``.
            component: Component identifier the vulnerability was found for.

        Raises:
            KeyError: if ``vuln`` has no ``id``.
        """
        if not vuln.get("id"):
            raise KeyError("Vulnerability record has no 'id'")
        vuln_id = str(vuln["id"])
        fixes = extract_fixed_versions(vuln)
        with self._lock:
            existing = self._records.get(vuln_id)
            if existing is None:
                self._records[vuln_id] = VulnerabilityRecord.from_osv(vuln, component)
            else:
                existing.merge(fixes, component)

    def set_remediated(self, component: str, count: int) -> None:
        with self._lock:
            self._remediated[component] = count

    def record_failure(self, component: str, fork_point: str, reason: str) -> None:
        with self._lock:
            self._failures.append(FailedItem(component, fork_point, reason))

    def get(self, vuln_id: str) -> VulnerabilityRecord | None:
        with self._lock:
            return self._records.get(vuln_id)

    def records(self) -> list[dict[str, Any]]:
        """Return serializable snapshots of every merged record."""
        with self._lock:
            return [r.to_dict() for r in self._records.values()]

    def remediation_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._remediated)

    def failures(self) -> list[FailedItem]:
        with self._lock:
            return list(self._failures)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
