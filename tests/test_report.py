"""Unit tests for forkscan.report — remediation summaries."""

from pathlib import Path

from conftest import make_vuln
from forkscan.aggregator import FailedItem, ResultAggregator
from forkscan.report import format_remediation_summary, write_summary_report


def _records() -> list[dict]:
    agg = ResultAggregator()
    agg.record(make_vuln("GHSA-wide", fixed="2.0.0", summary="Pipe | in summary"), "pkg:npm/a")
    agg.record(make_vuln("GHSA-wide", fixed="2.0.0"), "pkg:composer/symfony/console")
    agg.record(make_vuln("GHSA-narrow", fixed=None), "pkg:npm/a")
    return agg.records()


class TestFormatRemediationSummary:
    def test_lines(self):
        out = format_remediation_summary({"pkg:npm/a": 2, "pkg:npm/b": 0})
        assert out.splitlines() == [
            "Remediated vulnerabilities per component:",
            "pkg:npm/a: 2",
            "pkg:npm/b: 0",
        ]

    def test_empty(self):
        assert format_remediation_summary({}) == "Remediated vulnerabilities per component:"


class TestWriteSummaryReport:
    def test_renders(self, tmp_path: Path):
        path = tmp_path / "reports" / "summary.md"
        counts = {"pkg:npm/a": 1, "pkg:composer/symfony/console": 1}
        failures = [FailedItem("pkg:gem/rails", "6.1.0", "HTTP 400")]
        write_summary_report(path, _records(), counts, failures)

        text = path.read_text()
        assert "# ForkScan Vulnerability Summary" in text
        assert "| Unique vulnerabilities | 2 |" in text
        assert "| Components scanned | 3 |" in text
        assert "| `pkg:composer/symfony/console` | Packagist | 1 |" in text
        assert "| GHSA-wide | 2 | 2.0.0 |" in text
        assert "Pipe \\| in summary" in text
        assert "`pkg:gem/rails@6.1.0` — HTTP 400" in text
        assert not path.with_suffix(".md.tmp").exists()

    def test_no_components(self, tmp_path: Path):
        path = tmp_path / "summary.md"
        write_summary_report(path, [], {})
        text = path.read_text()
        assert "No components were scanned successfully" in text
        assert "| Failed components | 0 |" in text
        assert "## Failed components" not in text
