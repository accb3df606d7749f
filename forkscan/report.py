"""Remediation summary output using Jinja2 templates.

The console summary keeps the plain ``component: count`` format; the
Markdown summary is rendered from ``forkscan/templates/summary.md.j2``.
"""

import datetime as dt
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .aggregator import FailedItem
from .parsers import parse_purl

_TEMPLATES_DIR = Path(__file__).parent / "templates"


def _now_utc_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0).isoformat()


def format_remediation_summary(counts: dict[str, int]) -> str:
    """Render per-component remediated counts for the console."""
    lines = ["Remediated vulnerabilities per component:"]
    for component, count in counts.items():
        lines.append(f"{component}: {count}")
    return "\n".join(lines)


def _count_rows(counts: dict[str, int]) -> list[dict[str, Any]]:
    rows = []
    for component, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        parsed = parse_purl(component)
        rows.append(
            {
                "component": component,
                "ecosystem": parsed["registry"] if parsed else "?",
                "count": count,
            }
        )
    return rows


def write_summary_report(
    path: Path,
    records: list[dict[str, Any]],
    counts: dict[str, int],
    failures: list[FailedItem] | None = None,
    top_n: int = 25,
) -> None:
    """Write the Markdown remediation summary.

    Args:
        path: Output path for the markdown report.
        records: Serialized vulnerability records.
        counts: Component → remediated vulnerability count.
        failures: Work items that produced no results.
        top_n: How many of the most widespread vulnerabilities to list.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    failures = failures or []

    top = sorted(records, key=lambda r: (-len(r.get("affectedComponents") or []), r.get("id") or ""))[:top_n]

    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(default_for_string=False, default=False),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template("summary.md.j2")

    rendered = template.render(
        generated_at=_now_utc_iso(),
        component_count=len(counts) + len(failures),
        vuln_count=len(records),
        remediated_total=sum(counts.values()),
        counts=_count_rows(counts),
        top=top,
        failures=failures,
    )

    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        f.write(rendered)
    tmp.replace(path)
