"""Configuration models using Pydantic.

All tunables (API hosts, concurrency, retry ceiling, backoff base, file
locations) live in one validated ``ScanConfig``. They are fixed at
deploy time through an optional ``forkscan.yaml`` next to the working
directory; the command-line entry points take no flags.
"""

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

CONFIG_FILENAMES = ("forkscan.yaml", "forkscan.yml", "forkscan.json")


class ScanConfig(BaseModel):
    """Validated settings for both pipeline stages.

    Example YAML::

        concurrency: 2
        retry_limit: 5
        initial_delay: 1.0
        osv_url: https://api.osv.dev/v1/query

    Attributes:
        catalog_url: Paginated catalog endpoint (``?page=N`` is appended).
        osv_url: OSV ``/v1/query`` endpoint.
        page_delay: Seconds to wait between catalog page fetches.
        concurrency: Number of parallel query lanes.
        retry_limit: Retries after the first attempt on transient failures.
        initial_delay: First backoff delay in seconds; doubles per retry.
        http_timeout: Per-request timeout in seconds.
        fork_points_file: Intermediate file written by the catalog stage.
        results_file: Deduplicated vulnerability list output.
        summary_file: Markdown remediation summary output.
    """

    catalog_url: str = "https://api.nes.herodevs.com/api/catalog/packages"
    osv_url: str = "https://api.osv.dev/v1/query"
    page_delay: float = Field(default=2.0, ge=0.0)
    concurrency: int = Field(default=2, ge=1, le=32)
    retry_limit: int = Field(default=5, ge=0, le=10)
    initial_delay: float = Field(default=1.0, gt=0.0, le=60.0)
    http_timeout: float = Field(default=30.0, gt=0.0)
    fork_points_file: Path = Path("componentsWithForkPoints.json")
    results_file: Path = Path("osv-results.json")
    summary_file: Path = Path("osv-summary.md")


def load_config(path: Path) -> ScanConfig:
    """Load settings from a YAML or JSON file.

    Args:
        path: Path to the config file.

    Returns:
        Validated ``ScanConfig`` instance.

    Raises:
        FileNotFoundError: if the file doesn't exist.
        pydantic.ValidationError: if content fails validation.
    """
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(content)
    else:
        raw = yaml.safe_load(content) or {}
    return ScanConfig.model_validate(raw)


def find_config(directory: Path | None = None) -> Path | None:
    """Find a config file, preferring YAML over JSON.

    Args:
        directory: Directory to search (defaults to the working directory).

    Returns:
        Path of the first existing config file, or ``None``.
    """
    base = directory or Path(".")
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.exists():
            return candidate
    return None


def resolve_config(directory: Path | None = None) -> ScanConfig:
    """Return the config from the discovered file, or the defaults."""
    path = find_config(directory)
    if path is None:
        return ScanConfig()
    print(f"Using configuration from {path}")
    return load_config(path)
