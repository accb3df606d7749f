#!/usr/bin/env python3
"""ForkScan catalog stage — thin shim.

Allows ``python scrape_catalog.py`` invocations; the real implementation
lives in ``forkscan/``.
"""

from forkscan.cli import main_catalog

if __name__ == "__main__":
    raise SystemExit(main_catalog())
