#!/usr/bin/env python3
"""ForkScan vulnerability stage — thin shim.

Allows ``python scrape_osv.py`` invocations; the real implementation
lives in ``forkscan/``.
"""

from forkscan.cli import main_scan

if __name__ == "__main__":
    raise SystemExit(main_scan())
