"""ForkScan — fork-point vulnerability matching for vendored components.

This package resolves the highest upstream fork point of every catalog
component and reports the OSV vulnerabilities that affect it.
"""

__version__ = "0.1.0"
