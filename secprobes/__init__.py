"""Playwright-driven security smoke probes for a single target URL."""

__version__ = "1.0.0"
