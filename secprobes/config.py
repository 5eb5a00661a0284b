from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_TARGET_URL = "http://localhost:3000"
DEFAULT_ARTIFACTS_DIR = "artifacts"
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_HEADER_TIMEOUT_MS = 5_000
DEFAULT_SETTLE_MS = 1_200
DEFAULT_LOG_LEVEL = "INFO"

HAR_FILENAME = "session.har"
SCREENSHOT_FILENAME = "home.png"
REPORT_FILENAME = "findings.sarif.json"

logger = logging.getLogger("secprobes.config")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class ProbeConfig:
    target_url: str = DEFAULT_TARGET_URL
    artifacts_dir: Path = Path(DEFAULT_ARTIFACTS_DIR)
    headless: bool = True
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    header_timeout_ms: int = DEFAULT_HEADER_TIMEOUT_MS
    settle_ms: int = DEFAULT_SETTLE_MS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def har_path(self) -> Path:
        return self.artifacts_dir / HAR_FILENAME

    @property
    def screenshot_path(self) -> Path:
        return self.artifacts_dir / SCREENSHOT_FILENAME

    @property
    def report_path(self) -> Path:
        return self.artifacts_dir / REPORT_FILENAME


def _read_int_from_env(
    environ: Mapping[str, str], var_name: str, default: int, minimum: int
) -> int:
    value = environ.get(var_name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %d", var_name, value, default)
        return default
    return max(minimum, parsed)


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProbeConfig:
    env = os.environ if environ is None else environ
    artifacts_dir = Path(env.get("SECPROBES_ARTIFACTS_DIR") or DEFAULT_ARTIFACTS_DIR)
    if not artifacts_dir.is_absolute():
        artifacts_dir = Path.cwd() / artifacts_dir
    return ProbeConfig(
        target_url=env.get("TARGET_URL") or DEFAULT_TARGET_URL,
        artifacts_dir=artifacts_dir,
        headless=env.get("SECPROBES_HEADLESS", "1") != "0",
        navigation_timeout_ms=_read_int_from_env(
            env, "SECPROBES_NAV_TIMEOUT_MS", DEFAULT_NAVIGATION_TIMEOUT_MS, 1_000
        ),
        header_timeout_ms=_read_int_from_env(
            env, "SECPROBES_HEADER_TIMEOUT_MS", DEFAULT_HEADER_TIMEOUT_MS, 0
        ),
        settle_ms=_read_int_from_env(env, "SECPROBES_SETTLE_MS", DEFAULT_SETTLE_MS, 0),
        log_level=(env.get("SECPROBES_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
