from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

from .findings import Finding, sarif_level

SARIF_SCHEMA = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "playwright-sec-probes"

logger = logging.getLogger("secprobes.sarif")
logger.addHandler(logging.NullHandler())


def finding_to_result(finding: Finding, target_url: str) -> Dict[str, Any]:
    return {
        "ruleId": finding.rule_id,
        "level": sarif_level(finding.severity),
        "message": {"text": f"{finding.title}: {finding.detail}"},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": finding.url or target_url},
                }
            }
        ],
    }


def build_sarif(findings: Iterable[Finding], target_url: str) -> Dict[str, Any]:
    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {"driver": {"name": TOOL_NAME}},
                "results": [finding_to_result(finding, target_url) for finding in findings],
            }
        ],
    }


def write_sarif(findings: Iterable[Finding], target_url: str, path: Path) -> Path:
    document = build_sarif(findings, target_url)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(document, handle, ensure_ascii=False, indent=2)
    logger.info("Wrote %d result(s) to %s", len(document["runs"][0]["results"]), path)
    return path
