"""
================================================================================
Allure Report Utilities
================================================================================

Helpers for enriching Allure reports from mobile test runs and summarizing
results after a run.

Features:
- Screenshot / JSON / text attachments
- Capability attachment with credentials masked
- Result summary for the runner

================================================================================
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import allure
from loguru import logger


# Capability keys never written to reports
SENSITIVE_KEYS = {"accesskey", "username", "password", "key"}


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_png(data: bytes, name: str = "Screenshot"):
    """
    Attach PNG bytes (e.g. a device screenshot) to Allure report.

    Args:
        data: PNG image bytes
        name: Attachment name
    """
    allure.attach(
        data,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def mask_capabilities(capabilities: Any) -> Any:
    """Return a copy of capabilities with credential values masked."""
    if isinstance(capabilities, dict):
        return {
            k: "***MASKED***" if k.lower() in SENSITIVE_KEYS else mask_capabilities(v)
            for k, v in capabilities.items()
        }
    if isinstance(capabilities, list):
        return [mask_capabilities(item) for item in capabilities]
    return capabilities


def attach_capabilities(capabilities: Dict[str, Any], name: str = "Capabilities"):
    """Attach session capabilities with credentials masked."""
    attach_json(mask_capabilities(capabilities), name=name)


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


def parse_results(results_dir: Path) -> List[Dict[str, Any]]:
    """
    Parse Allure result files.

    Returns:
        List of test result dictionaries
    """
    results = []

    for result_file in Path(results_dir).glob("*-result.json"):
        try:
            with open(result_file, encoding="utf-8") as f:
                results.append(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to parse {result_file}: {e}")

    return results


def summarize_results(results_dir: Path) -> TestResultSummary:
    """Count results by status and sum durations."""
    summary = TestResultSummary()

    for result in parse_results(results_dir):
        summary.total += 1
        status = result.get("status", "unknown")
        if status == "passed":
            summary.passed += 1
        elif status == "failed":
            summary.failed += 1
        elif status == "broken":
            summary.broken += 1
        elif status == "skipped":
            summary.skipped += 1
        else:
            summary.unknown += 1

        summary.duration_ms += result.get("stop", 0) - result.get("start", 0)

    return summary


__all__ = [
    "attach_png",
    "attach_json",
    "attach_text",
    "attach_capabilities",
    "mask_capabilities",
    "TestResultSummary",
    "parse_results",
    "summarize_results",
]
