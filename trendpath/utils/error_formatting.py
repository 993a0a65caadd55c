"""
Run issue reporting.

Turns the non-fatal conditions met during a Trend-Path run (short history,
unreachable products, ambiguous main supplier, per-product failures,
malformed input records) into structured, printable issue records.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum
import logging


# ============================================================
# Severity Levels
# ============================================================

class ErrorSeverity(Enum):
    """Issue severity classification."""

    INFO = "info"           # Informational (no action needed)
    WARNING = "warning"     # Degraded result (baseline fallback)
    ERROR = "error"         # Record dropped or product failed
    CRITICAL = "critical"   # Whole run unusable


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


# Issue codes
HISTORY_ISSUE = "TP_HISTORY"
NO_PATH_ISSUE = "TP_NO_PATH"
SUPPLIER_ISSUE = "TP_SUPPLIER"
PRODUCT_ISSUE = "TP_PRODUCT"
INPUT_ISSUE = "TP_INPUT"


# ============================================================
# Issue record
# ============================================================

@dataclass(frozen=True)
class RunIssue:
    """
    Structured report of a condition met during a run.

    Attributes:
        code: Stable issue code (TP_*)
        message: Human-readable description
        severity: Issue severity level
        context: Additional context (product, source, counts)
        recovery_steps: Actions that would avoid the issue
        technical_details: Exception text, when the issue wraps one
    """
    code: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    recovery_steps: List[str] = field(default_factory=list)
    technical_details: str = ""

    def format_for_display(self, include_technical: bool = False) -> str:
        """Format issue for a plain-text report."""
        lines = [f"[{self.severity.value.upper()}] {self.message}"]

        if self.context:
            for key, value in self.context.items():
                if value is not None:
                    lines.append(f"  • {key}: {value}")

        if self.recovery_steps:
            lines.append("  Suggested actions:")
            for i, step in enumerate(self.recovery_steps, 1):
                lines.append(f"    {i}. {step}")

        if include_technical and self.technical_details:
            lines.append(f"  Technical: {self.technical_details}")

        lines.append(f"  Code: {self.code}")
        return "\n".join(lines)

    def format_for_log(self) -> str:
        """Format issue for structured logging."""
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items() if v is not None)
        text = f"[{self.code}] {self.message} | Context: {context_str}"
        if self.technical_details:
            text += f" | Technical: {self.technical_details}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "context": dict(self.context),
        }


def log_issue(issue: RunIssue, logger: Optional[logging.Logger] = None) -> RunIssue:
    """Emit *issue* on *logger* at the level matching its severity."""
    (logger or logging.getLogger(__name__)).log(_LOG_LEVELS[issue.severity], issue.format_for_log())
    return issue


# ============================================================
# Issue builders
# ============================================================

def insufficient_history_issue(product: str, required: int, available: int) -> RunIssue:
    return RunIssue(
        code=HISTORY_ISSUE,
        message=f"Not enough demand history for {product}; spike detection skipped",
        severity=ErrorSeverity.WARNING,
        context={"product": product, "required": required, "available": available},
        recovery_steps=[
            f"Provide at least {required} observations",
            "Or shorten short_window / previous_window in settings",
        ],
    )


def no_path_issue(product: str, source: Optional[str]) -> RunIssue:
    return RunIssue(
        code=NO_PATH_ISSUE,
        message=f"No supply path reaches {product}; baseline forecast used",
        severity=ErrorSeverity.WARNING,
        context={"product": product, "source": source},
        recovery_steps=["Add a supply edge that connects the source to this product"],
    )


def main_supplier_issue(candidates: List[str]) -> RunIssue:
    if candidates:
        message = f"Ambiguous main supplier ({len(candidates)} candidates); using per-product sourcing"
    else:
        message = "No main supplier in supply graph; using per-product sourcing"
    return RunIssue(
        code=SUPPLIER_ISSUE,
        message=message,
        severity=ErrorSeverity.WARNING,
        context={"candidates": ", ".join(candidates) if candidates else "none"},
        recovery_steps=[
            "Make exactly one node have outgoing and no incoming edges",
            "Or set source_mode to 'per_product'",
        ],
    )


def product_failure_issue(product: str, stage: str, exc: Exception) -> RunIssue:
    return RunIssue(
        code=PRODUCT_ISSUE,
        message=f"Processing failed for {product} during {stage}",
        severity=ErrorSeverity.ERROR,
        context={"product": product, "stage": stage},
        recovery_steps=["Check the product's demand history and stock values"],
        technical_details=f"{type(exc).__name__}: {exc}",
    )


def input_record_issue(record: str, exc: Exception) -> RunIssue:
    return RunIssue(
        code=INPUT_ISSUE,
        message=f"Skipped malformed input record: {record}",
        severity=ErrorSeverity.ERROR,
        context={"record": record},
        recovery_steps=["Fix the record in the input file and rerun"],
        technical_details=f"{type(exc).__name__}: {exc}",
    )
