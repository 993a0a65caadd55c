"""
Spike / virality detection with adaptive thresholds.

Two-tier decision per product:

1. Virality (relative volatility)
       viral_threshold = base_viral + viral_sensitivity × σ / max(ε, σ_long)
   If short_term_avg / max(ε, prev_avg) > viral_threshold the demand jump
   is too abrupt for the normal windows, and the statistics are recomputed
   on the shorter escalation windows (σ_long is kept).

2. Spike (absolute volatility)
       ratio            = clamp(σ / max_sigma_scale, 0, 1)
       base_sensitivity = lerp(min_base_sensitivity, max_base_sensitivity, ratio)
       volatility       = lerp(min_volatility, max_volatility, ratio)
       k                = base_sensitivity + volatility × σ
       threshold        = prev_avg + k × σ
   The product is spiking iff short_term_avg > threshold.

Detection is deterministic: same history + same settings -> same flag.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .exceptions import InsufficientHistoryError
from .models import Product, SpikeSnapshot
from .window_stats import WindowStats, compute_window_stats, safe_divisor
from ..settings import TrendPathSettings
from ..utils.error_formatting import (
    RunIssue,
    insufficient_history_issue,
    log_issue,
    product_failure_issue,
)

logger = logging.getLogger(__name__)

SKIP_INSUFFICIENT_HISTORY = "insufficient_history"
SKIP_ERROR = "error"


@dataclass(frozen=True)
class SpikeAssessment:
    """Outcome of spike detection for one product."""
    product: str
    is_spike: bool
    viral: bool = False
    stats: Optional[WindowStats] = None   # statistics the spike decision used
    viral_threshold: Optional[float] = None
    dynamic_threshold: Optional[float] = None
    sensitivity_k: Optional[float] = None
    skipped_reason: Optional[str] = None

    @property
    def evaluated(self) -> bool:
        return self.skipped_reason is None


@dataclass
class SpikeDetection:
    """Assessments for a batch plus the frozen snapshot derived from them."""
    assessments: Dict[str, SpikeAssessment]
    snapshot: SpikeSnapshot
    issues: List[RunIssue] = field(default_factory=list)


def _lerp(lo: float, hi: float, t: float) -> float:
    return lo + (hi - lo) * t


def viral_threshold(stats: WindowStats, settings: TrendPathSettings) -> float:
    relative_volatility = stats.sigma / safe_divisor(stats.long_term_sigma, settings.epsilon)
    return settings.base_viral + settings.viral_sensitivity * relative_volatility


def growth_ratio(stats: WindowStats, settings: TrendPathSettings) -> float:
    return stats.short_term_avg / safe_divisor(stats.prev_avg, settings.epsilon)


def dynamic_threshold(stats: WindowStats, settings: TrendPathSettings) -> Tuple[float, float]:
    """
    Spike threshold for *stats*.

    Returns:
        (threshold, k)
    """
    ratio = stats.sigma / safe_divisor(settings.max_sigma_scale, settings.epsilon)
    ratio = max(0.0, min(1.0, ratio))
    base_sensitivity = _lerp(settings.min_base_sensitivity, settings.max_base_sensitivity, ratio)
    volatility_factor = _lerp(settings.min_volatility, settings.max_volatility, ratio)
    k = base_sensitivity + volatility_factor * stats.sigma
    return stats.prev_avg + k * stats.sigma, k


def assess_history(name: str, history, settings: TrendPathSettings) -> SpikeAssessment:
    """
    Run both detection stages on one demand series.

    Raises:
        InsufficientHistoryError: history shorter than the normal windows
    """
    stats = compute_window_stats(
        history,
        short_window=settings.short_window,
        previous_window=settings.previous_window,
        long_term_window=settings.long_term_window,
    )

    v_threshold = viral_threshold(stats, settings)
    viral = growth_ratio(stats, settings) > v_threshold
    if viral:
        escalated = compute_window_stats(
            history,
            short_window=settings.viral_short_window,
            previous_window=settings.viral_previous_window,
            long_term_window=settings.long_term_window,
        )
        # σ_long keeps its stage-1 value (same history tail)
        stats = WindowStats(
            short_term_avg=escalated.short_term_avg,
            prev_avg=escalated.prev_avg,
            sigma=escalated.sigma,
            long_term_sigma=stats.long_term_sigma,
            short_window=escalated.short_window,
            previous_window=escalated.previous_window,
        )
        logger.debug("Viral escalation for %s (threshold %.3f)", name, v_threshold)

    threshold, k = dynamic_threshold(stats, settings)
    is_spike = stats.short_term_avg > threshold
    if is_spike:
        logger.info(
            "Spike detected for %s: short-term avg %.2f > threshold %.2f",
            name, stats.short_term_avg, threshold,
        )

    return SpikeAssessment(
        product=name,
        is_spike=is_spike,
        viral=viral,
        stats=stats,
        viral_threshold=v_threshold,
        dynamic_threshold=threshold,
        sensitivity_k=k,
    )


def assess_product(product: Product, settings: TrendPathSettings) -> SpikeAssessment:
    """Assess one product; short history yields a skipped, non-spike result."""
    try:
        return assess_history(product.name, product.demand_history, settings)
    except InsufficientHistoryError:
        return SpikeAssessment(
            product=product.name,
            is_spike=False,
            skipped_reason=SKIP_INSUFFICIENT_HISTORY,
        )


def issues_for(assessment: SpikeAssessment, settings: TrendPathSettings, available: int) -> List[RunIssue]:
    if assessment.skipped_reason == SKIP_INSUFFICIENT_HISTORY:
        return [log_issue(
            insufficient_history_issue(assessment.product, settings.min_history, available),
            logger,
        )]
    return []


def detect_spikes(products: Iterable[Product], settings: TrendPathSettings) -> SpikeDetection:
    """
    Assess every product sequentially and freeze the spiking set.

    A product that fails is reported and treated as non-spiking; the batch
    continues.
    """
    assessments: Dict[str, SpikeAssessment] = {}
    issues: List[RunIssue] = []

    for product in products:
        try:
            assessment = assess_product(product, settings)
        except Exception as exc:
            issues.append(log_issue(product_failure_issue(product.name, "spike detection", exc), logger))
            assessment = SpikeAssessment(product=product.name, is_spike=False, skipped_reason=SKIP_ERROR)
        assessments[product.name] = assessment
        issues.extend(issues_for(assessment, settings, len(product.demand_history)))

    snapshot = SpikeSnapshot.of(name for name, a in assessments.items() if a.is_spike)
    return SpikeDetection(assessments=assessments, snapshot=snapshot, issues=issues)
