"""
Trend-Path workflow: one synchronous pass over a batch of products.

Pipeline (single flow, no feedback):
    detect spikes            -> SpikeDetection (frozen SpikeSnapshot)
        -> price edges       -> tuple[PricedEdge] (fresh per run)
            -> Bellman-Ford  -> PathResult per source
                -> forecast  -> ProductOutcome per product
                    -> RunResult (+ global depletion warning)

One product's bad data never aborts the batch: its failure is reported as a
RunIssue and it falls back to a baseline-only outcome.
"""
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from ..domain.cost_model import PricedEdge, SupplyGraph
from ..domain.exceptions import MainSupplierResolutionError
from ..domain.forecast import (
    ForecastEstimate,
    depletion_warning,
    estimate_product,
)
from ..domain.models import Product, ProductOutcome, RunResult, SourceMode, SpikeSnapshot, SupplyEdge
from ..domain.shortest_path import PathResult, bellman_ford, path_cost, resolve_main_supplier
from ..domain.spike_detection import SpikeDetection, detect_spikes
from ..settings import TrendPathSettings
from ..utils.error_formatting import (
    RunIssue,
    input_record_issue,
    log_issue,
    main_supplier_issue,
    no_path_issue,
    product_failure_issue,
)
from .spike_parallel import detect_spikes_parallel

logger = logging.getLogger(__name__)


class TrendPathWorkflow:
    """Spike detection, spike-aware routing and depletion forecasting."""

    def __init__(self, settings: Optional[TrendPathSettings] = None):
        """
        Initialize the workflow.

        Args:
            settings: Run parameters (defaults when None)
        """
        self.settings = settings or TrendPathSettings()

    def detect(self, products: Sequence[Product]) -> SpikeDetection:
        """Spike detection stage, parallel when max_workers > 1."""
        if self.settings.max_workers > 1 and len(products) > 1:
            return detect_spikes_parallel(products, self.settings)
        return detect_spikes(products, self.settings)

    def run(self, products: Iterable[Product], edges: Iterable[SupplyEdge]) -> RunResult:
        """
        Run the full pipeline once.

        Args:
            products: Products with history and stock (names must be unique;
                      later duplicates are reported and ignored)
            edges: Directed supply edges

        Returns:
            RunResult owned by the caller
        """
        issues: List[RunIssue] = []
        batch = self._unique_products(products, issues)

        detection = self.detect(batch)
        issues.extend(detection.issues)
        snapshot = detection.snapshot

        graph = SupplyGraph(edges)
        priced = graph.price_edges(snapshot, self.settings.spike_penalty)

        mode = self.settings.source_mode
        main_supplier: Optional[str] = None
        shared: Optional[PathResult] = None
        if mode == SourceMode.MAIN_SUPPLIER:
            try:
                main_supplier = resolve_main_supplier(graph)
                shared = bellman_ford(priced, main_supplier)
            except MainSupplierResolutionError as exc:
                issues.append(log_issue(main_supplier_issue(exc.candidates), logger))
                mode = SourceMode.PER_PRODUCT

        outcomes: Dict[str, ProductOutcome] = {}
        for product in batch:
            assessment = detection.assessments.get(product.name)
            is_spike = bool(assessment and assessment.is_spike)
            viral = bool(assessment and assessment.viral)
            try:
                result = shared if shared is not None else bellman_ford(priced, product.name)
                outcomes[product.name] = self._outcome(product, result, priced, is_spike, viral, detection, issues)
            except Exception as exc:
                issues.append(log_issue(product_failure_issue(product.name, "routing", exc), logger))
                outcomes[product.name] = self._fallback_outcome(product, is_spike, viral, snapshot, issues)

        warning = depletion_warning(
            (o.depletion_periods for o in outcomes.values()),
            self.settings.depletion_warning_threshold,
        )

        run_result = RunResult(
            outcomes=outcomes,
            depletion_warning=warning,
            source_mode=mode,
            snapshot=snapshot,
            main_supplier=main_supplier,
            issues=issues,
        )
        logger.info(
            "Trend-Path run: %d products, %d spiking, source mode %s, depletion warning %s",
            len(outcomes), len(snapshot), mode.value, warning,
        )
        return run_result

    def _outcome(
        self,
        product: Product,
        result: PathResult,
        priced: Sequence[PricedEdge],
        is_spike: bool,
        viral: bool,
        detection: SpikeDetection,
        issues: List[RunIssue],
    ) -> ProductOutcome:
        path = result.path_to(product.name)
        cost = None
        if path is None:
            issues.append(log_issue(no_path_issue(product.name, result.source), logger))
        else:
            cost = path_cost(priced, path)
        estimate = estimate_product(product, path, detection.snapshot, self.settings)
        return self._build_outcome(product, estimate, is_spike, viral, path, cost, result.source)

    def _fallback_outcome(
        self,
        product: Product,
        is_spike: bool,
        viral: bool,
        snapshot: SpikeSnapshot,
        issues: List[RunIssue],
    ) -> ProductOutcome:
        """Baseline-only outcome; an empty forecast if even that fails."""
        try:
            estimate = estimate_product(product, None, snapshot, self.settings)
        except Exception as exc:
            issues.append(log_issue(product_failure_issue(product.name, "forecast", exc), logger))
            estimate = ForecastEstimate(baseline=0.0, adjusted=0.0, spike_count=0, depletion_periods=None)
        return self._build_outcome(product, estimate, is_spike, viral, None, None, None)

    @staticmethod
    def _build_outcome(
        product: Product,
        estimate: ForecastEstimate,
        is_spike: bool,
        viral: bool,
        path: Optional[List[str]],
        cost: Optional[float],
        source: Optional[str],
    ) -> ProductOutcome:
        return ProductOutcome(
            product=product.name,
            is_spike=is_spike,
            viral=viral,
            baseline_forecast=estimate.baseline,
            adjusted_forecast=estimate.adjusted,
            spike_count=estimate.spike_count,
            depletion_periods=estimate.depletion_periods,
            path=path,
            path_cost=cost,
            source=source,
        )

    @staticmethod
    def _unique_products(products: Iterable[Product], issues: List[RunIssue]) -> List[Product]:
        seen: Dict[str, Product] = {}
        for product in products:
            if product.name in seen:
                issues.append(log_issue(
                    input_record_issue(f"product {product.name}", ValueError("duplicate product name")),
                    logger,
                ))
                continue
            seen[product.name] = product
        return list(seen.values())


def run_trend_path(
    products: Iterable[Product],
    edges: Iterable[SupplyEdge],
    settings: Optional[TrendPathSettings] = None,
) -> RunResult:
    """Convenience wrapper: ``TrendPathWorkflow(settings).run(products, edges)``."""
    return TrendPathWorkflow(settings).run(products, edges)
