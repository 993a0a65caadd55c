"""
Parallel spike detection.

Per-product detection is embarrassingly parallel: each product reads only
its own history and writes only its own assessment. This module fans the
products out over a ``ProcessPoolExecutor`` and merges the assessments back
into one frozen SpikeSnapshot before any path work begins.

Architecture
------------
* Top-level (module-scope) worker only, so it pickles under the "spawn"
  start method.
* Products travel as ``(name, history_tuple)`` primitives; the worker
  never receives Product objects or shared state.
* ``on_progress(n_done)`` is called after each chunk completes.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence

from ..domain.exceptions import InsufficientHistoryError
from ..domain.models import Product, SpikeSnapshot
from ..domain.spike_detection import (
    SKIP_ERROR,
    SKIP_INSUFFICIENT_HISTORY,
    SpikeAssessment,
    SpikeDetection,
    assess_history,
    issues_for,
)
from ..settings import TrendPathSettings
from ..utils.error_formatting import RunIssue, log_issue, product_failure_issue

logger = logging.getLogger(__name__)


# ── Worker (runs in a subprocess) ─────────────────────────────────────────────

def _spike_chunk_worker(chunk_args: dict) -> Dict[str, dict]:
    """
    Assess one chunk of products.

    ``chunk_args`` keys
    -------------------
    settings : TrendPathSettings
    products : list[tuple[str, tuple[float, ...]]]

    Returns
    -------
    dict  {name: {"assessment": SpikeAssessment, "error": str | None}}
    """
    settings: TrendPathSettings = chunk_args["settings"]
    results: Dict[str, dict] = {}

    for name, history in chunk_args["products"]:
        error = None
        try:
            assessment = assess_history(name, history, settings)
        except InsufficientHistoryError:
            assessment = SpikeAssessment(product=name, is_spike=False,
                                         skipped_reason=SKIP_INSUFFICIENT_HISTORY)
        except Exception as exc:
            # Never crash a chunk on one bad product
            error = f"{type(exc).__name__}: {exc}"
            assessment = SpikeAssessment(product=name, is_spike=False, skipped_reason=SKIP_ERROR)
        results[name] = {"assessment": assessment, "error": error}

    return results


# ── Orchestrator ──────────────────────────────────────────────────────────────

def detect_spikes_parallel(
    products: Sequence[Product],
    settings: TrendPathSettings,
    n_workers: Optional[int] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> SpikeDetection:
    """
    Run spike detection for *products* on ``n_workers`` processes.

    Returns the same SpikeDetection as the sequential
    ``spike_detection.detect_spikes``, with assessments in input order.
    """
    n_workers = n_workers or settings.max_workers
    n = len(products)
    if n == 0:
        return SpikeDetection(assessments={}, snapshot=SpikeSnapshot())

    items = [(p.name, p.demand_history) for p in products]
    chunk_size = max(1, math.ceil(n / n_workers))
    chunks = [items[i: i + chunk_size] for i in range(0, n, chunk_size)]

    raw: Dict[str, dict] = {}
    issues: List[RunIssue] = []
    done_count = 0

    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        future_map = {
            executor.submit(_spike_chunk_worker, {"settings": settings, "products": chunk}): chunk
            for chunk in chunks
        }

        for future in as_completed(future_map):
            try:
                raw.update(future.result())
            except Exception as exc:
                # Chunk failed: its products count as non-spiking
                logger.error("Spike detection chunk failed: %s", exc)
                for name, _history in future_map[future]:
                    raw[name] = {
                        "assessment": SpikeAssessment(product=name, is_spike=False,
                                                      skipped_reason=SKIP_ERROR),
                        "error": f"{type(exc).__name__}: {exc}",
                    }

            done_count += len(future_map[future])
            if on_progress:
                on_progress(done_count)

    assessments: Dict[str, SpikeAssessment] = {}
    for product in products:
        entry = raw[product.name]
        assessment = entry["assessment"]
        assessments[product.name] = assessment
        if entry["error"] is not None:
            issues.append(log_issue(
                product_failure_issue(product.name, "spike detection", RuntimeError(entry["error"])),
                logger,
            ))
        issues.extend(issues_for(assessment, settings, len(product.demand_history)))

    snapshot = SpikeSnapshot.of(name for name, a in assessments.items() if a.is_spike)
    return SpikeDetection(assessments=assessments, snapshot=snapshot, issues=issues)
