"""
Domain models for trendpath.

Pure data classes + value objects. No I/O, no side effects.
Run outputs are built fresh on every run; inputs are never mutated.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple
import math

from ..utils.error_formatting import RunIssue


class SourceMode(str, Enum):
    """Where shortest-path runs start from."""
    MAIN_SUPPLIER = "main_supplier"  # One run from the unique root supplier
    PER_PRODUCT = "per_product"      # One run per product, product as source


@dataclass(frozen=True)
class Product:
    """Inventory item with its demand history - immutable."""
    name: str
    demand_history: Tuple[float, ...]
    stock: float

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Product name cannot be empty")
        history = tuple(float(x) for x in self.demand_history)
        if any(not math.isfinite(x) for x in history):
            raise ValueError(f"Demand history of {self.name} contains non-finite values")
        if any(x < 0 for x in history):
            raise ValueError(f"Demand history of {self.name} contains negative values")
        object.__setattr__(self, "demand_history", history)
        stock = float(self.stock)
        if not math.isfinite(stock) or stock < 0:
            raise ValueError(f"Stock of {self.name} must be a non-negative number")
        object.__setattr__(self, "stock", stock)


@dataclass(frozen=True)
class SupplyEdge:
    """Directed supply route between two nodes - immutable."""
    source: str
    destination: str
    base_cost: float

    def __post_init__(self):
        if not self.source or not self.destination:
            raise ValueError("Supply edge endpoints cannot be empty")
        cost = float(self.base_cost)
        if not math.isfinite(cost) or cost < 0:
            raise ValueError(
                f"Base cost of {self.source}->{self.destination} must be finite and non-negative"
            )
        object.__setattr__(self, "base_cost", cost)


@dataclass(frozen=True)
class SpikeSnapshot:
    """
    Frozen spike state handed from detection to the cost and path stages.

    Only names in ``spiking`` count as spikes; suppliers and intermediate
    nodes are never spiking.
    """
    spiking: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, names: Iterable[str]) -> "SpikeSnapshot":
        return cls(frozenset(names))

    def is_spike(self, node: str) -> bool:
        return node in self.spiking

    def __len__(self) -> int:
        return len(self.spiking)


@dataclass(frozen=True)
class ProductOutcome:
    """Per-product result of one run."""
    product: str
    is_spike: bool
    viral: bool
    baseline_forecast: float
    adjusted_forecast: float
    spike_count: int
    depletion_periods: Optional[int]   # None = never depletes
    path: Optional[List[str]]          # None = no path
    path_cost: Optional[float] = None
    source: Optional[str] = None

    @property
    def has_path(self) -> bool:
        return self.path is not None

    @property
    def never_depletes(self) -> bool:
        return self.depletion_periods is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product,
            "is_spike": self.is_spike,
            "viral": self.viral,
            "baseline_forecast": self.baseline_forecast,
            "adjusted_forecast": self.adjusted_forecast,
            "spike_count": self.spike_count,
            "depletion_periods": self.depletion_periods,
            "path": list(self.path) if self.path is not None else None,
            "path_cost": self.path_cost,
            "source": self.source,
        }


@dataclass
class RunResult:
    """Output of one Trend-Path run, owned by the caller."""
    outcomes: Dict[str, ProductOutcome]
    depletion_warning: bool
    source_mode: SourceMode
    snapshot: SpikeSnapshot
    main_supplier: Optional[str] = None
    issues: List[RunIssue] = field(default_factory=list)

    @property
    def min_depletion(self) -> Optional[int]:
        """Earliest depletion estimate across products (None if none deplete)."""
        finite = [o.depletion_periods for o in self.outcomes.values() if o.depletion_periods is not None]
        return min(finite) if finite else None

    @property
    def spiking_products(self) -> List[str]:
        return sorted(name for name, o in self.outcomes.items() if o.is_spike)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "depletion_warning": self.depletion_warning,
            "min_depletion": self.min_depletion,
            "source_mode": self.source_mode.value,
            "main_supplier": self.main_supplier,
            "products": {name: o.to_dict() for name, o in self.outcomes.items()},
            "issues": [issue.to_dict() for issue in self.issues],
        }
