"""Domain exceptions for trendpath."""

from typing import List, Optional


class TrendPathError(ValueError):
    """Base class for trendpath domain errors."""


class InsufficientHistoryError(TrendPathError):
    """Demand history shorter than the windows require."""

    def __init__(self, required: int, available: int, product: Optional[str] = None):
        self.required = required
        self.available = available
        self.product = product
        subject = f" for {product}" if product else ""
        super().__init__(
            f"Insufficient demand history{subject}: need {required} observations, have {available}"
        )


class MainSupplierResolutionError(TrendPathError):
    """Zero or several nodes qualify as main supplier."""

    def __init__(self, candidates: List[str]):
        self.candidates = list(candidates)
        if self.candidates:
            detail = f"{len(self.candidates)} candidates: {', '.join(self.candidates)}"
        else:
            detail = "no node has outgoing edges without incoming ones"
        super().__init__(f"Cannot resolve main supplier ({detail})")


class InputFormatError(TrendPathError):
    """Input document does not have the expected shape."""
