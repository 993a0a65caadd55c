"""
JSON input loading for Trend-Path runs.

Expected document::

    {
      "products": {
        "Burger": {"stock": 100, "demand_history": [10, 12, 11, ...]},
        ...
      },
      "edges": [
        {"source": "Kitchen", "destination": "Burger", "cost": 5.0},
        ["Kitchen", "Fries", 4.0],
        ...
      ]
    }

Malformed product or edge records are skipped and reported; the rest of the
document still loads.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging

from ..domain.exceptions import InputFormatError
from ..domain.models import Product, SupplyEdge
from ..utils.error_formatting import RunIssue, input_record_issue, log_issue

logger = logging.getLogger(__name__)


@dataclass
class RunInput:
    """Products and edges parsed from one input document."""
    products: List[Product] = field(default_factory=list)
    edges: List[SupplyEdge] = field(default_factory=list)
    issues: List[RunIssue] = field(default_factory=list)


def _parse_product(name: str, record: Any) -> Product:
    if not isinstance(record, dict):
        raise InputFormatError("product record must be an object")
    if "stock" not in record:
        raise InputFormatError("missing 'stock'")
    history = record.get("demand_history", record.get("history"))
    if not isinstance(history, list):
        raise InputFormatError("'demand_history' must be a list")
    return Product(name=name, demand_history=tuple(history), stock=record["stock"])


def _parse_edge(record: Any) -> SupplyEdge:
    if isinstance(record, dict):
        try:
            return SupplyEdge(
                source=str(record["source"]),
                destination=str(record["destination"]),
                base_cost=record.get("cost", record.get("base_cost")),
            )
        except KeyError as e:
            raise InputFormatError(f"missing {e}") from e
    if isinstance(record, (list, tuple)) and len(record) == 3:
        source, destination, cost = record
        return SupplyEdge(source=str(source), destination=str(destination), base_cost=cost)
    raise InputFormatError("edge must be an object or a [source, destination, cost] triple")


def parse_input(document: Dict[str, Any]) -> RunInput:
    """
    Parse a decoded input document.

    Raises:
        InputFormatError: the document itself has the wrong shape
    """
    if not isinstance(document, dict):
        raise InputFormatError("Input document must be a JSON object")
    products_raw = document.get("products", {})
    edges_raw = document.get("edges", [])
    if not isinstance(products_raw, dict):
        raise InputFormatError("'products' must be an object keyed by product name")
    if not isinstance(edges_raw, list):
        raise InputFormatError("'edges' must be a list")

    run_input = RunInput()

    for name, record in products_raw.items():
        try:
            run_input.products.append(_parse_product(name, record))
        except (ValueError, TypeError) as exc:
            run_input.issues.append(log_issue(input_record_issue(f"product {name}", exc), logger))

    for index, record in enumerate(edges_raw):
        try:
            run_input.edges.append(_parse_edge(record))
        except (ValueError, TypeError) as exc:
            run_input.issues.append(log_issue(input_record_issue(f"edge #{index}", exc), logger))

    logger.debug("Parsed %d products and %d edges", len(run_input.products), len(run_input.edges))
    return run_input


def load_input(path: Union[str, Path]) -> RunInput:
    """
    Read and parse a JSON input file.

    Raises:
        InputFormatError: file is not UTF-8 JSON or has the wrong shape
        OSError: file cannot be read
    """
    input_path = Path(path)
    with open(input_path, 'r', encoding='utf-8') as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise InputFormatError(f"{input_path} is not valid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise InputFormatError(f"{input_path} is not UTF-8 text: {e}") from e
    return parse_input(document)
