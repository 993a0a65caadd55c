"""
Synthetic hourly demand for demos and tests.

Hour-of-day profile (fast-food style):
    11-13  lunch rush      × 1.5
    17-19  dinner rush     × 1.8
    22-05  night           × 0.4
Weekend days (day index 5, 6 of each week) × 1.3.
An optional single-hour spike multiplies that hour by ``spike_factor``.
Uniform noise in [-variation, +variation] is added; demand is floored at 0.
"""

from typing import List, Optional, Tuple

import numpy as np

from .domain.models import Product, SupplyEdge


def hourly_factor(hour_index: int) -> float:
    hour_of_day = hour_index % 24
    if 11 <= hour_of_day <= 13:
        factor = 1.5
    elif 17 <= hour_of_day <= 19:
        factor = 1.8
    elif hour_of_day >= 22 or hour_of_day <= 5:
        factor = 0.4
    else:
        factor = 1.0

    if (hour_index // 24) % 7 >= 5:
        factor *= 1.3
    return factor


def generate_demand(
    base_demand: float,
    variation: float,
    hours: int,
    spike_at: Optional[int] = None,
    spike_factor: float = 2.5,
    seed: Optional[int] = None,
) -> List[float]:
    """
    Generate ``hours`` observations of hourly demand.

    Args:
        base_demand: Demand of an ordinary hour
        variation: Half-width of the uniform noise
        hours: Number of observations
        spike_at: Hour index receiving the spike (None = no spike)
        spike_factor: Multiplier applied at ``spike_at``
        seed: Random seed (None = non-deterministic)

    Returns:
        List of non-negative demand values, oldest first
    """
    rng = np.random.default_rng(seed)
    factors = np.array([hourly_factor(i) for i in range(hours)], dtype=float)
    if spike_at is not None and 0 <= spike_at < hours:
        factors[spike_at] *= spike_factor
    noise = rng.uniform(-variation, variation, size=hours)
    demand = np.maximum(0.0, base_demand * factors + noise)
    return [float(x) for x in demand]


def demo_network(seed: Optional[int] = 7, hours: int = 72) -> Tuple[List[Product], List[SupplyEdge]]:
    """Fast-food chain scenario: five menu items fed from one warehouse."""
    menu = [
        # name, stock, base demand, variation, spike hour
        ("Burger", 500, 100, 20, hours - 4),
        ("Fries", 300, 150, 30, hours - 2),
        ("Soda", 800, 80, 15, None),
        ("Chicken", 200, 50, 10, hours - 7),
        ("Salad", 150, 30, 8, None),
    ]
    products = []
    for offset, (name, stock, base, variation, spike_at) in enumerate(menu):
        item_seed = None if seed is None else seed + offset
        history = generate_demand(base, variation, hours, spike_at=spike_at, seed=item_seed)
        products.append(Product(name=name, demand_history=tuple(history), stock=stock))

    edges = [
        SupplyEdge("Warehouse", "Beef", 2.0),
        SupplyEdge("Warehouse", "Potatoes", 1.5),
        SupplyEdge("Warehouse", "ChickenSupply", 3.0),
        SupplyEdge("Warehouse", "Vegetables", 2.0),
        SupplyEdge("Warehouse", "SodaSyrup", 1.0),
        SupplyEdge("Beef", "Burger", 1.0),
        SupplyEdge("Potatoes", "Fries", 0.5),
        SupplyEdge("ChickenSupply", "Chicken", 1.0),
        SupplyEdge("SodaSyrup", "Soda", 0.5),
        SupplyEdge("Vegetables", "Salad", 1.0),
        SupplyEdge("Vegetables", "Burger", 0.2),
        SupplyEdge("Vegetables", "Chicken", 0.2),
    ]
    return products, edges
