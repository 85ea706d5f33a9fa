"""Pure round calculators.

Each calculator takes immutable inputs and returns a frozen result with a
breakdown of named terms. None of them log or touch game state.
"""

from deliverability_simulator.calculators.complaints import calculate_complaints
from deliverability_simulator.calculators.delivery import (
    aggregate_delivery_rate,
    calculate_delivery,
)
from deliverability_simulator.calculators.destination_revenue import (
    calculate_destination_revenue,
)
from deliverability_simulator.calculators.reputation import calculate_reputation
from deliverability_simulator.calculators.revenue import calculate_revenue
from deliverability_simulator.calculators.satisfaction import calculate_satisfaction
from deliverability_simulator.calculators.spam_traps import calculate_spam_traps
from deliverability_simulator.calculators.volume import calculate_volume

__all__ = [
    "aggregate_delivery_rate",
    "calculate_complaints",
    "calculate_delivery",
    "calculate_destination_revenue",
    "calculate_reputation",
    "calculate_revenue",
    "calculate_satisfaction",
    "calculate_spam_traps",
    "calculate_volume",
]
