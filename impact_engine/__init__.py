"""Impact & mitigation physics engine for small-body impact scenarios."""

from impact_engine.mitigation import MitigationParameters, StrategyKind, evaluate
from impact_engine.models import GeoCoordinate, ImpactorSpecification, ImpactResult
from impact_engine.results import compute_impact, compute_impact_sync

__all__ = [
    "GeoCoordinate",
    "ImpactResult",
    "ImpactorSpecification",
    "MitigationParameters",
    "StrategyKind",
    "compute_impact",
    "compute_impact_sync",
    "evaluate",
]
