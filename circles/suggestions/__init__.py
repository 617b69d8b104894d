"""Connection suggestions: exclusion, generation, enrichment, scoring."""

from .engine import SuggestionEngine
from .exclusions import ExclusionSet, resolve_exclusions
from .generators import (
    GENERATORS,
    CandidateGenerator,
    MutualGenerator,
    PopularityGenerator,
    ProximityGenerator,
    RecencyGenerator,
    create_generator,
)
from .scoring import paginate, rank, score

__all__ = [
    "GENERATORS",
    "CandidateGenerator",
    "ExclusionSet",
    "MutualGenerator",
    "PopularityGenerator",
    "ProximityGenerator",
    "RecencyGenerator",
    "SuggestionEngine",
    "create_generator",
    "paginate",
    "rank",
    "resolve_exclusions",
    "score",
]
