"""Rating-engine modules."""

from cragrank.ratings.protocol import Population, RatingEngine

__all__ = ["Population", "RatingEngine"]
