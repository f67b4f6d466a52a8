"""Climber and route ratings from climbing tick logs."""

from cragrank.common import Climber, Route, Tick
from cragrank.ratings.protocol import Population

__all__ = ["Climber", "Population", "Route", "Tick"]
