"""
Concrete structures implementing the Canonizable contract.

Modules:
- graph.py: numpy adjacency graphs (colored, directed, weighted)
- triples.py: Triple graphs with variables (RDF graphs with blank nodes)
- generators.py: Seeded random graphs, triple graphs and permutations
"""

from .graph import Graph
from .triples import TripleGraph, Var

__all__ = [
    "Graph",
    "TripleGraph",
    "Var",
]
