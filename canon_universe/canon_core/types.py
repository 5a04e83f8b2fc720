"""
Core type definitions for the canonicalization engine.

Elements are dense integer indices owned by the caller's structure; the
engine never sees what an element stands for.
"""

from typing import Any, NewType, Tuple

# Element index in range(n)
Element = int

# Color of an element (any value totally ordered against the other colors
# of the same structure: int, str, tuple, ...)
Color = Any

# Local edge description / neighbor count value (comparable and hashable)
EdgeDescription = Any

# Labeling: labeling[element] = canonical position
Labeling = Tuple[int, ...]

# Order: order[position] = element (inverse of a labeling)
Order = Tuple[Element, ...]

# Automorphism as images: g[x] = image of x
Automorphism = Tuple[Element, ...]

# Hash type (64-bit from SHA-256)
Hash64 = NewType("Hash64", int)

# Structural fingerprint used as the cache key
Fingerprint = NewType("Fingerprint", int)
