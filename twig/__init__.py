"""
Twig - a minimal single-user version-control engine.

A content-addressable object store layered with a commit DAG, a staging
area, branch references, and a three-way merge with conflict markers.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from twig.config import config

__all__ = ["config", "__version__"]
