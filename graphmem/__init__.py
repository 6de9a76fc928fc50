"""
GraphMem package initialization.
"""

# Setup logging configuration on package import
from .utils.logging_config import setup_logging

setup_logging()

from .models.core import AddResult, RelationshipTriple  # noqa: E402
from .services.memory_graph import MemoryGraphEngine, MemoryGraphError  # noqa: E402

__all__ = ['MemoryGraphEngine', 'MemoryGraphError', 'AddResult', 'RelationshipTriple']
