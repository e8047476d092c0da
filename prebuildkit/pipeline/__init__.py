"""
Build pipelines for prebuildkit.
"""

from .secondary import SecondaryDependencyPipeline, SecondaryResult
from .orchestrator import Orchestrator, OrchestrationResult

__all__ = [
    "SecondaryDependencyPipeline",
    "SecondaryResult",
    "Orchestrator",
    "OrchestrationResult",
]
