"""
RIFT - staged, governance-driven expression compiler pipeline.

Usage:
    from rift import run_pipeline

    output = run_pipeline("x + 2 * y")
    print(output.text)
"""

from rift._version import get_version
from rift.core.errors import PipelineError, RiftError
from rift.core.governance import Governance, Stage
from rift.core.pipeline import RenderedOutput, run_pipeline
from rift.core.riftrc import load_governance

__version__ = get_version()

__all__ = [
    "Governance",
    "PipelineError",
    "RenderedOutput",
    "RiftError",
    "Stage",
    "__version__",
    "load_governance",
    "run_pipeline",
]
