"""Pass pipeline exports."""

from .models import PipelineState
from .pipeline import PassPipeline
from .template import FORMAT_VERSION, PassTemplate

__all__ = [
    "FORMAT_VERSION",
    "PassPipeline",
    "PassTemplate",
    "PipelineState",
]
