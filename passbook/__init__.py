"""Signed pass bundle generation."""

from __future__ import annotations

__version__ = "0.3.0"

from passbook.modules.passes import PassPipeline, PassTemplate, PipelineState  # noqa: E402


def create_pass(style, fields, credentials=None, **kwargs) -> PassPipeline:
    """Validate ``fields`` and return a pipeline ready to generate one bundle."""
    return PassPipeline(style, fields, credentials, **kwargs)


def create_template(style, fields=None, credentials=None, **kwargs) -> PassTemplate:
    return PassTemplate(style, fields, credentials, **kwargs)


__all__ = [
    "__version__",
    "PassPipeline",
    "PassTemplate",
    "PipelineState",
    "create_pass",
    "create_template",
]
