"""slidegen: YAML presentation source to Marp Markdown.

    from slidegen import Pipeline, load_config
    result = Pipeline(load_config()).run("slides.yaml", output_path="slides.md")
    result.warnings
"""

from __future__ import annotations

from slidegen.core.config import Config, load_config
from slidegen.core.pipeline import Pipeline, PipelineCancelled, PipelineError, PipelineResult, Stage, ValidationResult

__version__ = "0.3.0"

__all__ = [
    "Config",
    "Pipeline",
    "PipelineCancelled",
    "PipelineError",
    "PipelineResult",
    "Stage",
    "ValidationResult",
    "load_config",
    "__version__",
]
