"""Streaming ingestion and transform pipeline for ORCID dumps.

Data flow: archive reader -> entry filter -> batching producer -> bounded
channel -> parallel transform stage -> output sink.
"""

from .runner import PipelineMetrics, archive_outcomes

__all__ = ["PipelineMetrics", "archive_outcomes"]
