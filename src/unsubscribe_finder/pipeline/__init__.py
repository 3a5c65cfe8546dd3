"""Candidate discovery and unsubscribe action flows."""

from .actions import ActionRecorder
from .candidates import CandidatePipeline, build_search_query

__all__ = ["ActionRecorder", "CandidatePipeline", "build_search_query"]
