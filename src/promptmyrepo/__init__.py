"""
Prompt My Repo - aggregate a recurring selection of project files.

This package resolves a small line-based template of include/exclude path
specifications against a workspace directory and produces one formatted
text block containing each selected file's relative path and contents,
ready to paste into an LLM prompt.
"""

__version__ = "0.1.0"
__author__ = "Prompt My Repo Team"

from .core import aggregate, aggregate_report  # noqa: E402
from .resolver import resolve  # noqa: E402

__all__ = ["aggregate", "aggregate_report", "resolve", "__version__"]
