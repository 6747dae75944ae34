"""Learner-facing views driven by the progress client."""

from .module_list import ModuleEntry, ModuleList
from .module_viewer import ERROR_MESSAGE, SUCCESS_MESSAGE, Feedback, ModuleViewer


__all__ = [
    "ERROR_MESSAGE",
    "SUCCESS_MESSAGE",
    "Feedback",
    "ModuleEntry",
    "ModuleList",
    "ModuleViewer",
]
