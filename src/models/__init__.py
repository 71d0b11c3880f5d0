"""
Models package for rucksack

Contains data structures and type definitions for the interpreter and the
command line pipeline.
"""

from .state import ProgramState, pipeline
from .events import Event, EventKind
from .manifest import Anchor, AnchorPointDraft, DraftKind, FileDraft, GlobDraft, ImageDraft, PageDraft
from .interpreter import Outcome, RunConfig, RunResult

__all__ = [
    "ProgramState",
    "pipeline",
    "Event",
    "EventKind",
    "Anchor",
    "AnchorPointDraft",
    "DraftKind",
    "FileDraft",
    "GlobDraft",
    "ImageDraft",
    "PageDraft",
    "Outcome",
    "RunConfig",
    "RunResult",
]
