"""Release note generation module."""

from .consolidator import consolidate, merge_entries
from .dependencies import parse as parse_dependency_update
from .formatter import format_commit_line, format_entry_line, render
from .generator import build_note_lines, generate_release_notes, is_skipped
from .models import (
    CommitRecord,
    ConsolidatedEntry,
    DependencyUpdate,
    PRReference,
    PRSource,
    ReleaseNoteLine,
    RenderMode,
)
from .resolver import PRResolver, SearchCache, build_merge_map, resolve_all

__all__ = [
    "consolidate",
    "merge_entries",
    "parse_dependency_update",
    "format_commit_line",
    "format_entry_line",
    "render",
    "build_note_lines",
    "generate_release_notes",
    "is_skipped",
    "CommitRecord",
    "ConsolidatedEntry",
    "DependencyUpdate",
    "PRReference",
    "PRSource",
    "ReleaseNoteLine",
    "RenderMode",
    "PRResolver",
    "SearchCache",
    "build_merge_map",
    "resolve_all",
]
