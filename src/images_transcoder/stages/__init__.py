"""Pipeline stages: source enumerator, transform workers and archive sink."""

from .enumerator import SourceEnumerator, list_eligible_files
from .workers import TransformWorker, TransformWorkerPool, default_concurrency
from .sink import ArchiveSink

__all__ = [
    "SourceEnumerator",
    "list_eligible_files",
    "TransformWorker",
    "TransformWorkerPool",
    "default_concurrency",
    "ArchiveSink",
]
