"""
Repository ingestion: source validation, cloning, workspaces and walking.

The pipeline stages are in ``gitdigest.ingestion.collector``.
"""

from gitdigest.ingestion.source import RepositorySource
from gitdigest.ingestion.repository import FileRecord
from gitdigest.ingestion.git_handler import GitHandler
from gitdigest.ingestion.walker import TreeWalker
from gitdigest.ingestion.workspace import Workspace

__all__ = [
    "RepositorySource",
    "FileRecord",
    "GitHandler",
    "TreeWalker",
    "Workspace",
]
