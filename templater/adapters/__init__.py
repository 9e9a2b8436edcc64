"""Adapters — destination stores and conflict prompts.

Public re-exports for convenient access.
"""

from templater.adapters.base import ConflictPrompt, Store
from templater.adapters.filesystem import FilesystemStore
from templater.adapters.mock import MemoryStore, ScriptedPrompt
from templater.adapters.policies import AlwaysPrompt

__all__ = [
    "AlwaysPrompt",
    "ConflictPrompt",
    "FilesystemStore",
    "MemoryStore",
    "ScriptedPrompt",
    "Store",
]
