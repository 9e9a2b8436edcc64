"""
Domain models — pydantic and dataclass types for the templater core.

All models are re-exported here for convenient access:

    from templater.core.models import Action, ArgumentSpec, ConflictDecision
"""

from templater.core.models.action import (
    Action,
    ActionKind,
    DependencyCall,
    ResolvedOperation,
)
from templater.core.models.argument import ArgumentSpec, BoundArguments
from templater.core.models.decision import ConflictDecision, DecisionKind
from templater.core.models.manifest import ActionDecl, GeneratorDecl, ManifestDecl
from templater.core.models.receipt import OperationReceipt, RunSummary

__all__ = [
    # action.py
    "Action",
    "ActionKind",
    "DependencyCall",
    "ResolvedOperation",
    # argument.py
    "ArgumentSpec",
    "BoundArguments",
    # decision.py
    "ConflictDecision",
    "DecisionKind",
    # manifest.py
    "ActionDecl",
    "GeneratorDecl",
    "ManifestDecl",
    # receipt.py
    "OperationReceipt",
    "RunSummary",
]
