"""Templater — declarative file generators driven through a manifold."""

__version__ = "0.1.0"
