"""Graph build context, deferred nodes and their resolution."""

from .context import (
    GraphBuildContext,
    NameAllocator,
    VariableBinding,
    default_graph,
    get_default_context,
    reset_default_context,
    set_default_context,
)
from .node import DeferredNode, Input, OpProfile, Resolver, build, static_dtype

__all__ = [
    "GraphBuildContext",
    "NameAllocator",
    "VariableBinding",
    "default_graph",
    "get_default_context",
    "reset_default_context",
    "set_default_context",
    "DeferredNode",
    "Input",
    "OpProfile",
    "Resolver",
    "build",
    "static_dtype",
]
