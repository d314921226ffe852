"""Engine interface, registry and the bundled reference engine."""

from .base import (
    BuilderHandle,
    Engine,
    EngineCapabilities,
    GraphHandle,
    OperationHandle,
    OutputHandle,
    RunnerHandle,
    SessionHandle,
)
from .reference import NumpyEngine
from .registry import EngineRegistry, create_engine, global_registry, register_engine

__all__ = [
    "BuilderHandle",
    "Engine",
    "EngineCapabilities",
    "GraphHandle",
    "OperationHandle",
    "OutputHandle",
    "RunnerHandle",
    "SessionHandle",
    "NumpyEngine",
    "EngineRegistry",
    "create_engine",
    "global_registry",
    "register_engine",
]
