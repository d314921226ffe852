from __future__ import annotations

import pytest

from lazygraph.engine import EngineRegistry, NumpyEngine, create_engine, global_registry
from lazygraph.errors import EngineNotFoundError
from lazygraph.graph import GraphBuildContext


def test_numpy_engine_is_registered() -> None:
    assert "numpy" in global_registry.names()
    assert isinstance(create_engine("numpy"), NumpyEngine)


def test_default_engine_comes_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LAZYGRAPH_ENGINE", "numpy")
    assert isinstance(create_engine(), NumpyEngine)
    monkeypatch.setenv("LAZYGRAPH_ENGINE", "nonexistent")
    with pytest.raises(EngineNotFoundError) as exc:
        create_engine()
    assert exc.value.code == "EENGINE"


def test_registry_creates_fresh_instances() -> None:
    registry = EngineRegistry()
    registry.register("ref", NumpyEngine)
    assert registry.get("ref").name == "ref"
    assert registry.create("ref") is not registry.create("ref")
    assert registry.get("other") is None
    with pytest.raises(EngineNotFoundError):
        registry.create("other")


def test_context_accepts_engine_name() -> None:
    ctx = GraphBuildContext("numpy")
    assert isinstance(ctx.engine, NumpyEngine)
    with pytest.raises(EngineNotFoundError):
        GraphBuildContext("missing")
