from __future__ import annotations

from collections.abc import Iterator

import pytest

from lazygraph.graph import GraphBuildContext, set_default_context


@pytest.fixture(autouse=True)
def ctx() -> Iterator[GraphBuildContext]:
    """Every test builds into its own default context (fresh graph and registry)."""
    context = GraphBuildContext("numpy")
    previous = set_default_context(context)
    yield context
    set_default_context(previous)
