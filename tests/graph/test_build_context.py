from __future__ import annotations

import threading

from lazygraph.engine import NumpyEngine
from lazygraph.graph import (
    GraphBuildContext,
    NameAllocator,
    default_graph,
    get_default_context,
    reset_default_context,
    set_default_context,
)
from lazygraph.ops import add, assign, constant, variable


def test_builders_use_default_context(ctx: GraphBuildContext) -> None:
    assert get_default_context() is ctx
    assert default_graph() is ctx.graph
    constant(1).resolve()
    assert len(ctx.graph) == 1


def test_as_default_installs_and_restores(ctx: GraphBuildContext) -> None:
    other = GraphBuildContext(NumpyEngine())
    with other.as_default():
        assert get_default_context() is other
        variable(1)
    assert get_default_context() is ctx
    assert len(other.variables) == 1
    assert len(ctx.variables) == 0


def test_reset_default_context_starts_empty(ctx: GraphBuildContext) -> None:
    variable(1)
    fresh = reset_default_context()
    try:
        assert fresh is not ctx
        assert fresh.variables == ()
        assert len(fresh.graph) == 0
    finally:
        set_default_context(ctx)


def test_variable_registry_is_append_only(ctx: GraphBuildContext) -> None:
    a = variable(1)
    b = variable(2.0)
    bindings = ctx.variables
    assert [binding.variable for binding in bindings] == [a, b]
    assert all(binding.initializer.operation == "Assign" for binding in bindings)
    assert bindings[0].initializer.inputs[0] is a

    assign(a, 5)  # plain assignments are not registered
    assert len(ctx.variables) == 2

    snapshot = ctx.variable_initializers()
    variable(3)
    assert len(snapshot) == 2
    assert len(ctx.variable_initializers()) == 3

    ctx.clear_variables()
    assert ctx.variables == ()


def test_variable_storage_name_is_fixed_at_declaration(ctx: GraphBuildContext) -> None:
    v = variable([1, 2])
    w = variable(0, node_name="w")
    assert v.attributes["shared_name"].value == "Variable_1"
    assert w.attributes["shared_name"].value == "w"
    first, second = v.resolve(), v.resolve()
    assert first.op.name != second.op.name
    assert first.op.attr("shared_name") == second.op.attr("shared_name")
    assert first.op.attr("shape") == (2,)


def test_name_allocator_is_monotonic_per_prefix(ctx: GraphBuildContext) -> None:
    names = NameAllocator()
    assert names.allocate(ctx.graph, "Add") == "Add_1"
    assert names.allocate(ctx.graph, "Add") == "Add_2"
    assert names.allocate(ctx.graph, "Mul") == "Mul_1"
    assert names.allocate(ctx.graph, "Add", "sum") == "sum"
    assert names.fresh("Variable") == "Variable_1"


def test_concurrent_declarations_are_all_recorded(ctx: GraphBuildContext) -> None:
    def declare() -> None:
        for i in range(50):
            variable(i, context=ctx)

    threads = [threading.Thread(target=declare) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(ctx.variables) == 200
    shared = {b.variable.attributes["shared_name"].value for b in ctx.variables}
    assert len(shared) == 200


def test_storage_names_are_unique_per_declaration(ctx: GraphBuildContext) -> None:
    named = variable(0, node_name="Variable_1")
    anon = variable(0)
    again = variable(0, node_name="Variable_1")
    names = [v.attributes["shared_name"].value for v in (named, anon, again)]
    assert names[0] == "Variable_1"
    assert len(set(names)) == 3


def test_name_allocator_unique_never_repeats() -> None:
    names = NameAllocator()
    assert names.unique("w") == "w"
    assert names.unique("w") == "w_1"
    assert names.fresh("w") == "w_2"
    assert names.unique("w_2") == "w_2_1"


def test_concurrent_resolution_builds_distinct_operations(ctx: GraphBuildContext) -> None:
    errors: list[Exception] = []

    def resolve_many(offset: int) -> None:
        try:
            for i in range(25):
                add(constant(offset + i), constant(1), context=ctx).resolve()
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=resolve_many, args=(n * 100,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert len(ctx.graph) == 4 * 25 * 3
    names = [op.name for op in ctx.graph]
    assert len(set(names)) == len(names)
    assert sum(1 for op in ctx.graph if op.type == "Add") == 100
