from __future__ import annotations

import math
from functools import reduce

import numpy as np
import pytest

from lazygraph.errors import BuildError, ExecutionError
from lazygraph.ops import (
    abs,
    add,
    constant,
    div,
    dot,
    matmul,
    mean,
    minus,
    mult,
    n_args,
    neg,
    plus,
    pow,
    sigmoid,
    size,
    sub,
    tanh,
    times,
    transpose,
)
from lazygraph.ops import sum as reduce_sum
from lazygraph.runtime import session_run


def evaluate(node):
    return session_run([node])


@pytest.mark.parametrize(
    "combinator, expected",
    [
        (add, 7.5 + 2.5),
        (sub, 7.5 - 2.5),
        (mult, 7.5 * 2.5),
        (div, 7.5 / 2.5),
        (pow, 7.5**2.5),
    ],
)
def test_binary_combinators_match_python_arithmetic(combinator, expected: float) -> None:
    assert evaluate(combinator(constant(7.5), constant(2.5))) == pytest.approx(expected)


def test_integer_arithmetic_keeps_integers() -> None:
    assert evaluate(add(constant(2), constant(3))) == 5
    assert evaluate(mult(constant(4), 3)) == 12
    assert evaluate(div(constant(7), constant(2))) == 3
    assert evaluate(div(constant(-7), constant(2))) == -3


def test_integer_division_by_zero_fails() -> None:
    with pytest.raises(ExecutionError) as exc:
        evaluate(div(constant(1), constant(0)))
    assert exc.value.code == "EEXEC_KERNEL"


def test_elementwise_on_arrays() -> None:
    a = [[1.0, 2.0], [3.0, 4.0]]
    b = [[10.0, 20.0], [30.0, 40.0]]
    assert evaluate(add(constant(a), constant(b))) == [[11.0, 22.0], [33.0, 44.0]]
    np.testing.assert_allclose(evaluate(sub(constant(b), constant(a))), np.subtract(b, a))


def test_unary_combinators() -> None:
    assert evaluate(tanh(constant(0.0))) == 0.0
    assert evaluate(sigmoid(constant(0.0))) == 0.5
    assert evaluate(tanh(constant(1.0))) == pytest.approx(math.tanh(1.0))
    assert evaluate(abs(constant([-3, 4]))) == [3, 4]
    assert evaluate(neg(constant(2.5))) == -2.5
    assert evaluate(size(constant([[1, 2, 3], [4, 5, 6]]))) == 6


def test_matmul_and_dot_alias() -> None:
    a = constant([[1, 2], [3, 4]])
    b = constant([[5], [6]])
    assert evaluate(matmul(a, b)) == [[17], [39]]
    assert dot is matmul
    assert evaluate(matmul(a, a, transpose_b=True)) == [[5, 11], [11, 25]]


def test_matmul_rank_mismatch_fails_at_execution() -> None:
    with pytest.raises(ExecutionError) as exc:
        evaluate(matmul(constant([1, 2]), constant([[1], [2]])))
    assert exc.value.code == "EEXEC_SHAPE"


def test_reductions_default_to_axis_zero() -> None:
    m = [[1, 2], [3, 4]]
    assert evaluate(reduce_sum(constant(m))) == [4, 6]
    assert evaluate(reduce_sum(constant([1, 2, 3]))) == 6
    assert evaluate(reduce_sum(constant(m), axis=[0, 1])) == 10
    assert evaluate(reduce_sum(constant(m), axis=1, keep_dims=True)) == [[3], [7]]
    assert evaluate(mean(constant([[1.0, 2.0], [3.0, 4.0]]))) == [2.0, 3.0]
    assert evaluate(mean(constant([1, 2]))) == 1


def test_transpose_defaults_to_matrix_swap() -> None:
    m = [[1, 2, 3], [4, 5, 6]]
    assert evaluate(transpose(constant(m))) == [[1, 4], [2, 5], [3, 6]]
    cube = np.arange(24).reshape(2, 3, 4)
    out = evaluate(transpose(constant(cube), perm=[2, 0, 1]))
    np.testing.assert_array_equal(np.array(out), np.transpose(cube, (2, 0, 1)))


def test_n_ary_add_is_left_fold() -> None:
    values = list(range(1, 401))
    nodes = [constant(v) for v in values]
    variadic = plus(*nodes)
    folded = reduce(add, nodes)
    assert evaluate(variadic) == sum(values)
    assert evaluate(folded) == sum(values)
    # same tree shape: ((x1 + x2) + x3) + ...
    assert variadic.inputs[1] is nodes[-1]
    assert variadic.inputs[0].inputs[1] is nodes[-2]


def test_n_ary_sub_and_mult_follow_python_semantics() -> None:
    assert evaluate(minus(10, 3, 2)) == (10 - 3) - 2
    assert evaluate(times(2, 3, 4)) == 24
    assert evaluate(plus(constant(1.5), 2, 3)) == 6.5


def test_n_args_edge_cases() -> None:
    assert evaluate(plus(constant(4))) == 4
    assert evaluate(plus(7)) == 7
    with pytest.raises(TypeError):
        plus()
    custom = n_args(mult)
    assert custom.__name__ == "mult_n"
    assert evaluate(custom(1.0, 2.0, 3.0, 4.0)) == 24.0


def test_n_args_lifts_plain_binary_functions() -> None:
    def hypot_sq(a, b):
        return add(mult(a, a), mult(b, b))

    lifted = n_args(hypot_sq)
    assert lifted.__name__ == "hypot_sq_n"
    # ((1^2 + 2^2)^2 + 3^2)
    assert evaluate(lifted(constant(1), constant(2), constant(3))) == 34
    assert evaluate(n_args(lambda a, b: add(a, b))(constant(1), constant(2), constant(3))) == 6


def test_tanh_and_sigmoid_need_floating_inputs() -> None:
    for combinator in (tanh, sigmoid):
        with pytest.raises(BuildError) as exc:
            combinator(constant(1)).resolve()
        assert exc.value.code == "EBUILD_DTYPE"
    assert evaluate(add(sigmoid(constant(0.0)), 1.0)) == 1.5
    assert evaluate(sigmoid(constant(0.0, dtype="float32"))) == 0.5
