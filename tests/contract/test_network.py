import numpy as np
import pytest

from ninjanet.core.activations import Activation
from ninjanet.core.errors import DimensionMismatchError
from ninjanet.core.matrix import Matrix, column_vector
from ninjanet.core.network import Network

TRUTH_TABLE = [(0, 0), (0, 1), (1, 0), (1, 1)]


def _is_zero(value):
    return 0.0 < value < 0.1


def _is_one(value):
    return 0.9 < value < 1.0


def _gate(*rows):
    return Network([Matrix.from_rows(list(r)) for r in rows])


def _full_weights():
    w1 = Matrix.from_rows([[1, 2, 3, 4], [5, 6, 7, 8], [9, 10, 11, 12], [13, 14, 15, 16]])
    w2 = Matrix.from_rows([[1, 2, 3, 4, 5], [-6, -7, -8, -9, -10]])
    return [w1, w2]


@pytest.mark.parametrize(
    "weights, expected",
    [
        ([-15, 10, 10], [0, 0, 0, 1]),  # AND
        ([-15, 20, 20], [0, 1, 1, 1]),  # OR
        ([15, -10, -10], [1, 1, 1, 0]),  # NAND
    ],
)
def test_single_layer_gates(weights, expected):
    net = _gate([weights])
    for inputs, want in zip(TRUTH_TABLE, expected):
        out = net.apply(inputs).get(0)
        assert (_is_one if want else _is_zero)(out), (inputs, out)


def test_not_gate():
    net = _gate([[5, -10]])
    assert _is_one(net.apply([0]).get(0))
    assert _is_zero(net.apply([1]).get(0))


def test_two_layer_nand():
    net = _gate([[-15, 10, 10]], [[5, -10]])
    assert net.layer_sizes == [2, 1, 1]
    for inputs in TRUTH_TABLE:
        out = net.apply(inputs).get(0)
        if inputs == (1, 1):
            assert _is_zero(out)
        else:
            assert _is_one(out)


def test_feed_forward_vectors_carry_bias_units():
    net = Network(_full_weights())
    fv = net.feed_forward([1, 1, 1])
    assert fv.z[0] is None
    assert fv.a[0] == column_vector([1, 1, 1, 1])
    assert fv.z[1] == column_vector([10, 26, 42, 58])
    assert fv.a[1].rows == 5 and fv.a[1].get(0) == 1.0
    assert fv.a[2].rows == 2
    assert fv.output == fv.a[2]


def test_identity_network_output():
    net = Network(_full_weights(), activation=Activation.IDENTITY)
    assert net.apply([1, 1, 1]) == column_vector([557, -1242])


def test_sigmoid_network_output():
    net = Network(_full_weights())
    assert net.apply([1, 1, 1]).approximately_equal(column_vector([1.0, 0.0]))


def test_input_size_is_checked():
    net = Network(_full_weights())
    with pytest.raises(DimensionMismatchError):
        net.apply([1, 1])


def test_weight_shapes_are_validated():
    with pytest.raises(DimensionMismatchError):
        Network([Matrix(4, 4), Matrix(2, 4)])
    with pytest.raises(ValueError):
        Network([])


def test_nand_deltas():
    net = _gate([[-15, 10, 10]], [[5, -10]])
    deltas = net.backprop(net.feed_forward([0, 0]), [1])
    assert deltas[0] is None
    assert deltas[2].get(0) == pytest.approx(-0.007, abs=0.001)
    assert deltas[1].get(0) == pytest.approx(0.0, abs=0.001)


def test_full_network_deltas():
    net = Network(_full_weights())
    deltas = net.backprop(net.feed_forward([0, 0, 0]), [0, 0])
    assert deltas[2].approximately_equal(column_vector([1.0, 0.0]), 0.001)
    assert deltas[1].approximately_equal(column_vector([0.393, 0.02, 0.0, 0.0]), 0.001)


def test_backprop_checks_target_size():
    net = Network(_full_weights())
    with pytest.raises(DimensionMismatchError):
        net.backprop(net.feed_forward([0, 0, 0]), [0, 0, 0])


def _cross_entropy(net, xs, ys):
    total = 0.0
    for x, y in zip(xs, ys):
        a = net.apply(x).data
        y = np.asarray(y, dtype=float)
        total -= np.sum(y * np.log(a) + (1 - y) * np.log(1 - a))
    return total / len(xs)


def test_gradient_matches_finite_differences():
    net = Network.from_layer_sizes([3, 4, 2], seed=7)
    xs = [[0.2, -0.5, 1.0], [1.0, 0.3, -0.2]]
    ys = [[1, 0], [0, 1]]
    grads = net.compute_gradient(xs, ys)
    step = 1e-6
    for layer, w in enumerate(net.weights):
        for i in range(w.rows):
            for j in range(w.cols):
                weights = net.weights
                weights[layer].set(i, j, w.get(i, j) + step)
                plus = _cross_entropy(Network(weights), xs, ys)
                weights[layer].set(i, j, w.get(i, j) - step)
                minus = _cross_entropy(Network(weights), xs, ys)
                numeric = (plus - minus) / (2 * step)
                assert grads[layer].get(i, j) == pytest.approx(numeric, abs=1e-6)


def test_gradient_shapes_and_batch_mean():
    net = Network.from_layer_sizes([3, 4, 2], seed=1)
    g1 = net.compute_gradient([[1, 0, 0]], [[1, 0]])
    g2 = net.compute_gradient([[0, 1, 0]], [[0, 1]])
    both = net.compute_gradient([[1, 0, 0], [0, 1, 0]], [[1, 0], [0, 1]])
    assert [g.shape for g in both] == [(4, 4), (2, 5)]
    for l in range(2):
        assert both[l].approximately_equal(g1[l].add(g2[l]).divide(2), 1e-12)


def test_train_batch_equals_gradient_step():
    a = Network.from_layer_sizes([2, 3, 2], seed=3)
    b = Network.from_layer_sizes([2, 3, 2], seed=3)
    xs, ys = [[0, 1], [1, 1]], [[1, 0], [0, 1]]
    outputs = a.train_batch(xs, ys, 0.5)
    assert outputs[0] == b.apply(xs[0])
    b.apply_gradients(b.compute_gradient(xs, ys), 0.5)
    for wa, wb in zip(a.weights, b.weights):
        assert wa.approximately_equal(wb, 1e-12)


def test_train_example_is_single_item_batch():
    a = Network.from_layer_sizes([2, 2, 1], seed=5)
    b = Network.from_layer_sizes([2, 2, 1], seed=5)
    a.train_example([1, 0], [1], 0.1)
    b.train_batch([[1, 0]], [[1]], 0.1)
    assert a.weights == b.weights


def test_failed_batch_leaves_weights_untouched():
    net = Network.from_layer_sizes([2, 2, 1], seed=5)
    before = net.weights
    with pytest.raises(DimensionMismatchError):
        net.train_batch([[1, 0], [0, 1]], [[1], [0, 1]], 0.1)
    with pytest.raises(DimensionMismatchError):
        net.train_batch([[1, 0]], [[1], [0]], 0.1)
    with pytest.raises(ValueError):
        net.train_batch([], [], 0.1)
    with pytest.raises(DimensionMismatchError):
        net.apply_gradients([Matrix(1, 3), Matrix(2, 3)], 0.1)
    assert net.weights == before


def test_random_initialize_bounds():
    net = Network.from_layer_sizes([400, 25, 10])
    for layer, w in enumerate(net.weights):
        fan_in, fan_out = net.num_units(layer), net.num_units(layer + 1)
        eps = np.sqrt(6) / np.sqrt(fan_in + fan_out)
        values = w.to_array()
        assert w.shape == (fan_out, fan_in + 1)
        assert np.all(np.abs(values) <= eps)
        assert np.any(values != 0.0)


def test_random_initialize_is_seeded():
    a = Network.from_layer_sizes([3, 4, 2], seed=42)
    b = Network.from_layer_sizes([3, 4, 2], seed=42)
    c = Network.from_layer_sizes([3, 4, 2], seed=43)
    assert a.weights == b.weights
    assert a.weights != c.weights
    d = Network.from_layer_sizes([3, 4, 2], rng=np.random.default_rng(42))
    assert d.weights == a.weights


def test_weights_are_defensive_copies():
    w = Matrix.from_rows([[1, 2, 3]])
    net = Network([w])
    w.set(0, 0, 100.0)
    net.weights[0].set(0, 1, 100.0)
    assert net.weights[0] == Matrix.from_rows([[1, 2, 3]])


def test_describe_and_predict():
    net = _gate([[-15, 10, 10], [15, -10, -10]])
    assert net.layer_sizes == [2, 2]
    assert net.parameter_count() == 6
    assert net.describe().num_layers == 2
    ranked = net.predict([0, 0])
    assert [r.index for r in ranked] == [1, 0]


def test_backprop_rejects_vectors_from_another_architecture():
    wider = Network.from_layer_sizes([3, 5, 2], seed=1)
    net = Network.from_layer_sizes([3, 4, 2], seed=1)
    with pytest.raises(DimensionMismatchError, match="activation 1"):
        net.backprop(wider.feed_forward([1, 0, 1]), [1, 0])

    deeper = Network.from_layer_sizes([3, 4, 4, 2], seed=1)
    with pytest.raises(DimensionMismatchError, match="cover 4 layers"):
        net.backprop(deeper.feed_forward([1, 0, 1]), [1, 0])
