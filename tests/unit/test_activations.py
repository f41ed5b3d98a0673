import numpy as np
import pytest

from ninjanet.core.activations import Activation, sigmoid, sigmoid_prime
from ninjanet.core.matrix import column_vector


def test_sigmoid_values():
    out = sigmoid(np.array([0.0, 10.0, -10.0]))
    assert out[0] == pytest.approx(0.5)
    assert out[1] == pytest.approx(0.9999546, abs=1e-6)
    assert out[2] == pytest.approx(4.54e-5, abs=1e-6)


def test_sigmoid_saturates_without_warnings():
    with np.errstate(over="raise", invalid="raise"):
        out = sigmoid(np.array([-1000.0, 1000.0]))
    assert out[0] == 0.0
    assert out[1] == 1.0


def test_sigmoid_prime_peaks_at_zero():
    assert sigmoid_prime(np.array([0.0]))[0] == pytest.approx(0.25)
    assert sigmoid_prime(np.array([1.0]))[0] == pytest.approx(0.196612, abs=1e-6)


def test_activation_applies_to_matrices():
    v = column_vector([0.0, 2.0])
    assert Activation.SIGMOID.apply(v).approximately_equal(column_vector([0.5, 0.880797]))
    assert Activation.IDENTITY.apply(v) == v
    assert Activation.IDENTITY.derivative(v) == column_vector([1.0, 1.0])
    assert v == column_vector([0.0, 2.0])


def test_from_name():
    assert Activation.from_name("sigmoid") is Activation.SIGMOID
    assert Activation.from_name("IDENTITY") is Activation.IDENTITY
    assert Activation.from_name(Activation.SIGMOID) is Activation.SIGMOID
    with pytest.raises(ValueError):
        Activation.from_name("relu")
