import numpy as np
import pytest

from juliamarch.quaternion import (
    Quaternion,
    left_matrix,
    lift,
    power_jacobian,
    qconj,
    qmul,
    qnorm,
    qpow,
    qsqnorm,
    qsquare,
    right_matrix,
    square_jacobian,
)

I = np.array([0.0, 1.0, 0.0, 0.0])
J = np.array([0.0, 0.0, 1.0, 0.0])
K = np.array([0.0, 0.0, 0.0, 1.0])


def _numeric_jacobian(f, q, h=1e-6):
    cols = []
    for k in range(4):
        e = np.zeros(4)
        e[k] = h
        cols.append((f(q + e) - f(q - e)) / (2.0 * h))
    return np.stack(cols, axis=-1)


def test_unit_products_do_not_commute(xp):
    np.testing.assert_allclose(qmul(xp, I, J), K)
    np.testing.assert_allclose(qmul(xp, J, I), -K)
    np.testing.assert_allclose(qmul(xp, I, I), [-1.0, 0.0, 0.0, 0.0])


def test_multiply_random_pairs_is_not_commutative(xp, rng):
    a = rng.normal(size=(50, 4))
    b = rng.normal(size=(50, 4))
    assert not np.allclose(qmul(xp, a, b), qmul(xp, b, a))
    # norms still multiply
    np.testing.assert_allclose(qnorm(xp, qmul(xp, a, b)), qnorm(xp, a) * qnorm(xp, b))


def test_square_matches_multiply(xp, rng):
    q = rng.uniform(-2.0, 2.0, size=(1000, 4))
    np.testing.assert_allclose(qsquare(xp, q), qmul(xp, q, q), rtol=1e-12, atol=1e-12)


def test_power_one_is_identity(xp, rng):
    q = rng.uniform(-1.5, 1.5, size=(200, 4))
    np.testing.assert_allclose(qpow(xp, q, 1.0), q, atol=1e-12)


def test_power_two_matches_square(xp, rng):
    q = rng.uniform(-1.5, 1.5, size=(200, 4))
    np.testing.assert_allclose(qpow(xp, q, 2.0), qsquare(xp, q), atol=1e-9)


def test_power_three_matches_repeated_product(xp, rng):
    q = rng.uniform(-1.0, 1.0, size=(100, 4))
    np.testing.assert_allclose(qpow(xp, q, 3.0), qmul(xp, qsquare(xp, q), q), atol=1e-9)


def test_power_of_real_quaternion_uses_fallback_axis(xp):
    q = np.array([[-2.0, 0.0, 0.0, 0.0], [3.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 0.0]])
    out = qpow(xp, q, 2.0)
    assert np.all(np.isfinite(out))
    np.testing.assert_allclose(out[0], [4.0, 0.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(out[1], [9.0, 0.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(out[2], [0.0, 0.0, 0.0, 0.0])

    # half turn of a negative real lands on the fallback axis
    np.testing.assert_allclose(qpow(xp, np.array([-4.0, 0.0, 0.0, 0.0]), 0.5), [0.0, 2.0, 0.0, 0.0], atol=1e-12)


def test_multiplication_matrices(xp, rng):
    a = rng.normal(size=(20, 4))
    b = rng.normal(size=(20, 4))
    np.testing.assert_allclose((left_matrix(xp, a) @ b[..., None])[..., 0], qmul(xp, a, b), atol=1e-12)
    np.testing.assert_allclose((right_matrix(xp, a) @ b[..., None])[..., 0], qmul(xp, b, a), atol=1e-12)


def test_square_jacobian_matches_finite_differences(xp, rng):
    for q in rng.normal(size=(10, 4)):
        expected = _numeric_jacobian(lambda x: qsquare(xp, x), q)
        np.testing.assert_allclose(square_jacobian(xp, q), expected, atol=1e-6)


@pytest.mark.parametrize("power", [1.0, 2.0, 2.5, 3.0, 7.0])
def test_power_jacobian_matches_finite_differences(xp, rng, power):
    for q in rng.uniform(-1.0, 1.0, size=(10, 4)):
        expected = _numeric_jacobian(lambda x: qpow(xp, x, power), q)
        np.testing.assert_allclose(power_jacobian(xp, q, power), expected, rtol=1e-5, atol=1e-5)


def test_power_jacobian_of_two_is_square_jacobian(xp, rng):
    q = rng.normal(size=(30, 4))
    np.testing.assert_allclose(power_jacobian(xp, q, 2.0), square_jacobian(xp, q), atol=1e-9)


def test_power_jacobian_on_real_axis_is_finite(xp):
    jac = power_jacobian(xp, np.array([0.5, 0.0, 0.0, 0.0]), 3.0)
    assert np.all(np.isfinite(jac))
    # d(a^3)/da = 3a^2, isotropic in the imaginary directions
    np.testing.assert_allclose(np.diag(jac), [0.75, 0.75, 0.75, 0.75], atol=1e-12)


def test_norms_and_conjugate(xp):
    q = np.array([1.0, 2.0, 3.0, 4.0])
    assert qsqnorm(xp, q) == pytest.approx(30.0)
    assert qnorm(xp, q) == pytest.approx(np.sqrt(30.0))
    np.testing.assert_allclose(qmul(xp, q, qconj(xp, q)), [30.0, 0.0, 0.0, 0.0])


def test_lift_puts_slice_in_real_part(xp):
    p = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    np.testing.assert_allclose(lift(xp, p, 0.1), [[0.1, 1.0, 2.0, 3.0], [0.1, 4.0, 5.0, 6.0]])
    assert lift(xp, np.zeros(3), 0.5).shape == (4,)


def test_quaternion_value_type():
    i = Quaternion(0.0, 1.0)
    j = Quaternion(0.0, 0.0, 1.0)
    assert i * j == Quaternion(0.0, 0.0, 0.0, 1.0)
    assert j * i == Quaternion(0.0, 0.0, 0.0, -1.0)
    assert i + j == Quaternion(0.0, 1.0, 1.0, 0.0)
    assert Quaternion(1.0, 2.0, 3.0, 4.0).conjugate() == Quaternion(1.0, -2.0, -3.0, -4.0)
    assert Quaternion(1.0, 2.0, 2.0, 4.0).norm() == pytest.approx(5.0)
    assert list(Quaternion.from_sequence([1, 2, 3, 4])) == [1.0, 2.0, 3.0, 4.0]
