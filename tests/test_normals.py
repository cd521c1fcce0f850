import numpy as np
import pytest

from juliamarch.fractals import JuliaSDF
from juliamarch.geometry import BoxSDF, SphereSDF
from juliamarch.normals import estimate_normal, gradient_normal


def test_sphere_gradient_normal_is_radial(rng):
    sphere = SphereSDF(np, np.zeros(3), 2.0)
    directions = rng.normal(size=(50, 3))
    directions /= np.linalg.norm(directions, axis=-1, keepdims=True)
    n = gradient_normal(np, sphere, directions * 2.0)
    np.testing.assert_allclose(n, directions, atol=1e-6)


def test_box_face_normal():
    box = BoxSDF(np, np.zeros(3), np.ones(3))
    np.testing.assert_allclose(gradient_normal(np, box, np.array([0.2, 1.0, -0.3])), [0.0, 1.0, 0.0], atol=1e-9)


def test_analytic_request_falls_back_to_gradient_for_primitives():
    sphere = SphereSDF(np, np.zeros(3), 1.0)
    p = np.array([0.0, 0.0, 1.0])
    np.testing.assert_allclose(estimate_normal(np, sphere, p, "analytic"), gradient_normal(np, sphere, p))


def test_methods_dispatch_for_fractals():
    julia = JuliaSDF(np, np.array([-0.2, 0.0, 0.0, 0.0]), max_iterations=30, escape=100.0, epsilon=1e-3)
    p = np.array([[0.0, 0.3, 1.0], [0.7, 0.1, 0.2]])
    np.testing.assert_allclose(estimate_normal(np, julia, p, "analytic"), julia.normal(p))
    np.testing.assert_allclose(estimate_normal(np, julia, p, "gradient"), gradient_normal(np, julia, p))


def test_unknown_method_raises():
    sphere = SphereSDF(np, np.zeros(3), 1.0)
    with pytest.raises(ValueError, match="Unknown normal method"):
        estimate_normal(np, sphere, np.zeros(3), "sobel")
