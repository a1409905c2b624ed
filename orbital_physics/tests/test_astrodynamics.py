"""
Tests for the Kepler propagator.
"""
import math
import unittest

import jax.numpy as jnp
import numpy as np
import pytest

from orbital_physics import OrbitalElements, PropagatorConfig
from orbital_physics.astrodynamics import (
    kepler_residual, solve_kepler, mean_anomaly, true_anomaly, position, velocity,
    state, perifocal_to_reference, spin_angle,
)

UNIT_CIRCLE = OrbitalElements(a=1.0, e=0.0, i=0.0, omega=0.0, w=0.0, l0=0.0, period=360.0)
INCLINED = OrbitalElements(a=2.5, e=0.3, i=23.0, omega=75.0, w=110.0, l0=40.0, period=500.0)
MERCURY = OrbitalElements(a=10.0, e=0.2056, i=7.0, omega=48.331, w=29.124, l0=252.251, period=87.969)


class TestSolveKepler(unittest.TestCase):

    def test_zero_eccentricity_is_identity(self):
        M = jnp.linspace(-3.0, 3.0, 13)
        np.testing.assert_allclose(solve_kepler(M, 0.0), M, atol=1e-15)

    def test_fixed_iterations_moderate_eccentricity(self):
        """Five Newton-Raphson steps satisfy Kepler's equation for e < 0.8"""
        M = jnp.linspace(-math.pi, math.pi, 41)
        for e in (0.05, 0.2056, 0.5, 0.7, 0.75):
            E = solve_kepler(M, e)
            residual = np.max(np.abs(kepler_residual(E, M, e)))
            self.assertLess(residual, 1e-6, f"residual {residual:.2e} too large for e={e}")

    def test_fixed_iterations_degrade_at_high_eccentricity(self):
        """Near e = 1 and small M the fixed solver has not converged after five steps"""
        M = math.radians(1.0)
        e = 0.99
        E_fixed = solve_kepler(M, e, mode='fixed')
        E_conv = solve_kepler(M, e, mode='converged', tol=1e-14, max_iter=100)

        self.assertGreater(abs(float(kepler_residual(E_fixed, M, e))), 1e-6)
        self.assertLess(abs(float(kepler_residual(E_conv, M, e))), 1e-12)

    def test_iteration_count_is_fixed(self):
        """The fixed solver never exits early, more steps keep refining"""
        M, e = math.radians(1.0), 0.99
        r5 = abs(float(kepler_residual(solve_kepler(M, e, iterations=5), M, e)))
        r8 = abs(float(kepler_residual(solve_kepler(M, e, iterations=8), M, e)))
        self.assertLess(r8, r5)

    def test_zero_iterations_returns_mean_anomaly(self):
        self.assertEqual(float(solve_kepler(0.4, 0.3, iterations=0)), 0.4)

    def test_invalid_mode(self):
        with self.assertRaises(ValueError):
            solve_kepler(0.1, 0.1, mode='bisection')


class TestPosition(unittest.TestCase):

    def test_epoch_on_reference_axis(self):
        np.testing.assert_allclose(position(UNIT_CIRCLE, 0.0), [1.0, 0.0, 0.0], atol=1e-15)

    def test_quarter_period(self):
        np.testing.assert_allclose(position(UNIT_CIRCLE, 90.0), [0.0, 1.0, 0.0], atol=1e-12)

    def test_circular_radius_constant(self):
        elements = UNIT_CIRCLE._replace(a=3.0, i=40.0, omega=10.0, w=20.0, l0=5.0)
        for t in np.linspace(-400.0, 800.0, 37):
            self.assertAlmostEqual(float(jnp.linalg.norm(position(elements, t))), 3.0, places=12)

    def test_periodic(self):
        for elements in (INCLINED, MERCURY):
            for t in (-123.4, 0.0, 17.0, 250.0):
                np.testing.assert_allclose(
                    position(elements, t),
                    position(elements, t + elements.period),
                    atol=1e-9,
                )

    def test_radius_between_apsides(self):
        a, e = INCLINED.a, INCLINED.e
        for t in np.linspace(0.0, INCLINED.period, 50):
            r = float(jnp.linalg.norm(position(INCLINED, t)))
            self.assertGreaterEqual(r, a * (1 - e) - 1e-12)
            self.assertLessEqual(r, a * (1 + e) + 1e-12)

    def test_periapsis_at_zero_mean_anomaly(self):
        elements = INCLINED._replace(l0=0.0)
        r = position(elements, 0.0)
        expected = (elements.a * (1 - elements.e)) * np.asarray(
            perifocal_to_reference(1.0, 0.0, elements.i, elements.omega, elements.w))
        np.testing.assert_allclose(r, expected, atol=1e-12)

    def test_inclination_bounds_height(self):
        """|z| never exceeds r*sin(i)"""
        sin_i = math.sin(math.radians(INCLINED.i))
        for t in np.linspace(0.0, INCLINED.period, 25):
            r = position(INCLINED, t)
            self.assertLessEqual(abs(float(r[2])), float(jnp.linalg.norm(r)) * sin_i + 1e-12)

    def test_reductions_agree(self):
        """Truncating and floor reduction give the same position, also for negative times"""
        truncate = PropagatorConfig(reduction='truncate')
        floor = PropagatorConfig(reduction='floor')
        for t in (-1000.0, -250.0, -1.0, 0.0, 300.0):
            np.testing.assert_allclose(position(INCLINED, t, truncate),
                                       position(INCLINED, t, floor), atol=1e-9)

    def test_converged_solver_matches_fixed(self):
        converged = PropagatorConfig(solver='converged')
        for t in np.linspace(0.0, MERCURY.period, 11):
            np.testing.assert_allclose(position(MERCURY, t), position(MERCURY, t, converged),
                                       atol=1e-10)

    def test_hyperbolic_gives_nan(self):
        elements = UNIT_CIRCLE._replace(e=1.5)
        self.assertTrue(np.all(np.isnan(np.asarray(position(elements, 10.0)))))


class TestVelocity(unittest.TestCase):

    def test_circular_speed(self):
        """Circular orbit speed is 2*pi*a/T"""
        v = velocity(UNIT_CIRCLE, 0.0)
        np.testing.assert_allclose(v, [0.0, 2.0 * math.pi / 360.0, 0.0], atol=1e-15)

    def test_matches_finite_difference(self):
        dt = 1e-4
        for t in (0.0, 33.0, 210.0):
            fd = (position(INCLINED, t + dt) - position(INCLINED, t - dt)) / (2.0 * dt)
            np.testing.assert_allclose(velocity(INCLINED, t), fd, rtol=1e-6, atol=1e-10)

    def test_vis_viva(self):
        mu = (2.0 * math.pi / INCLINED.period)**2 * INCLINED.a**3
        for t in (0.0, 125.0, 333.0):
            s = state(INCLINED, t)
            r = float(jnp.linalg.norm(s.r))
            v = float(jnp.linalg.norm(s.v))
            self.assertAlmostEqual(v**2, mu * (2.0 / r - 1.0 / INCLINED.a), places=12)

    def test_state_consistent(self):
        s = state(MERCURY, 12.0)
        np.testing.assert_allclose(s.r, position(MERCURY, 12.0), atol=1e-14)
        np.testing.assert_allclose(s.v, velocity(MERCURY, 12.0), atol=1e-14)


def test_mean_anomaly_at_epoch():
    assert float(mean_anomaly(INCLINED, 0.0)) == pytest.approx(math.radians(40.0))


def test_mean_anomaly_advances_with_mean_motion():
    # 100 days of a 500 day period is 72 degrees
    assert float(mean_anomaly(INCLINED, 100.0)) == pytest.approx(math.radians(112.0))


def test_true_anomaly_circular_equals_eccentric():
    assert float(true_anomaly(1.2, 0.0)) == pytest.approx(1.2)


def test_spin_angle():
    assert float(spin_angle(1.0, 0.25)) == pytest.approx(math.pi / 2.0)
    assert float(spin_angle(2.0, 5.0)) == pytest.approx(math.pi)
    # Retrograde rotation still maps into [0, 2*pi)
    assert float(spin_angle(-4.0, 1.0)) == pytest.approx(1.5 * math.pi)
