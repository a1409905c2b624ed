"""
Tests for recovering orbital elements from Cartesian states and for impulsive burns.
"""
import math
import unittest

import jax.numpy as jnp
import numpy as np

from orbital_physics import OrbitalElements
from orbital_physics.astrodynamics import (
    state, position, gravitational_parameter, elements_from_state, apply_impulse,
)


def angle_difference(a, b):
    """Signed difference a - b wrapped into [-180, 180) degrees."""
    return (a - b + 180.0) % 360.0 - 180.0


class TestElementsFromState(unittest.TestCase):

    def assertElementsClose(self, computed, expected, places=8):
        self.assertAlmostEqual(computed.a, expected.a, places=places)
        self.assertAlmostEqual(computed.e, expected.e, places=places)
        self.assertAlmostEqual(computed.i, expected.i, places=places)
        self.assertAlmostEqual(computed.period, expected.period, places=places - 2)
        for name in ('omega', 'w', 'l0'):
            diff = angle_difference(getattr(computed, name), getattr(expected, name))
            self.assertAlmostEqual(diff, 0.0, places=places - 2, msg=f"{name} mismatch")

    def test_recovers_inclined_eccentric_orbit(self):
        elements = OrbitalElements(a=1.0, e=0.1, i=10.0, omega=40.0, w=30.0, l0=50.0, period=365.0)
        mu = float(gravitational_parameter(elements))
        for t in (0.0, 100.0, 400.0):
            s = state(elements, t)
            recovered = elements_from_state(np.asarray(s.r), np.asarray(s.v), mu, time=t)
            self.assertElementsClose(recovered, elements)

    def test_low_earth_orbit(self):
        """Nearly circular, strongly inclined orbit in km and days"""
        iss = OrbitalElements(a=6771.0, e=0.000167, i=51.64, omega=0.1, w=0.1, l0=0.1, period=0.066)
        mu = float(gravitational_parameter(iss))
        s = state(iss, 180.0)
        recovered = elements_from_state(np.asarray(s.r), np.asarray(s.v), mu, time=180.0)
        self.assertAlmostEqual(recovered.a / iss.a, 1.0, places=9)
        self.assertAlmostEqual(recovered.i, iss.i, places=7)
        np.testing.assert_allclose(position(recovered, 180.0), s.r, rtol=1e-8)

    def test_circular_equatorial(self):
        elements = OrbitalElements(a=2.0, e=0.0, i=0.0, omega=0.0, w=0.0, l0=75.0, period=100.0)
        mu = float(gravitational_parameter(elements))
        s = state(elements, 10.0)
        recovered = elements_from_state(np.asarray(s.r), np.asarray(s.v), mu, time=10.0)
        self.assertAlmostEqual(recovered.e, 0.0, places=10)
        self.assertEqual(recovered.omega, 0.0)
        self.assertEqual(recovered.w, 0.0)
        self.assertAlmostEqual(angle_difference(recovered.l0, 75.0), 0.0, places=8)

    def test_eccentric_equatorial(self):
        elements = OrbitalElements(a=5.0, e=0.4, i=0.0, omega=0.0, w=120.0, l0=10.0, period=800.0)
        mu = float(gravitational_parameter(elements))
        s = state(elements, 0.0)
        recovered = elements_from_state(np.asarray(s.r), np.asarray(s.v), mu)
        self.assertElementsClose(recovered, elements)

    def test_escape_state_rejected(self):
        with self.assertRaises(ValueError):
            elements_from_state([1.0, 0.0, 0.0], [0.0, 2.0, 0.0], mu=1.0)

    def test_invalid_mu(self):
        with self.assertRaises(ValueError):
            elements_from_state([1.0, 0.0, 0.0], [0.0, 1.0, 0.0], mu=0.0)

    def test_rectilinear_rejected(self):
        with self.assertRaises(ValueError):
            elements_from_state([1.0, 0.0, 0.0], [0.1, 0.0, 0.0], mu=1.0)


class TestApplyImpulse(unittest.TestCase):

    def setUp(self):
        self.elements = OrbitalElements(a=20.0, e=0.0167, i=1.0, omega=0.0, w=102.937,
                                        l0=100.464, period=365.256)

    def test_zero_impulse_keeps_orbit(self):
        after = apply_impulse(self.elements, 42.0, [0.0, 0.0, 0.0])
        self.assertAlmostEqual(after.a, self.elements.a, places=8)
        self.assertAlmostEqual(after.e, self.elements.e, places=8)
        np.testing.assert_allclose(position(after, 42.0), position(self.elements, 42.0), atol=1e-8)

    def test_prograde_burn_raises_orbit(self):
        t = 42.0
        v = np.asarray(state(self.elements, t).v)
        dv = 0.05 * v / np.linalg.norm(v)
        after = apply_impulse(self.elements, t, dv)
        self.assertGreater(after.a, self.elements.a)
        self.assertGreater(after.period, self.elements.period)
        # The burn point stays on the new orbit
        np.testing.assert_allclose(position(after, t), position(self.elements, t), atol=1e-8)

    def test_mu_conserved(self):
        t = 10.0
        v = np.asarray(state(self.elements, t).v)
        after = apply_impulse(self.elements, t, -0.02 * v)
        self.assertAlmostEqual(float(gravitational_parameter(after)) /
                               float(gravitational_parameter(self.elements)), 1.0, places=10)
