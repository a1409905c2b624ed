"""
Physical and numerical constants for orbital_physics.

Distances are in whatever unit the caller uses for the semi-major axis, time is in days
and angles are in degrees at the public interface (radians internally).
"""

import jax.numpy as jnp

# Angles
TWO_PI = 2.0 * jnp.pi
DEG_PER_REV = 360.0  # degrees per revolution

# Time and distance
DAY = 86400.0  # seconds per day
AU_KM = 149597870.7  # km per AU

# Gravitational constant
G = 6.67430e-11  # m^3 kg^-1 s^-2

# Kepler solver
FIXED_ITERATIONS = 5  # Newton-Raphson steps in the fixed-cost solver
KEPLER_TOL = 1.0e-12  # |dE| tolerance for the convergence-checked solver
KEPLER_MAX_ITER = 50

# Below this, eccentricity or node magnitude is treated as zero when recovering elements
SINGULARITY_TOL = 1.0e-8
