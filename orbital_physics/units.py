"""
Angle conversions and mean anomaly reduction.

These work on Python floats, numpy arrays and traced JAX values alike.
"""
import jax.numpy as jnp

from .constants import DEG_PER_REV


def deg_to_rad(degrees):
    """Convert degrees to radians. No normalization is applied, so 720 maps to 4*pi."""
    return degrees * jnp.pi / 180.0


def rad_to_deg(radians):
    return radians * 180.0 / jnp.pi


def wrap_degrees(angle):
    """Wrap an angle in degrees into [0, 360)."""
    return jnp.mod(angle, DEG_PER_REV)


def reduce_mean_anomaly(m_deg, reduction: str = "truncate"):
    """
    Reduce a mean anomaly in degrees modulo one revolution.

    Parameters
    ----------
    m_deg : float or array
        Unreduced mean anomaly in degrees.
    reduction : str
        ``"truncate"`` keeps the sign of the dividend (result in (-360, 360)), matching a
        C-style remainder. ``"floor"`` is the mathematical modulo (result in [0, 360)).

    Returns
    -------
    float or array
        Reduced mean anomaly in degrees.
    """
    if reduction == "truncate":
        return jnp.fmod(m_deg, DEG_PER_REV)
    elif reduction == "floor":
        return jnp.mod(m_deg, DEG_PER_REV)
    else:
        raise ValueError(f"Invalid reduction '{reduction}'. Must be one of: 'truncate', 'floor'")
