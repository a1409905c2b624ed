"""
Orbital elements representation for celestial bodies.
"""
import math
from typing import NamedTuple


class OrbitalElements(NamedTuple):
    """
    Keplerian orbital elements of a body on a fixed two-body orbit.

    Angular quantities are in degrees and the period is in days. Being a NamedTuple,
    instances are immutable values and valid JAX pytrees, so they can be passed straight
    into jitted or vmapped functions.

    Attributes:
        a: Semi-major axis (any distance unit, > 0)
        e: Eccentricity (0 <= e < 1)
        i: Inclination relative to the reference plane (deg)
        omega: Longitude of the ascending node (deg)
        w: Argument of periapsis (deg)
        l0: Mean longitude at epoch t=0 (deg), used as the mean anomaly at t=0
        period: Orbital period (days, > 0)
    """
    a: float  # semi-major axis
    e: float  # eccentricity
    i: float  # inclination (deg)
    omega: float  # longitude of ascending node (deg)
    w: float  # argument of periapsis (deg)
    l0: float  # mean longitude at epoch (deg)
    period: float  # orbital period (days)


def check_elements(elements: OrbitalElements) -> OrbitalElements:
    """
    Validate that a set of elements describes a closed elliptical orbit.

    The propagator itself never raises, an invalid element set just produces NaN or inf,
    so callers taking elements from the outside world should run them through here first.

    Returns:
        The same elements, for chaining.

    Raises:
        ValueError: If any field is non-finite, a <= 0, e is outside [0, 1) or period <= 0.
    """
    for name, value in zip(elements._fields, elements):
        if not math.isfinite(float(value)):
            raise ValueError(f"Orbital element '{name}' must be finite, got {value}")
    if elements.a <= 0.0:
        raise ValueError(f"Semi-major axis must be positive, got a={elements.a}")
    if not 0.0 <= elements.e < 1.0:
        raise ValueError(f"Eccentricity must satisfy 0 <= e < 1, got e={elements.e}")
    if elements.period <= 0.0:
        raise ValueError(f"Orbital period must be positive, got period={elements.period}")
    return elements
