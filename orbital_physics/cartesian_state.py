"""
Cartesian state representation.
"""
from typing import NamedTuple
import jax.numpy as jnp


class CartesianState(NamedTuple):
    """
    Cartesian state of a body relative to the focus of its orbit.

    Attributes:
        r: Position vector [x, y, z] in the distance unit of the semi-major axis
        v: Velocity vector [vx, vy, vz] in distance units per day

    Examples:
        >>> import jax.numpy as jnp
        >>> state = CartesianState(
        ...     r=jnp.array([1.0, 0.0, 0.0]),
        ...     v=jnp.array([0.0, 0.0172, 0.0])  # ~1 AU/year in AU/day
        ... )
    """
    r: jnp.ndarray  # position [x, y, z]
    v: jnp.ndarray  # velocity [vx, vy, vz] per day
