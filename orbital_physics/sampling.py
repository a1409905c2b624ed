"""
Orbit sampling: a body's path over one period as a discretized sequence of positions.
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import jax
import jax.numpy as jnp
import numpy as np
from pydantic import BaseModel, Field, model_validator

from .astrodynamics import position
from .config import PropagatorConfig
from .orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)


def sample_times(period, steps: int, closed: bool = False) -> jnp.ndarray:
    """
    Evenly spaced times (days) over one period, t_k = (k / steps) * period.

    The point at t = period is only included when ``closed`` is True.
    """
    if steps < 0:
        raise ValueError(f"steps must be non-negative, got {steps}")
    count = steps + 1 if closed and steps > 0 else steps
    return jnp.arange(count, dtype=float) / max(steps, 1) * period


def sample_orbit(elements: OrbitalElements, steps: int, closed: bool = False,
                 config: Optional[PropagatorConfig] = None) -> jnp.ndarray:
    """
    Sample the orbit at ``steps`` evenly spaced times across one period.

    Args:
        elements: Orbital elements of the body
        steps: Number of samples (>= 0). Zero gives an empty path.
        closed: Append the point at t = period so the path ends where it started
        config: Propagator settings

    Returns:
        Array of shape (steps, 3), or (steps + 1, 3) when closed

    Raises:
        ValueError: If steps is negative
    """
    times = sample_times(elements.period, steps, closed=closed)
    if times.shape[0] == 0:
        return jnp.zeros((0, 3))
    logger.debug("Sampling %d points over a %.6g day period", times.shape[0], elements.period)
    return jax.vmap(lambda t: position(elements, t, config))(times)


def sample_orbit_flat(elements: OrbitalElements, steps: int, closed: bool = False,
                      config: Optional[PropagatorConfig] = None) -> jnp.ndarray:
    """Same as sample_orbit, flattened to [x0, y0, z0, x1, y1, z1, ...]."""
    return sample_orbit(elements, steps, closed=closed, config=config).reshape(-1)


class OrbitPath(BaseModel):
    """
    A sampled orbit together with the elements it was generated from.
    Serialized as JSON.
    """
    name: Optional[str] = Field(None, description="Name of the sampled body")
    elements: OrbitalElements = Field(..., description="Elements the path was sampled from")
    steps: int = Field(..., ge=0, description="Number of samples over one period")
    closed: bool = Field(False, description="Whether the t = period point is included")
    points: List[Tuple[float, float, float]] = Field(
        default_factory=list,
        description="Positions [x, y, z] in the distance unit of the semi-major axis"
    )

    @model_validator(mode='after')
    def validate_point_count(self):
        expected = self.steps + 1 if self.closed and self.steps > 0 else self.steps
        if len(self.points) != expected:
            raise ValueError(
                f"Expected {expected} points for steps={self.steps}, closed={self.closed}, "
                f"got {len(self.points)}"
            )
        return self

    @classmethod
    def from_elements(cls, elements: OrbitalElements, steps: int, closed: bool = False,
                      name: Optional[str] = None,
                      config: Optional[PropagatorConfig] = None) -> 'OrbitPath':
        """Sample ``elements`` and wrap the result."""
        path = np.asarray(sample_orbit(elements, steps, closed=closed, config=config))
        points = [tuple(float(c) for c in p) for p in path]
        return cls(name=name, elements=elements, steps=steps, closed=closed, points=points)

    def as_array(self) -> np.ndarray:
        return np.array(self.points, dtype=float).reshape(-1, 3)

    def write(self, stream: TextIO = sys.stdout, indent: Optional[int] = 2) -> None:
        stream.write(self.model_dump_json(indent=indent))
        stream.write('\n')

    def write_to_file(self, path: Union[str, Path], indent: Optional[int] = 2) -> None:
        with open(path, 'w') as f:
            self.write(stream=f, indent=indent)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'OrbitPath':
        with open(path, 'r') as f:
            return cls.model_validate_json(f.read())
