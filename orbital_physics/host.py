"""
Adapter for host environments (scene graphs, scripting layers, web front ends).

Hosts hand over plain scalars and mappings and expect flat lists of floats back.
The mapping keys follow the catalog files the renderer reads, where the mean
longitude is spelled ``L0``.
"""
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np

from .astrodynamics import position
from .config import PropagatorConfig
from .orbital_elements import OrbitalElements, check_elements
from .sampling import sample_orbit_flat

ElementsLike = Union[OrbitalElements, Mapping[str, float]]

# Host key -> OrbitalElements field
_KEY_ALIASES = {
    'a': 'a',
    'e': 'e',
    'i': 'i',
    'omega': 'omega',
    'w': 'w',
    'l0': 'l0',
    'L0': 'l0',
    'period': 'period',
}


def elements_from_mapping(mapping: Mapping[str, float]) -> OrbitalElements:
    """
    Build validated OrbitalElements from a host mapping.

    Unknown keys are ignored so that whole body records can be passed in.

    Raises:
        KeyError: If a required element is missing
        ValueError: If a value is not numeric or the elements are not a closed orbit
    """
    values = {}
    for key, field in _KEY_ALIASES.items():
        if key in mapping:
            try:
                values[field] = float(mapping[key])
            except (TypeError, ValueError):
                raise ValueError(f"Element '{key}' must be numeric, got {mapping[key]!r}") from None

    missing = [field for field in OrbitalElements._fields if field not in values]
    if missing:
        raise KeyError(f"Missing orbital elements: {', '.join(missing)}")

    return check_elements(OrbitalElements(**values))


def _as_elements(elements: ElementsLike) -> OrbitalElements:
    if isinstance(elements, OrbitalElements):
        return check_elements(elements)
    return elements_from_mapping(elements)


def calculate_position_from_mean_anomaly(elements: ElementsLike, time: float,
                                         config: Optional[PropagatorConfig] = None) -> List[float]:
    """Position [x, y, z] at ``time`` days as a list of floats."""
    xyz = position(_as_elements(elements), float(time), config)
    return [float(c) for c in np.asarray(xyz)]


def generate_orbit_path(elements: ElementsLike, steps: int, closed: bool = False,
                        config: Optional[PropagatorConfig] = None) -> List[float]:
    """Flat list [x0, y0, z0, x1, ...] of ``steps`` points over one period."""
    flat = sample_orbit_flat(_as_elements(elements), int(steps), closed=closed, config=config)
    return [float(c) for c in np.asarray(flat)]


def to_y_up(xyz: Sequence[float]) -> List[float]:
    """
    Reorder a z-up [x, y, z] (or a flat run of them) into the [y, z, x] order
    of a y-up scene graph.
    """
    values = np.asarray(xyz, dtype=float).reshape(-1, 3)
    return [float(c) for c in values[:, [1, 2, 0]].reshape(-1)]


def from_y_up(xyz: Sequence[float]) -> List[float]:
    """Inverse of to_y_up."""
    values = np.asarray(xyz, dtype=float).reshape(-1, 3)
    return [float(c) for c in values[:, [2, 0, 1]].reshape(-1)]
