import csv
import logging
import math
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import jax.numpy as jnp
import pydantic
from pydantic import ConfigDict, field_validator

from orbital_physics.astrodynamics import position
from orbital_physics.config import PropagatorConfig
from orbital_physics.orbital_elements import OrbitalElements, check_elements

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = Path(__file__).parent / 'data' / 'solar_system.csv'


class CelestialBody(pydantic.BaseModel):
    """
    A body of the catalog: its orbit plus descriptive data.

    Attributes:
        name: Name of the body (e.g., "Earth", "Moon")
        parent: Name of the body it orbits, None if it orbits the catalog root
        radius: Physical radius (catalog distance units)
        axial_tilt: Tilt of the spin axis relative to the orbit (deg)
        rotation_period: Sidereal rotation period (days), negative for retrograde spin
        elements: Orbital elements relative to the parent
        moons: Names of the bodies orbiting this one
    """
    model_config = ConfigDict(frozen=True)

    name: str
    parent: Optional[str] = None
    radius: float = 0.0
    axial_tilt: float = 0.0
    rotation_period: float
    elements: OrbitalElements
    moons: Tuple[str, ...] = ()

    @field_validator('rotation_period')
    @classmethod
    def validate_rotation_period(cls, v):
        if v == 0.0 or not math.isfinite(v):
            raise ValueError("rotation_period must be finite and non-zero")
        return v

    @field_validator('radius')
    @classmethod
    def validate_radius(cls, v):
        if v < 0.0:
            raise ValueError("radius must be non-negative")
        return v

    @field_validator('elements')
    @classmethod
    def validate_elements(cls, v):
        return check_elements(v)

    def is_moon(self) -> bool:
        return self.parent is not None

    def __repr__(self) -> str:
        return f"CelestialBody(name='{self.name}', parent={self.parent!r})"

    def __str__(self) -> str:
        return self.name if self.parent is None else f"{self.name} (orbiting {self.parent})"


def load_bodies_data(path: Optional[Union[str, Path]] = None) -> Dict[str, CelestialBody]:
    """
    Load a body catalog from CSV.

    Args:
        path: CSV file to read. Defaults to the bundled solar system catalog.

    Returns:
        Dictionary mapping body name to CelestialBody, in file order

    Raises:
        ValueError: If a body names a parent that is not in the catalog
    """
    filepath = Path(path) if path is not None else DEFAULT_CATALOG

    rows = []
    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            rows.append(row)

    names = [row['Name'] for row in rows]
    moons: Dict[str, list] = {name: [] for name in names}
    for row in rows:
        parent = row['Parent'] or None
        if parent is None:
            continue
        if parent not in moons:
            raise ValueError(f"Body '{row['Name']}' orbits unknown parent '{parent}'")
        moons[parent].append(row['Name'])

    bodies = {}
    for row in rows:
        elements = OrbitalElements(
            a=float(row['Semi-Major Axis']),
            e=float(row['Eccentricity ()']),
            i=float(row['Inclination (deg)']),
            omega=float(row['Longitude of the Ascending Node (deg)']),
            w=float(row['Argument of Periapsis (deg)']),
            l0=float(row['Mean Longitude at Epoch (deg)']),
            period=float(row['Period (days)'])
        )
        body = CelestialBody(
            name=row['Name'],
            parent=row['Parent'] or None,
            radius=float(row['Radius']),
            axial_tilt=float(row['Axial Tilt (deg)']),
            rotation_period=float(row['Rotation Period (days)']),
            elements=elements,
            moons=tuple(moons[row['Name']])
        )
        bodies[body.name] = body

    logger.debug("Loaded %d bodies from %s", len(bodies), filepath)
    return bodies


def heliocentric_position(name: str, time, bodies: Optional[Dict[str, CelestialBody]] = None,
                          config: Optional[PropagatorConfig] = None) -> jnp.ndarray:
    """
    Position of a body relative to the catalog root, summing positions along the parent chain.

    Raises:
        KeyError: If the body, or one of its ancestors, is not in the catalog
    """
    bodies = bodies_data if bodies is None else bodies
    total = jnp.zeros(3)
    current = name
    seen = set()
    while current is not None:
        if current in seen:
            raise ValueError(f"Parent chain of '{name}' is cyclic")
        seen.add(current)
        try:
            body = bodies[current]
        except KeyError:
            raise KeyError(f"Unknown body '{current}'") from None
        total = total + position(body.elements, time, config)
        current = body.parent
    return total


bodies_data = load_bodies_data()
