# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements, check_elements
from .cartesian_state import CartesianState

from .constants import (
    # Constants
    TWO_PI,
    DEG_PER_REV,
    DAY,
    AU_KM,
    G,
    FIXED_ITERATIONS,
)

from .units import (
    deg_to_rad,
    rad_to_deg,
    wrap_degrees,
    reduce_mean_anomaly,
)

from .config import (
    PropagatorConfig,
    SamplerConfig,
    make_propagator_config,
)

from .astrodynamics import (
    # Functions
    kepler_residual,
    solve_kepler,
    mean_anomaly,
    true_anomaly,
    perifocal_to_reference,
    position,
    velocity,
    state,
    gravitational_parameter,
    elements_from_state,
    apply_impulse,
    spin_angle,
)

from .sampling import (
    sample_times,
    sample_orbit,
    sample_orbit_flat,
    OrbitPath,
)

from .bodies import (
    # Body catalog
    CelestialBody,
    load_bodies_data,
    heliocentric_position,
    bodies_data,
)

__version__ = "0.1.0"

__all__ = [
    # Constants
    "TWO_PI",
    "DEG_PER_REV",
    "DAY",
    "AU_KM",
    "G",
    "FIXED_ITERATIONS",

    # Named tuples
    "OrbitalElements",
    "CartesianState",
    "check_elements",

    # Units
    "deg_to_rad",
    "rad_to_deg",
    "wrap_degrees",
    "reduce_mean_anomaly",

    # Configuration
    "PropagatorConfig",
    "SamplerConfig",
    "make_propagator_config",

    # Propagation
    "kepler_residual",
    "solve_kepler",
    "mean_anomaly",
    "true_anomaly",
    "perifocal_to_reference",
    "position",
    "velocity",
    "state",
    "gravitational_parameter",
    "elements_from_state",
    "apply_impulse",
    "spin_angle",

    # Sampling
    "sample_times",
    "sample_orbit",
    "sample_orbit_flat",
    "OrbitPath",

    # Bodies
    "CelestialBody",
    "load_bodies_data",
    "heliocentric_position",
    "bodies_data",
]
