from functools import partial
from typing import Optional

import jax
import jax.numpy as jnp
from jax import jit
import numpy as np

from .cartesian_state import CartesianState
from .config import PropagatorConfig, DEFAULT_PROPAGATOR_CONFIG
from .constants import (
    TWO_PI, DEG_PER_REV,
    FIXED_ITERATIONS, KEPLER_TOL, KEPLER_MAX_ITER, SINGULARITY_TOL,
)
from .orbital_elements import OrbitalElements
from .units import deg_to_rad, rad_to_deg, reduce_mean_anomaly


def kepler_residual(E, M, e):
    """Residual of Kepler's equation, E - e*sin(E) - M."""
    return E - e * jnp.sin(E) - M


def solve_kepler(M, e, mode: str = "fixed", iterations: int = FIXED_ITERATIONS,
                 tol: float = KEPLER_TOL, max_iter: int = KEPLER_MAX_ITER):
    """
    Solve Kepler's equation M = E - e*sin(E) for eccentric anomaly E
    using Newton-Raphson iteration started from E0 = M.

    Parameters
    ----------
    M : float or jnp.ndarray
        Mean anomaly (radians)
    e : float or jnp.ndarray
        Eccentricity
    mode : str
        ``"fixed"`` runs exactly ``iterations`` steps with jax.lax.scan and never checks
        convergence. Five steps are plenty for e < 0.8 but lose precision as e -> 1.
        ``"converged"`` runs jax.lax.while_loop until |dE| < tol or max_iter steps.
    iterations : int, optional
        Number of steps for the fixed mode
    tol : float, optional
        Tolerance on the update for the converged mode
    max_iter : int, optional
        Maximum number of steps for the converged mode

    Returns
    -------
    E : jnp.ndarray
        Eccentric anomaly (radians)
    """
    M = jnp.asarray(M, dtype=float)

    def newton_step(E):
        return E - kepler_residual(E, M, e) / (1.0 - e * jnp.cos(E))

    if mode == "fixed":
        def body_fn(E, _):
            return newton_step(E), None

        E_final, _ = jax.lax.scan(body_fn, M, None, length=iterations)
        return E_final
    elif mode == "converged":
        def cond_fn(carry):
            _, dE, k = carry
            return jnp.any(jnp.abs(dE) >= tol) & (k < max_iter)

        def body_fn(carry):
            E, _, k = carry
            E_new = newton_step(E)
            return E_new, E_new - E, k + 1

        init = (M, jnp.full_like(M, jnp.inf), jnp.asarray(0))
        E_final, _, _ = jax.lax.while_loop(cond_fn, body_fn, init)
        return E_final
    else:
        raise ValueError(f"Invalid solver mode '{mode}'. Must be one of: 'fixed', 'converged'")


def mean_anomaly(elements: OrbitalElements, time, reduction: str = "truncate"):
    """
    Mean anomaly (radians) at ``time`` days past epoch.

    The mean motion is 360/period deg/day and l0 is taken as the mean anomaly at t=0.
    """
    n = DEG_PER_REV / elements.period
    m_deg = elements.l0 + n * time
    return deg_to_rad(reduce_mean_anomaly(m_deg, reduction))


def true_anomaly(E, e):
    """True anomaly (radians) from eccentric anomaly. Requires e <= 1."""
    return 2.0 * jnp.arctan2(
        jnp.sqrt(1.0 + e) * jnp.sin(E / 2.0),
        jnp.sqrt(1.0 - e) * jnp.cos(E / 2.0)
    )


def perifocal_to_reference(x_orb, y_orb, i, omega, w) -> jnp.ndarray:
    """
    Rotate an in-plane vector into the reference frame.

    Applies the 3-1-3 rotation by argument of periapsis ``w``, inclination ``i`` and
    longitude of the ascending node ``omega`` (all in degrees).
    """
    cos_omega = jnp.cos(deg_to_rad(omega))
    sin_omega = jnp.sin(deg_to_rad(omega))
    cos_i = jnp.cos(deg_to_rad(i))
    sin_i = jnp.sin(deg_to_rad(i))
    cos_w = jnp.cos(deg_to_rad(w))
    sin_w = jnp.sin(deg_to_rad(w))

    x = (x_orb * (cos_omega * cos_w - sin_omega * sin_w * cos_i)
         - y_orb * (cos_omega * sin_w + sin_omega * cos_w * cos_i))
    y = (x_orb * (sin_omega * cos_w + cos_omega * sin_w * cos_i)
         - y_orb * (sin_omega * sin_w - cos_omega * cos_w * cos_i))
    z = x_orb * (sin_w * sin_i) + y_orb * (cos_w * sin_i)

    return jnp.array([x, y, z])


def _eccentric_anomaly(elements: OrbitalElements, time, config: PropagatorConfig):
    M = mean_anomaly(elements, time, config.reduction)
    return solve_kepler(M, elements.e, mode=config.solver, iterations=config.iterations,
                        tol=config.tol, max_iter=config.max_iter)


def _position_from_anomaly(elements: OrbitalElements, E) -> jnp.ndarray:
    a, e = elements.a, elements.e
    nu = true_anomaly(E, e)

    # Distance from the focus
    r = a * (1.0 - e * jnp.cos(E))

    # Position in the orbital plane, x towards periapsis
    x_orb = r * jnp.cos(nu)
    y_orb = r * jnp.sin(nu)

    return perifocal_to_reference(x_orb, y_orb, elements.i, elements.omega, elements.w)


def _velocity_from_anomaly(elements: OrbitalElements, E) -> jnp.ndarray:
    a, e = elements.a, elements.e
    n = TWO_PI / elements.period  # rad/day
    dE_dt = n / (1.0 - e * jnp.cos(E))

    vx_orb = -a * jnp.sin(E) * dE_dt
    vy_orb = a * jnp.sqrt(1.0 - e**2) * jnp.cos(E) * dE_dt

    return perifocal_to_reference(vx_orb, vy_orb, elements.i, elements.omega, elements.w)


@partial(jit, static_argnames=("config",))
def position(elements: OrbitalElements, time,
             config: Optional[PropagatorConfig] = None) -> jnp.ndarray:
    """
    Position [x, y, z] of a body ``time`` days past epoch.

    The result is in the distance unit of ``elements.a``. Nothing is validated here:
    e >= 1 gives NaN and a non-positive period gives inf or a reversed orbit. See
    ``check_elements``.
    """
    config = config or DEFAULT_PROPAGATOR_CONFIG
    E = _eccentric_anomaly(elements, time, config)
    return _position_from_anomaly(elements, E)


@partial(jit, static_argnames=("config",))
def velocity(elements: OrbitalElements, time,
             config: Optional[PropagatorConfig] = None) -> jnp.ndarray:
    """Velocity [vx, vy, vz] in distance units per day, ``time`` days past epoch."""
    config = config or DEFAULT_PROPAGATOR_CONFIG
    E = _eccentric_anomaly(elements, time, config)
    return _velocity_from_anomaly(elements, E)


@partial(jit, static_argnames=("config",))
def state(elements: OrbitalElements, time,
          config: Optional[PropagatorConfig] = None) -> CartesianState:
    """Position and velocity at ``time`` days past epoch, sharing one Kepler solve."""
    config = config or DEFAULT_PROPAGATOR_CONFIG
    E = _eccentric_anomaly(elements, time, config)
    return CartesianState(r=_position_from_anomaly(elements, E),
                          v=_velocity_from_anomaly(elements, E))


def gravitational_parameter(elements: OrbitalElements):
    """
    Gravitational parameter implied by the period and semi-major axis.

    From Kepler's third law, mu = (2*pi/T)^2 * a^3, in distance^3/day^2.
    """
    return (TWO_PI / elements.period)**2 * elements.a**3


def elements_from_state(r, v, mu: float, time: float = 0.0) -> OrbitalElements:
    """
    Recover orbital elements from a Cartesian state.

    Args:
        r: Position [x, y, z] in distance units
        v: Velocity [vx, vy, vz] in distance units per day
        mu: Gravitational parameter in distance^3/day^2 (see gravitational_parameter)
        time: Days past epoch at which the state applies. l0 is propagated back to t=0.

    Returns:
        OrbitalElements such that position(elements, time) reproduces r.

    Raises:
        ValueError: If mu is not positive, the state is degenerate or not on a closed orbit.

    Note:
        Angles that are undefined for the orbit are set to zero. For equatorial orbits
        omega is 0 and w is measured from the x axis, for circular orbits w is 0 and the
        anomaly is measured from the node (or from the x axis if also equatorial).
    """
    if mu <= 0.0:
        raise ValueError(f"Gravitational parameter must be positive, got mu={mu}")

    r_vec = np.asarray(r, dtype=float)
    v_vec = np.asarray(v, dtype=float)
    r_mag = np.linalg.norm(r_vec)
    v_mag = np.linalg.norm(v_vec)

    # Specific angular momentum
    h_vec = np.cross(r_vec, v_vec)
    h = np.linalg.norm(h_vec)
    if r_mag == 0.0 or h == 0.0:
        raise ValueError("State is degenerate (zero radius or rectilinear motion)")

    # Node vector
    n_vec = np.array([-h_vec[1], h_vec[0], 0.0])
    n = np.linalg.norm(n_vec)
    equatorial = n / h < SINGULARITY_TOL
    prograde = h_vec[2] >= 0.0

    # Eccentricity vector
    e_vec = np.cross(v_vec, h_vec) / mu - r_vec / r_mag
    e = np.linalg.norm(e_vec)
    circular = e < SINGULARITY_TOL

    energy = v_mag**2 / 2.0 - mu / r_mag
    if energy >= 0.0:
        raise ValueError(f"State is not on a closed orbit (specific energy {energy} >= 0)")
    a = -mu / (2.0 * energy)

    inc = np.arccos(np.clip(h_vec[2] / h, -1.0, 1.0))

    if equatorial:
        raan = 0.0
    else:
        raan = np.arccos(np.clip(n_vec[0] / n, -1.0, 1.0))
        if n_vec[1] < 0.0:
            raan = TWO_PI - raan

    if circular:
        argp = 0.0
        if equatorial:
            nu = np.arctan2(r_vec[1] if prograde else -r_vec[1], r_vec[0])
        else:
            nu = np.arccos(np.clip(np.dot(n_vec, r_vec) / (n * r_mag), -1.0, 1.0))
            if r_vec[2] < 0.0:
                nu = TWO_PI - nu
    else:
        if equatorial:
            argp = np.arctan2(e_vec[1] if prograde else -e_vec[1], e_vec[0])
        else:
            argp = np.arccos(np.clip(np.dot(n_vec, e_vec) / (n * e), -1.0, 1.0))
            if e_vec[2] < 0.0:
                argp = TWO_PI - argp
        nu = np.arccos(np.clip(np.dot(e_vec, r_vec) / (e * r_mag), -1.0, 1.0))
        if np.dot(r_vec, v_vec) < 0.0:
            nu = TWO_PI - nu

    E = np.arctan2(np.sqrt(1.0 - e**2) * np.sin(nu), e + np.cos(nu))
    M = E - e * np.sin(E)

    period = TWO_PI * np.sqrt(a**3 / mu)
    l0 = rad_to_deg(M) - DEG_PER_REV / period * time

    return OrbitalElements(
        a=float(a),
        e=float(e),
        i=float(rad_to_deg(inc)),
        omega=float(np.mod(rad_to_deg(raan), DEG_PER_REV)),
        w=float(np.mod(rad_to_deg(argp), DEG_PER_REV)),
        l0=float(np.mod(l0, DEG_PER_REV)),
        period=float(period),
    )


def apply_impulse(elements: OrbitalElements, time, delta_v,
                  config: Optional[PropagatorConfig] = None) -> OrbitalElements:
    """
    Elements after an instantaneous velocity change ``delta_v`` (distance units per day)
    applied ``time`` days past epoch. The central body is unchanged, so mu is carried over.
    """
    current = state(elements, time, config)
    v_new = np.asarray(current.v) + np.asarray(delta_v, dtype=float)
    mu = float(gravitational_parameter(elements))
    return elements_from_state(np.asarray(current.r), v_new, mu, time=time)


def spin_angle(rotation_period, time):
    """Rotation of a body about its own axis after ``time`` days, in [0, 2*pi)."""
    return jnp.mod(TWO_PI * time / rotation_period, TWO_PI)
