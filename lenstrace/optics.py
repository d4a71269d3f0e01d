"""
optics.py - Vector form of Snell's law and mirror reflection

For a unit incident direction d, a unit surface normal n facing the
incoming ray (d · n <= 0) and index ratio η = n_incident / n_transmitted:

    cos θi = -d · n
    r_perp = η (d + cos θi n)
    r_para = -sqrt(|1 - |r_perp|²|) n
    r      = r_perp + r_para

Total internal reflection occurs when η sin θi > 1; there is no refracted
ray in that case.

Project: lenstrace
"""

from typing import Optional

import numpy as np


def facing(normal: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Return the normal flipped, if needed, to face against direction."""
    if np.dot(direction, normal) > 0.0:
        return -normal
    return normal


def refract(direction: np.ndarray, normal: np.ndarray, ratio: float) -> Optional[np.ndarray]:
    """
    Refract a direction through a surface.

    Parameters
    ----------
    direction : np.ndarray
        Unit incident direction
    normal : np.ndarray
        Unit surface normal; either orientation is accepted
    ratio : float
        Index ratio n_incident / n_transmitted

    Returns
    -------
    np.ndarray or None
        Unit refracted direction, or None on total internal reflection
    """
    n = facing(normal, direction)

    cos_theta = min(float(np.dot(-direction, n)), 1.0)
    sin_theta = np.sqrt(1.0 - cos_theta * cos_theta)

    if sin_theta * ratio > 1.0:
        return None

    r_out_perp = ratio * (direction + cos_theta * n)
    r_out_para = -np.sqrt(abs(1.0 - np.dot(r_out_perp, r_out_perp))) * n
    out = r_out_perp + r_out_para
    return out / np.linalg.norm(out)


def reflect(direction: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror reflection of a direction about a surface normal."""
    return direction - 2.0 * np.dot(direction, normal) * normal
