"""
Statistical helpers for outlier detection along a track.

Provides a robust (Huber) linear fit, a LOESS-style locally weighted
polynomial regression with one round of residual reweighting, and the
interquartile-range outlier rule used by the sequence correctors.
"""

from typing import Optional
import logging
import warnings

import numpy as np
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from .error_handling import InsufficientDataError

logger = logging.getLogger(__name__)

# Residuals this small relative to the data scale are rounding noise
ZERO_RESIDUAL_TOLERANCE = 1e-9


def _snap_to_zero(residuals: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Set residuals indistinguishable from rounding noise to exactly zero."""
    scale = np.max(np.abs(values - np.median(values))) if len(values) else 0.0
    tolerance = ZERO_RESIDUAL_TOLERANCE * max(1.0, scale)
    residuals = residuals.copy()
    residuals[np.abs(residuals) <= tolerance] = 0.0
    return residuals


def robust_linear_residuals(x: np.ndarray, y: np.ndarray, max_iter: int = 200) -> np.ndarray:
    """
    Residuals of a robust linear regression of ``y`` on ``x``.

    Uses a Huber M-estimator (iteratively reweighted least squares with a
    MAD scale). When the majority of points already lie exactly on the
    ordinary least squares line the robust scale is zero, and the OLS
    residuals are returned instead.

    Args:
        x: Regressor, e.g. observation positions
        y: Response, e.g. timestamps as floats
        max_iter: Maximum IRLS iterations

    Returns:
        Residual array aligned with ``y``

    Raises:
        InsufficientDataError: If fewer than three points are given
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if len(y) < 3:
        raise InsufficientDataError(f"Robust regression needs at least 3 points, got {len(y)}")

    # Centre the response so large epoch times keep their precision
    centered = y - np.median(y)
    design = sm.add_constant(x - x[0], has_constant='add')

    ols_resid = _snap_to_zero(np.asarray(sm.OLS(centered, design).fit().resid), centered)
    if sm.robust.scale.mad(ols_resid) == 0:
        logger.debug("Degenerate residual scale, using least squares residuals")
        return ols_resid

    with warnings.catch_warnings():
        warnings.simplefilter('ignore', ConvergenceWarning)
        with np.errstate(divide='ignore', invalid='ignore'):
            model = sm.RLM(centered, design, M=sm.robust.norms.HuberT())
            results = model.fit(maxiter=max_iter)

    residuals = np.asarray(results.resid, dtype=float)
    if not np.all(np.isfinite(residuals)):
        logger.debug("Robust fit did not converge to finite residuals, using least squares")
        return ols_resid

    return _snap_to_zero(residuals, centered)


def local_regression(x: np.ndarray, y: np.ndarray, span: float = 0.05, degree: int = 2,
                     weights: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Locally weighted polynomial regression evaluated at the data points.

    Each point is fitted from its ``ceil(span * n)`` nearest neighbours in
    ``x`` (never fewer than ``2 * degree + 3``) with tricube distance
    weights, optionally multiplied by prior observation weights.

    Args:
        x: Regressor values
        y: Response values
        span: Fraction of the points used in each local fit
        degree: Degree of the local polynomial
        weights: Optional prior weight per observation

    Returns:
        Fitted values aligned with ``y``
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    prior = np.ones(n) if weights is None else np.asarray(weights, dtype=float)

    q = min(n, max(int(np.ceil(span * n)), 2 * degree + 3))

    order = np.argsort(x, kind='mergesort')
    xs, ys, ws = x[order], y[order], prior[order]
    fitted_sorted = np.empty(n)

    for i in range(n):
        lo = max(0, i - q + 1)
        hi = min(n, i + q)
        distances = np.abs(xs[lo:hi] - xs[i])
        nearest = np.argpartition(distances, q - 1)[:q] if len(distances) > q else np.arange(len(distances))
        idx = nearest + lo

        bandwidth = distances[nearest].max()
        if bandwidth <= 0:
            fitted_sorted[i] = np.average(ys[idx], weights=ws[idx])
            continue

        u = (xs[idx] - xs[i]) / bandwidth
        kernel = np.clip(1 - np.abs(u) ** 3, 0, None) ** 3
        sqrt_w = np.sqrt(kernel * ws[idx])

        design = np.vander(u, degree + 1, increasing=True)
        coef, *_ = np.linalg.lstsq(design * sqrt_w[:, None], ys[idx] * sqrt_w, rcond=None)
        fitted_sorted[i] = coef[0]

    fitted = np.empty(n)
    fitted[order] = fitted_sorted
    return fitted


def reweighted_local_residuals(x: np.ndarray, y: np.ndarray, span: float = 0.05,
                               degree: int = 2) -> np.ndarray:
    """
    Residuals of a local regression refitted with inverse-residual weights.

    The first fit's absolute residuals give the weights ``1 / r`` of the
    second fit; exact-zero residuals are replaced by the smallest nonzero
    residual first. If the first fit is exact everywhere the zero residuals
    are returned.

    Args:
        x: Regressor values (e.g. time)
        y: Response values (one coordinate axis)
        span: Fraction of the points used in each local fit
        degree: Degree of the local polynomial

    Returns:
        Residuals of the reweighted fit
    """
    y = np.asarray(y, dtype=float)

    first = _snap_to_zero(y - local_regression(x, y, span, degree), y)
    abs_resid = np.abs(first)

    nonzero = abs_resid[abs_resid > 0]
    if len(nonzero) == 0:
        return first

    abs_resid[abs_resid == 0] = nonzero.min()

    second = y - local_regression(x, y, span, degree, weights=1.0 / abs_resid)
    return _snap_to_zero(second, y)


def iqr_outliers(values: np.ndarray, scale: float, two_sided: bool = False) -> np.ndarray:
    """
    Flag values far from the median in units of the interquartile range.

    Args:
        values: Values to screen (typically square-rooted absolute residuals)
        scale: Multiple of the IQR defining the threshold
        two_sided: Also flag values below ``median - scale * IQR``

    Returns:
        Boolean mask of outliers
    """
    values = np.asarray(values, dtype=float)
    median = np.median(values)
    q1, q3 = np.percentile(values, [25, 75])
    iqr = q3 - q1

    outliers = values > median + scale * iqr
    if two_sided:
        outliers |= values < median - scale * iqr

    logger.debug(f"IQR rule: median={median:.6g}, IQR={iqr:.6g}, scale={scale}, "
                 f"flagged={int(outliers.sum())}/{len(values)}")
    return outliers
