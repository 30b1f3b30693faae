"""
Clustering of source points for the Fast Gauss Transform.

Provides the Clustering base class (shared state, truncation order and
expansion coefficients) and GreedyFarthestPointClustering, a k-center
2-approximation that produces the partition.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Integral
from typing import Optional
import numpy as np

from ..config import config
from ..utils.logging_config import get_logger
from .series import compute_constant_series, compute_monomials, term_count
from .truncation import TruncationSearch, search_truncation_order

logger = get_logger(__name__)

Array2D = np.ndarray

# Upper bound on the monomial block held in memory by compute_coefficients
COEFFICIENT_BLOCK_BYTES = 4 * 1024 * 1024


def _readonly(a: np.ndarray) -> np.ndarray:
    view = a.view()
    view.flags.writeable = False
    return view


@dataclass
class ClusteringSummary:
    """Scalar overview of a finished clustering."""

    K: int
    n_points: int
    dimensions: int
    n_nonempty: int
    rx: float
    p_max: int
    p_max_total: int
    truncation_capped: bool


class Clustering(ABC):
    """
    Partition of source points into K clusters with a shared truncation order.

    Subclasses implement _partition(), which must fill self._indices with a
    cluster index per point and self._radii with true Euclidean radii. The
    base class validates the arguments, runs the partition, then derives
    centroids, counts, rx, the truncation order and the constant series.

    Everything is computed eagerly in the constructor and is read-only
    afterwards.
    """

    def __init__(
        self,
        points: Array2D,
        K: int,
        bandwidth: float,
        epsilon: Optional[float] = None,
        *,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        truncation_upper_limit: Optional[int] = None,
    ):
        """
        Args:
            points: Source points of shape (n_points, d)
            K: Number of clusters, 1 <= K <= n_points
            bandwidth: Gaussian bandwidth h (> 0)
            epsilon: Target error in (0, 1) (default: configured epsilon)
            seed: Seed for the default random generator
            rng: Random generator to use instead of one built from seed
            truncation_upper_limit: Cap on the truncation-order search
                (default: configured upper limit)

        Raises:
            ValueError: If points, K, bandwidth or epsilon are invalid
        """
        X = np.asarray(points, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError(f"points must be (n_points, d); got shape {X.shape}")
        n, d = X.shape
        if n < 1 or d < 1:
            raise ValueError(f"points must be non-empty; got shape {X.shape}")
        if not np.all(np.isfinite(X)):
            raise ValueError("points must be finite")

        if isinstance(K, bool) or not isinstance(K, Integral):
            raise ValueError(f"K must be an integer, got {K!r}")
        K = int(K)
        if K < 1:
            raise ValueError(f"K must be >= 1, got {K}")
        if K > n:
            raise ValueError(f"K ({K}) cannot exceed number of points ({n})")

        bandwidth = float(bandwidth)
        if not np.isfinite(bandwidth) or bandwidth <= 0:
            raise ValueError(f"bandwidth must be positive, got {bandwidth}")

        if epsilon is None:
            epsilon = config.clustering.default_epsilon
        epsilon = float(epsilon)
        if not 0.0 < epsilon < 1.0:
            raise ValueError(f"epsilon must be in (0, 1), got {epsilon}")

        self._source = _readonly(X)
        self._K = K
        self._bandwidth = bandwidth
        self._epsilon = epsilon
        self._truncation_upper_limit = truncation_upper_limit
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        self._indices = np.zeros(n, dtype=np.intp)
        self._centers = np.zeros((K, d), dtype=np.float64)
        self._num_points = np.zeros(K, dtype=np.intp)
        self._radii = np.zeros(K, dtype=np.float64)
        self._rx = 0.0
        self._p_max = 0
        self._constant_series = np.empty(0, dtype=np.float64)
        self._truncation: Optional[TruncationSearch] = None
        self._partitioned = False

        self._partition(self._rng)
        self._finalize()

    @abstractmethod
    def _partition(self, rng: np.random.Generator) -> None:
        """Fill self._indices and self._radii (true distances, not squared)."""

    def _finalize(self) -> None:
        """Derive centroids, counts, rx, truncation order and constant series."""
        K, d = self._K, self.d
        if self._indices.min() < 0 or self._indices.max() >= K:
            raise RuntimeError("partition produced cluster indices outside [0, K)")

        self._rx = float(self._radii.max())

        counts = np.bincount(self._indices, minlength=K)
        sums = np.zeros((K, d), dtype=np.float64)
        np.add.at(sums, self._indices, self._source)
        nonempty = counts > 0
        self._centers[nonempty] = sums[nonempty] / counts[nonempty, None]
        self._num_points = counts.astype(np.intp)

        self._truncation = search_truncation_order(
            d, self._bandwidth, self._epsilon, self._rx,
            upper_limit=self._truncation_upper_limit,
        )
        self._p_max = self._truncation.order
        self._constant_series = compute_constant_series(d, self._p_max)
        self._partitioned = True

        logger.debug(
            "%s: n=%d d=%d K=%d (%d non-empty) rx=%g p_max=%d",
            type(self).__name__, self.n, d, K, int(nonempty.sum()),
            self._rx, self._p_max,
        )

    # ------------------------------------------------------------------
    # Coefficients
    # ------------------------------------------------------------------

    def compute_coefficients(self, q: np.ndarray) -> Array2D:
        """
        Build the per-cluster expansion coefficients for point weights q.

        For each point i in cluster k, q[i] * exp(-|dx|^2 / h^2) times the
        monomials of dx / h (dx = x_i - centroid_k) is added to row k; every
        row is then scaled by the constant series.

        Args:
            q: Weights of shape (n_points,)

        Returns:
            Coefficient matrix of shape (K, p_max_total)

        Raises:
            RuntimeError: If called before the partition is complete
            ValueError: If q does not hold one weight per point
        """
        if not self._partitioned:
            raise RuntimeError("compute_coefficients called before clustering completed")
        q = np.asarray(q, dtype=np.float64)
        if q.shape != (self.n,):
            raise ValueError(f"q must have shape ({self.n},); got {q.shape}")

        h = self._bandwidth
        dx = self._source - self._centers[self._indices]
        distance2 = np.einsum("nd,nd->n", dx, dx)
        f = q * np.exp(-distance2 / (h * h))

        n_terms = term_count(self.d, self._p_max)
        C = np.zeros((self._K, n_terms), dtype=np.float64)

        # monomials are built for a bounded block of one cluster's members
        rows = max(1, COEFFICIENT_BLOCK_BYTES // (8 * max(n_terms, 1)))
        order = np.argsort(self._indices, kind="stable")
        bounds = np.searchsorted(self._indices[order], np.arange(self._K + 1))
        for k in range(self._K):
            members = order[bounds[k] : bounds[k + 1]]
            for start in range(0, members.shape[0], rows):
                block = members[start : start + rows]
                monomials = compute_monomials(dx[block] / h, self._p_max)
                C[k] += f[block] @ monomials

        constant_series = compute_constant_series(self.d, self._p_max)
        C *= constant_series[None, :]
        return C

    compute_C = compute_coefficients

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def source(self) -> Array2D:
        return self._source

    @property
    def n(self) -> int:
        return self._source.shape[0]

    @property
    def d(self) -> int:
        return self._source.shape[1]

    @property
    def K(self) -> int:
        return self._K

    @property
    def bandwidth(self) -> float:
        return self._bandwidth

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def indices(self) -> np.ndarray:
        """Cluster index of every point, shape (n_points,)."""
        return _readonly(self._indices)

    @property
    def centers(self) -> Array2D:
        """Cluster centroids, shape (K, d). Empty clusters stay at zero."""
        return _readonly(self._centers)

    @property
    def num_points(self) -> np.ndarray:
        return _readonly(self._num_points)

    @property
    def radii(self) -> np.ndarray:
        return _readonly(self._radii)

    @property
    def rx(self) -> float:
        """Largest cluster radius."""
        return self._rx

    @property
    def radius_idxmax(self) -> int:
        """First cluster with the largest radius."""
        return int(np.argmax(self._radii))

    @property
    def p_max(self) -> int:
        return self._p_max

    @property
    def p_max_total(self) -> int:
        """Number of expansion terms, i.e. columns of the coefficient matrix."""
        return term_count(self.d, self._p_max)

    @property
    def constant_series(self) -> np.ndarray:
        return _readonly(self._constant_series)

    @property
    def truncation_capped(self) -> bool:
        """True when the order search stopped at its cap with the error unmet."""
        return bool(self._truncation is not None and self._truncation.capped)

    @property
    def truncation_error(self) -> float:
        return self._truncation.error if self._truncation is not None else float("nan")

    def summary(self) -> ClusteringSummary:
        return ClusteringSummary(
            K=self._K,
            n_points=self.n,
            dimensions=self.d,
            n_nonempty=int(np.count_nonzero(self._num_points)),
            rx=self._rx,
            p_max=self._p_max,
            p_max_total=self.p_max_total,
            truncation_capped=self.truncation_capped,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n={self.n}, d={self.d}, K={self._K}, "
            f"bandwidth={self._bandwidth:g}, epsilon={self._epsilon:g}, "
            f"rx={self._rx:.4g}, p_max={self._p_max})"
        )


# ------------------------------------------------------------------
# Greedy farthest-point (Gonzalez) k-center clustering
# ------------------------------------------------------------------


def _sqdist(x: np.ndarray, y: np.ndarray) -> float:
    diff = x - y
    return float(diff @ diff)


class GreedyFarthestPointClustering(Clustering):
    """
    Farthest-point k-center clustering with triangle-inequality pruning.

    Seeds are added one at a time, each being the point farthest from its
    nearest existing seed. Members of every cluster are kept in a circular
    doubly linked list stored as two index arrays (cnext, cprev), so that
    when a new seed appears only clusters whose radius exceeds a quarter of
    the squared seed-to-seed distance are walked, and only their own members.

    The starting point is either given or drawn from the random generator;
    nothing else in the algorithm is random.

    Usage:
        clustering = GreedyFarthestPointClustering(X, K=8, bandwidth=0.5,
                                                   epsilon=1e-4, seed=0)
        C = clustering.compute_coefficients(np.ones(len(X)))
    """

    def __init__(
        self,
        points: Array2D,
        K: int,
        bandwidth: float,
        epsilon: Optional[float] = None,
        *,
        starting_index: Optional[int] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        truncation_upper_limit: Optional[int] = None,
    ):
        """
        Args:
            points: Source points of shape (n_points, d)
            K: Number of clusters, 1 <= K <= n_points
            bandwidth: Gaussian bandwidth h (> 0)
            epsilon: Target error in (0, 1)
            starting_index: First seed; drawn uniformly at random when None
            seed: Seed for the default random generator
            rng: Random generator to use instead of one built from seed
            truncation_upper_limit: Cap on the truncation-order search

        Raises:
            ValueError: If any argument is invalid, including a
                starting_index outside [0, n_points)
        """
        self._requested_start = starting_index
        self._starting_index = -1
        self._seeds = np.empty(0, dtype=np.intp)
        super().__init__(
            points,
            K,
            bandwidth,
            epsilon,
            seed=seed,
            rng=rng,
            truncation_upper_limit=truncation_upper_limit,
        )

    @property
    def starting_index(self) -> int:
        return self._starting_index

    @property
    def seeds(self) -> np.ndarray:
        """Point index of each cluster's seed, in creation order."""
        return _readonly(self._seeds)

    def _choose_start(self, rng: np.random.Generator) -> int:
        n = self.n
        start = self._requested_start
        if start is None:
            return int(rng.integers(0, n))
        if isinstance(start, bool) or not isinstance(start, Integral):
            raise ValueError(f"starting_index must be an integer, got {start!r}")
        if not 0 <= start < n:
            raise ValueError(f"starting_index ({start}) must be in [0, {n})")
        return int(start)

    def _partition(self, rng: np.random.Generator) -> None:
        X = self._source
        n, K = self.n, self._K
        indices = self._indices
        # squared distances until the final sqrt pass
        radii = self._radii

        seeds = np.zeros(K, dtype=np.intp)
        far2c = np.zeros(K, dtype=np.intp)

        nc = self._choose_start(rng)
        self._starting_index = nc
        seeds[0] = nc

        diffs = X - X[nc]
        dist = np.einsum("nd,nd->n", diffs, diffs)
        dist[nc] = 0.0

        positions = np.arange(n, dtype=np.intp)
        cnext = np.roll(positions, -1)
        cprev = np.roll(positions, 1)

        nc = int(np.argmax(dist))
        far2c[0] = nc
        radii[0] = dist[nc]

        n_seeds = 1
        for i in range(1, K):
            j_far = int(np.argmax(radii[:i]))
            if radii[j_far] <= 0.0:
                logger.debug(
                    "All points coincide with a seed after %d clusters; "
                    "leaving %d clusters empty", i, K - i,
                )
                break

            nc = int(far2c[j_far])
            seeds[i] = nc
            radii[i] = 0.0
            dist[nc] = 0.0
            indices[nc] = i
            far2c[i] = nc

            # unlink nc and make it a singleton list
            cnext[cprev[nc]] = cnext[nc]
            cprev[cnext[nc]] = cprev[nc]
            cnext[nc] = nc
            cprev[nc] = nc

            for j in range(i):
                ct_j = int(seeds[j])
                bound = _sqdist(X[ct_j], X[nc]) / 4
                if not bound < radii[j]:
                    continue

                radii[j] = 0.0
                far2c[j] = ct_j
                k = int(cnext[ct_j])
                while k != ct_j:
                    nextk = int(cnext[k])
                    dist_k = dist[k]
                    if bound < dist_k:
                        dd = _sqdist(X[k], X[nc])
                        if dd < dist_k:
                            dist[k] = dd
                            indices[k] = i
                            if radii[i] < dd:
                                radii[i] = dd
                                far2c[i] = k
                            # move k from cluster j's list to just after nc
                            cnext[cprev[k]] = nextk
                            cprev[nextk] = cprev[k]
                            cnext[k] = cnext[nc]
                            cprev[cnext[nc]] = k
                            cnext[nc] = k
                            cprev[k] = nc
                            k = nextk
                            continue
                    if radii[j] < dist_k:
                        radii[j] = dist_k
                        far2c[j] = k
                    k = nextk

            n_seeds += 1

        self._seeds = seeds[:n_seeds].copy()
        np.sqrt(radii, out=radii)
