"""
Iterative collision relaxation for proportionally sized bubble markers.

Positions live on the [0, 10] x [0, 10] index plane (x = CAGR index,
y = market share index). Marker radii are defined in pixels and mapped into
data units with a single pixel-to-data factor derived from the observed data
range and the notional plot size.

Positions are clamped to the plane, so a clean arrangement does not always
exist: when the markers are spread across the whole plane the pixel-to-data
factor makes each of them a sizeable share of the domain, and a few large
markers can need more room than the square offers (three maximum-size
markers need 10.67 units between each pair, while three points in the
square are at best 10.35 apart). Such layouts stop at the iteration
ceiling with ``converged=False`` and a positive ``residual_overlap``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class BubbleEntity:
    """One bubble on the attractiveness chart."""

    label: str
    cagr_index: float
    market_share_index: float
    incremental_opportunity: float
    # Set when a default or hash value stood in for missing data
    opportunity_is_synthetic: bool = False
    cagr_is_default: bool = False
    share_is_default: bool = False


@dataclass(frozen=True)
class BubbleLayoutConfig:
    plot_width: float = 450.0
    plot_height: float = 300.0
    min_marker_size: float = 30.0
    max_marker_size: float = 200.0
    uniform_marker_size: float = 100.0
    min_separation: float = 1.6
    damping: float = 0.5
    coincidence_push: float = 0.5
    coincidence_epsilon: float = 0.001
    overlap_tolerance: float = 0.0001
    max_iterations: int = 200
    domain_min: float = 0.0
    domain_max: float = 10.0
    seed: int = 42

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> BubbleLayoutConfig:
        """Build from the ``bubble_layout`` section of the dashboard config."""
        section = (config or {}).get("bubble_layout", {})
        values = {}
        for f in fields(cls):
            if f.name in section:
                values[f.name] = type(f.default)(section[f.name])
        return cls(**values)


@dataclass
class BubbleLayout:
    entities: list[BubbleEntity]
    radii: list[float] = field(default_factory=list)  # pixels
    pixel_to_data: float = 1.0
    iterations: int = 0
    converged: bool = True
    # Largest remaining pair overlap, in data units
    residual_overlap: float = 0.0


class BubbleLayoutResolver:
    """
    Pushes overlapping bubbles apart until every pair is separated by at
    least ``(r1 + r2) * min_separation`` or the iteration ceiling is reached.
    """

    def __init__(self, config: BubbleLayoutConfig | None = None) -> None:
        self.config = config if config is not None else BubbleLayoutConfig()

    def marker_sizes(self, opportunities: list[float]) -> np.ndarray:
        """Marker diameters in pixels, linearly interpolated over the opportunity range."""
        cfg = self.config
        values = np.asarray(opportunities, dtype=float)
        if values.size == 0:
            return values
        low, high = float(values.min()), float(values.max())
        if high == low:
            return np.full(values.size, cfg.uniform_marker_size)
        span = cfg.max_marker_size - cfg.min_marker_size
        return cfg.min_marker_size + (values - low) / (high - low) * span

    def pixel_to_data(self, xs: np.ndarray, ys: np.ndarray) -> float:
        cfg = self.config
        x_range = float(xs.max() - xs.min()) if xs.size else 0.0
        y_range = float(ys.max() - ys.min()) if ys.size else 0.0
        return max((x_range or 1.0) / cfg.plot_width, (y_range or 1.0) / cfg.plot_height)

    def _clamp(self, value: float) -> float:
        return min(self.config.domain_max, max(self.config.domain_min, value))

    def layout(self, entities: list[BubbleEntity]) -> BubbleLayout:
        """Resolve positions and report how the relaxation went."""
        cfg = self.config
        n = len(entities)
        if n == 0:
            return BubbleLayout(entities=[])

        xs = np.array([e.cagr_index for e in entities], dtype=float)
        ys = np.array([e.market_share_index for e in entities], dtype=float)
        sizes = self.marker_sizes([e.incremental_opportunity for e in entities])
        radii = sizes / 2.0
        p2d = self.pixel_to_data(xs, ys)
        # Fresh generator per call keeps the coincidence push reproducible
        rng = np.random.default_rng(cfg.seed)

        converged = n < 2
        iterations = 0
        while not converged and iterations < cfg.max_iterations:
            iterations += 1
            has_overlap = False
            for i in range(n):
                for j in range(i + 1, n):
                    dx = xs[j] - xs[i]
                    dy = ys[j] - ys[i]
                    distance = math.hypot(dx, dy)

                    if distance <= cfg.coincidence_epsilon:
                        has_overlap = True
                        angle = rng.uniform(0.0, 2.0 * math.pi)
                        avg_radius = (sizes[i] + sizes[j]) / 4.0 * p2d
                        push = avg_radius * cfg.min_separation * cfg.coincidence_push
                        xs[i] -= math.cos(angle) * push
                        ys[i] -= math.sin(angle) * push
                        xs[j] += math.cos(angle) * push
                        ys[j] += math.sin(angle) * push
                    else:
                        required = (radii[i] + radii[j]) * p2d * cfg.min_separation
                        overlap = required - distance
                        if overlap <= cfg.overlap_tolerance:
                            continue
                        has_overlap = True
                        move = overlap * cfg.damping
                        total = sizes[i] + sizes[j]
                        # The smaller bubble takes the larger share of the move
                        ratio_i = sizes[j] / total if total > 0 else 0.5
                        ratio_j = sizes[i] / total if total > 0 else 0.5
                        ux, uy = dx / distance, dy / distance
                        xs[i] -= ux * move * ratio_i
                        ys[i] -= uy * move * ratio_i
                        xs[j] += ux * move * ratio_j
                        ys[j] += uy * move * ratio_j

                    xs[i], ys[i] = self._clamp(xs[i]), self._clamp(ys[i])
                    xs[j], ys[j] = self._clamp(xs[j]), self._clamp(ys[j])

            if not has_overlap:
                converged = True

        resolved = [
            replace(entity, cagr_index=float(xs[k]), market_share_index=float(ys[k]))
            for k, entity in enumerate(entities)
        ]
        radii_px = [float(r) for r in radii]
        overlaps = self._pair_overlaps(
            [e.cagr_index for e in resolved],
            [e.market_share_index for e in resolved],
            radii_px,
            p2d,
        )
        residual = max((overlap for _, _, overlap in overlaps), default=0.0)
        residual = max(residual, 0.0)
        # Judged on the final positions, so the last pass's moves count
        converged = residual <= cfg.overlap_tolerance

        if not converged:
            logger.warning(
                "Bubble layout stopped after %d iterations with overlaps remaining "
                "(%d bubbles, residual overlap %.3f)",
                iterations,
                n,
                residual,
            )
        else:
            logger.debug("Bubble layout converged after %d iterations", iterations)

        return BubbleLayout(
            entities=resolved,
            radii=radii_px,
            pixel_to_data=p2d,
            iterations=iterations,
            converged=converged,
            residual_overlap=residual,
        )

    def resolve(self, entities: list[BubbleEntity]) -> list[BubbleEntity]:
        """Adjusted copies of ``entities``; labels and opportunities are unchanged."""
        return self.layout(entities).entities

    def _pair_overlaps(
        self, xs: list[float], ys: list[float], radii: list[float], p2d: float
    ) -> list[tuple[int, int, float]]:
        overlaps = []
        for i in range(len(xs)):
            for j in range(i + 1, len(xs)):
                distance = math.hypot(xs[j] - xs[i], ys[j] - ys[i])
                required = (radii[i] + radii[j]) * p2d * self.config.min_separation
                overlaps.append((i, j, required - distance))
        return overlaps

    def overlapping_pairs(self, layout: BubbleLayout) -> list[tuple[str, str]]:
        """Label pairs still closer than the minimum separation."""
        placed = layout.entities
        overlaps = self._pair_overlaps(
            [e.cagr_index for e in placed],
            [e.market_share_index for e in placed],
            layout.radii,
            layout.pixel_to_data,
        )
        return [
            (placed[i].label, placed[j].label)
            for i, j, overlap in overlaps
            if overlap > self.config.overlap_tolerance
        ]
