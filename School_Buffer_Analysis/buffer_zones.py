"""
Concentric buffer ring construction.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Build the ordered sequence of ring zones around a centre point
and classify each ring by risk.

Key Algorithm:
1. ring_count = ceil(total_radius / zone_width)
2. radius_i = min(i * zone_width, total_radius); the last ring is clamped to
   the exact total so a non-dividing width never overshoots
3. Geodesic buffer of radius_i around the centre
4. Risk by rank: ratio = i / ring_count, compared with the policy thresholds.
   More, thinner rings keep the same 60% / 20% / 20% split
5. fill_opacity = opacity_base - ratio * opacity_slope (display only)

Zones are returned innermost first (id 1).

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
from typing import List, Optional

from .config_types import AppConfig, BufferConfig, RiskPolicyConfig, ZoneStyleConfig
from .geometry.geodesic import geodesic_buffer
from .models.data_models import LatLng, RiskLevel, Zone

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# 🚦 RISK POLICY
# ═══════════════════════════════════════════════════════════════════════════════


def calculate_zone_count(config: BufferConfig) -> int:
    """Number of rings needed to reach the total radius."""
    return math.ceil(config.total_radius_km / config.zone_width_km)


def calculate_risk_level(
    zone_index: int, zone_count: int, policy: Optional[RiskPolicyConfig] = None
) -> RiskLevel:
    """
    Classify a ring by its rank position.

    Args:
        zone_index: 1-based ring index
        zone_count: Total number of rings
        policy: Thresholds (default: 0.6 / 0.8)

    Returns:
        HIGH when ratio <= high_max_ratio, MEDIUM when ratio <= medium_max_ratio,
        LOW otherwise
    """
    policy = policy or RiskPolicyConfig()
    ratio = zone_index / zone_count
    if ratio <= policy.high_max_ratio:
        return RiskLevel.HIGH
    if ratio <= policy.medium_max_ratio:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_fill_opacity(
    zone_index: int, zone_count: int, policy: Optional[RiskPolicyConfig] = None
) -> float:
    """Display opacity, decreasing linearly with rank and independent of risk."""
    policy = policy or RiskPolicyConfig()
    return policy.opacity_base - (zone_index / zone_count) * policy.opacity_slope


# ═══════════════════════════════════════════════════════════════════════════════
# ⭕ RING ZONE BUILDER
# ═══════════════════════════════════════════════════════════════════════════════


class RingZoneBuilder:
    """
    Builds risk-classified concentric zones around a centre point.

    The builder holds only immutable policy; build() is a pure function of
    its arguments and may be called concurrently.
    """

    def __init__(
        self,
        risk_policy: Optional[RiskPolicyConfig] = None,
        zone_style: Optional[ZoneStyleConfig] = None,
    ) -> None:
        self.risk_policy = risk_policy or RiskPolicyConfig()
        self.zone_style = zone_style or ZoneStyleConfig()

    @classmethod
    def from_app_config(cls, app_config: AppConfig) -> "RingZoneBuilder":
        """Create a builder from the master configuration."""
        return cls(risk_policy=app_config.risk_policy, zone_style=app_config.zone_style)

    def risk_color(self, risk_level: RiskLevel) -> str:
        """Display colour for a risk level."""
        return self.zone_style.risk_colors[risk_level.value]

    def risk_label(self, risk_level: RiskLevel) -> str:
        """Display label for a risk level."""
        return self.zone_style.risk_labels[risk_level.value]

    def build(self, center: LatLng, config: Optional[BufferConfig] = None) -> List[Zone]:
        """
        Build zones from the centre outward.

        Args:
            center: Analysis centre
            config: Ring layout (default: 5 km total, 1 km width)

        Returns:
            Zones ordered by ascending radius, ids starting at 1

        Raises:
            ValueError: If total radius or zone width is not positive
        """
        config = config or BufferConfig()
        config.validate()

        zone_count = calculate_zone_count(config)
        logger.debug(
            f"📐 Building {zone_count} zones around ({center.lat:.5f}, {center.lng:.5f}): "
            f"total={config.total_radius_km} km, width={config.zone_width_km} km"
        )

        zones: List[Zone] = []
        for i in range(1, zone_count + 1):
            radius_km = min(i * config.zone_width_km, config.total_radius_km)
            risk_level = calculate_risk_level(i, zone_count, self.risk_policy)

            zones.append(
                Zone(
                    id=i,
                    radius_km=radius_km,
                    risk_level=risk_level,
                    color=self.risk_color(risk_level),
                    fill_opacity=calculate_fill_opacity(i, zone_count, self.risk_policy),
                    buffer_polygon=geodesic_buffer(
                        center, radius_km, config.buffer_segments
                    ),
                )
            )

        return zones


def create_buffer_zones(
    center: LatLng, config: Optional[BufferConfig] = None
) -> List[Zone]:
    """Build zones with the default risk policy and style."""
    return RingZoneBuilder().build(center, config)
