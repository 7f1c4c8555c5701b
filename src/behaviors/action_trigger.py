"""
Rate-limited trigger for the discrete action fired on a stable lock.
"""

import logging
from typing import Optional

import numpy as np

from core.config import TrackingConfig


class ActionTrigger:
    """
    Fires when the rate limit, distance and alignment gates all pass.

    Hit probability is alignment_quality * accuracy. accuracy starts at 10.0
    and is clamped to [0.1, 1.0] only once update_accuracy is called, so the
    first shots can have a probability above 1.
    """

    def __init__(self, config: TrackingConfig, rng: Optional[np.random.Generator] = None):
        """
        Args:
            config: Tracking configuration (fire rate, distance, accuracy gates)
            rng: Random generator for the hit draw (seed it for repeatable runs)
        """
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.logger = logging.getLogger("ActionTrigger")

        self.last_fire_time: Optional[float] = None
        self.consecutive_hits = 0
        self.accuracy = 10.0

    def can_fire(self, distance: float, alignment_quality: float, now: float) -> bool:
        """
        Check every gate without side effects.

        Args:
            distance: Distance to the target
            alignment_quality: Current alignment quality in [0, 1]
            now: Current time in seconds

        Returns:
            True if firing is allowed
        """
        # Rate limiting
        if self.last_fire_time is not None and now - self.last_fire_time < self.config.fire_rate_s:
            return False

        if distance > self.config.max_fire_distance:
            return False

        if alignment_quality < self.config.min_accuracy:
            return False

        return True

    def hit_chance(self, alignment_quality: float) -> float:
        return alignment_quality * self.accuracy

    def fire(self, distance: float, alignment_quality: float, now: float) -> bool:
        """
        Fire if allowed and draw the outcome.

        Returns:
            True on a hit, False on a miss or when a gate blocked firing
        """
        if not self.can_fire(distance, alignment_quality, now):
            return False

        self.last_fire_time = now

        hit = self.rng.random() < self.hit_chance(alignment_quality)
        if hit:
            self.consecutive_hits += 1
            self.logger.info(f"Hit ({self.consecutive_hits} consecutive)")
        else:
            self.consecutive_hits = 0
            self.logger.info(f"Miss (alignment: {alignment_quality * 100:.1f}%)")

        return hit

    def update_accuracy(self, recent_hit_rate: float):
        """Adapt the accuracy scalar to recent performance."""
        self.accuracy = max(0.1, min(1.0, recent_hit_rate))
