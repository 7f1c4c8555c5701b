"""
Candidate target bookkeeping and selection.

The registry owns every target reported by the external feed, scores the
live ones against the observer position each cycle, and picks one with
switch hysteresis so near-equal candidates do not cause flicker.
"""

import dataclasses
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from core.config import TrackingConfig
from core.vector import Vector3


@dataclass
class TrackedEntity:
    """A candidate target reported by the feed."""
    entity_id: int
    position: Vector3
    priority: int
    category: str
    last_seen: float
    visible: bool = True
    health: float = 100.0
    distance: float = 0.0  # Recomputed on every selection pass


class TargetRegistry:
    """
    Owns candidate targets and selects the best one per cycle.

    Score = priority * 100
          + max(0, 1 - distance / max_target_distance) * 50
          + 30 if category is preferred and head-lock-only mode is on
          + 20 for the current selection

    Capacity: when more than max_targets are held, the lowest-priority target
    is evicted (ties: oldest last_seen, then earliest added).
    """

    def __init__(self, config: TrackingConfig, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            config: Tracking configuration
            clock: Time source in seconds, used for liveness checks
        """
        self.config = config
        self.clock = clock
        self.logger = logging.getLogger("TargetRegistry")

        self._targets: Dict[int, TrackedEntity] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

        self.current_id: Optional[int] = None
        self.switch_cooldown = 0.0

    def add(self, position: Vector3, priority: int = 1, category: str = "head") -> int:
        """
        Register a new target.

        Args:
            position: Initial position
            priority: Non-negative importance, higher wins
            category: Free-form tag such as "head" or "body"

        Returns:
            Id of the new target
        """
        if priority < 0:
            raise ValueError(f"Invalid priority: {priority}. Must be >= 0")

        with self._lock:
            entity_id = next(self._ids)
            self._targets[entity_id] = TrackedEntity(
                entity_id=entity_id,
                position=position,
                priority=int(priority),
                category=category,
                last_seen=self.clock()
            )
            while len(self._targets) > self.config.max_targets:
                self._evict_lowest_priority()

        return entity_id

    def _evict_lowest_priority(self):
        # Dict order is insertion order, so min() keeps the earliest added on ties
        victim = min(self._targets.values(), key=lambda t: (t.priority, t.last_seen))
        del self._targets[victim.entity_id]
        if self.current_id == victim.entity_id:
            self.current_id = None
        self.logger.warning(
            f"Capacity {self.config.max_targets} exceeded, evicted target "
            f"{victim.entity_id} (priority {victim.priority})"
        )

    def update(self, entity_id: int, position: Vector3):
        """Refresh a target's position; unknown ids are ignored."""
        with self._lock:
            target = self._targets.get(entity_id)
            if target is None:
                return
            target.position = position
            target.last_seen = self.clock()
            target.visible = True

    def remove(self, entity_id: int):
        with self._lock:
            self._targets.pop(entity_id, None)
            if self.current_id == entity_id:
                self.current_id = None

    def mark_hidden(self, entity_id: int):
        with self._lock:
            target = self._targets.get(entity_id)
            if target is not None:
                target.visible = False

    def set_health(self, entity_id: int, health: float):
        with self._lock:
            target = self._targets.get(entity_id)
            if target is not None:
                target.health = health

    def get(self, entity_id: int) -> Optional[TrackedEntity]:
        """Snapshot of a target, or None if unknown."""
        with self._lock:
            target = self._targets.get(entity_id)
            return dataclasses.replace(target) if target is not None else None

    def entities(self) -> List[TrackedEntity]:
        with self._lock:
            return [dataclasses.replace(t) for t in self._targets.values()]

    def __len__(self) -> int:
        return len(self._targets)

    def _is_valid(self, target: TrackedEntity, now: float) -> bool:
        return (
            target.visible and
            now - target.last_seen < self.config.target_timeout_s and
            target.health > 0
        )

    def score(self, target: TrackedEntity) -> float:
        """Selection score of a target using its last computed distance."""
        score = target.priority * 100.0

        # Closer is better
        max_distance = self.config.max_target_distance
        if max_distance > 0:
            distance_factor = max(0.0, 1.0 - target.distance / max_distance)
        else:
            distance_factor = 0.0
        score += distance_factor * 50.0

        if self.config.head_lock_only and target.category == self.config.preferred_category:
            score += 30.0

        # Sticky targeting
        if self.current_id is not None and self.current_id == target.entity_id:
            score += 20.0

        return score

    def select_best(self, observer_position: Vector3) -> Optional[TrackedEntity]:
        """
        Pick the target to track this cycle.

        Args:
            observer_position: Current aim point of the observer

        Returns:
            Snapshot of the selected target, or None if nothing is valid
        """
        with self._lock:
            now = self.clock()
            valid = [t for t in self._targets.values() if self._is_valid(t, now)]
            if not valid:
                return None

            for target in valid:
                target.distance = observer_position.distance_to(target.position)

            best = valid[0]
            best_score = self.score(best)
            for target in valid[1:]:
                score = self.score(target)
                if score > best_score:
                    best, best_score = target, score

            current = None
            if self.current_id is not None:
                current = next((t for t in valid if t.entity_id == self.current_id), None)

            if current is not None and current.entity_id != best.entity_id:
                if self.switch_cooldown > 0 and not self.config.instant_switch:
                    return dataclasses.replace(current)
                self.logger.info(
                    f"Switching target {current.entity_id} -> {best.entity_id} "
                    f"(score {best_score:.1f})"
                )
                self.switch_cooldown = self.config.switch_delay_s

            self.current_id = best.entity_id
            return dataclasses.replace(best)

    def tick(self, delta_time: float):
        """Advance the switch cooldown, clamped at zero."""
        if self.switch_cooldown > 0:
            self.switch_cooldown = max(0.0, self.switch_cooldown - delta_time)
