"""
Fixed-rate tracking and pointing loop.

Each tick selects the best target, filters and predicts its position,
drives the observer toward the blended aim point, scores the alignment and
fires the action trigger once the lock has held long enough.
"""

import asyncio
import logging
import math
import time
from typing import Any, Callable, Dict, Iterable, Optional, Union

import numpy as np

from behaviors.action_trigger import ActionTrigger
from behaviors.motion_controller import MotionController
from core.config import TrackingConfig
from core.performance import PerformanceMonitor
from core.vector import Vector3
from perception.motion_predictor import MotionPredictor
from perception.state_estimator import PositionEstimator
from perception.target_registry import TargetRegistry


# Alignment quality above which the lock timer accumulates
LOCK_QUALITY = 0.8
# Alignment quality above which a shot is counted as a hit
HIT_QUALITY = 0.9
# Target distance at which prediction gets its full blend weight
PREDICTION_BLEND_DISTANCE = 20.0


class ControlLoop:
    """
    Orchestrates the registry, estimators, predictor, controller and trigger.

    step() runs one tick with explicit timing and is what tests drive;
    start()/stop() run it periodically on the asyncio event loop.
    """

    def __init__(
        self,
        config: Optional[TrackingConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[np.random.Generator] = None,
        telemetry_sink: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        """
        Args:
            config: Tracking configuration (defaults if None)
            clock: Time source in seconds shared by all components
            rng: Random generator for the trigger's hit draw
            telemetry_sink: Optional callable receiving periodic stats snapshots
        """
        self.config = config or TrackingConfig()
        self.clock = clock
        self.telemetry_sink = telemetry_sink
        self.logger = logging.getLogger("ControlLoop")

        kalman = self.config.kalman
        self.estimator = PositionEstimator(kalman.r, kalman.q, kalman.process_noise)
        self.predictor = MotionPredictor()
        self.registry = TargetRegistry(self.config, clock=clock)
        self.controller = MotionController(self.config)
        self.trigger = ActionTrigger(self.config, rng=rng)
        self.performance = PerformanceMonitor(clock=clock)

        self.observer_position = Vector3.zero()
        self.alignment_quality = 0.0
        self.active_target_id: Optional[int] = None
        self.lock_duration = 0.0
        self.total_shots = 0
        self.total_hits = 0

        self.is_running = False
        self._task: Optional[asyncio.Task] = None
        self._last_estimate_time: Optional[float] = None
        self._last_status_time: Optional[float] = None

    # Feed interface

    def add_target(
        self,
        position: Union[Vector3, Iterable[float]],
        priority: int = 1,
        category: str = "head"
    ) -> int:
        """
        Register a target reported by the feed.

        Args:
            position: Vector3 or any (x, y, z) sequence
            priority: Non-negative importance, higher wins
            category: Free-form tag, e.g. "head" or "body"

        Returns:
            Target id
        """
        return self.registry.add(_as_vector(position), priority, category)

    def update_target(self, entity_id: int, position: Union[Vector3, Iterable[float]]):
        self.registry.update(entity_id, _as_vector(position))

    def remove_target(self, entity_id: int):
        self.registry.remove(entity_id)

    def apply_recoil(self, offset: Union[Vector3, Iterable[float]]):
        """Shift the observer to counter an external kick."""
        self.observer_position = self.controller.apply_compensation(
            self.observer_position, _as_vector(offset)
        )

    # Tick

    def step(self, dt: float, now: Optional[float] = None):
        """
        Run one tick.

        Args:
            dt: Seconds since the previous tick
            now: Current time (read from the clock if None)
        """
        self.performance.start_frame()
        if now is None:
            now = self.clock()
        dt = _safe_dt(dt)

        target = self.registry.select_best(self.observer_position)
        if target is None:
            self.reset_tracking()
            self.performance.end_frame()
            return
        self.active_target_id = target.entity_id

        # Estimator dt is measured between its own updates
        if self._last_estimate_time is None:
            estimate_dt = 0.0
        else:
            estimate_dt = _safe_dt(now - self._last_estimate_time)
        self._last_estimate_time = now

        self.predictor.add_sample(target.position, now)
        filtered_position = self.estimator.update(target.position, estimate_dt)
        predicted_position = self.predictor.predict(self.config.max_prediction_time_s)

        blend_factor = min(target.distance / PREDICTION_BLEND_DISTANCE, 1.0)
        final_target = filtered_position.lerp(
            predicted_position, blend_factor * self.config.prediction_weight
        )

        next_position = self.controller.compute_next(self.observer_position, final_target, dt)
        self.observer_position = next_position

        aim_error = next_position.distance_to(final_target)
        if self.config.snap_threshold > 0:
            self.alignment_quality = max(0.0, 1.0 - aim_error / self.config.snap_threshold)
        else:
            self.alignment_quality = 1.0 if aim_error == 0 else 0.0

        if self.alignment_quality > LOCK_QUALITY:
            self.lock_duration += dt
        else:
            self.lock_duration = 0.0

        if self.config.fire_on_lock and self.lock_duration > self.config.min_lock_time_s:
            if self.trigger.can_fire(target.distance, self.alignment_quality, now):
                self.trigger.fire(target.distance, self.alignment_quality, now)
                self.total_shots += 1
                if self.alignment_quality > HIT_QUALITY:
                    self.total_hits += 1

        self.registry.tick(dt)
        self.trigger.update_accuracy(self.hit_rate)

        self.performance.end_frame()
        self._maybe_report(now)

    def reset_tracking(self):
        """Drop filter state and lock bookkeeping when no target is tracked."""
        self.estimator.reset()
        self.predictor.reset()
        self.lock_duration = 0.0
        self.alignment_quality = 0.0
        self.active_target_id = None
        self._last_estimate_time = None

    @property
    def hit_rate(self) -> float:
        return self.total_hits / self.total_shots if self.total_shots > 0 else 0.0

    def get_stats(self) -> Dict[str, Any]:
        perf = self.performance.get_stats()
        return {
            'frame_rate': perf['fps'],
            'frame_time_ms': perf['frame_time_ms'],
            'alignment_quality': self.alignment_quality,
            'hit_rate': self.hit_rate,
            'lock_duration_s': self.lock_duration,
            'tracked_count': len(self.registry),
            'active_target_id': self.active_target_id,
        }

    def _maybe_report(self, now: float):
        if self._last_status_time is None:
            self._last_status_time = now
            return
        if now - self._last_status_time < self.config.status_interval_s:
            return
        self._last_status_time = now

        stats = self.get_stats()
        self.logger.info(
            f"FPS: {stats['frame_rate']:.1f} | "
            f"Alignment: {stats['alignment_quality'] * 100:.1f}% | "
            f"Hit rate: {stats['hit_rate'] * 100:.1f}% | "
            f"Targets: {stats['tracked_count']}"
        )
        if self.telemetry_sink is not None:
            self.telemetry_sink(stats)

    # Lifecycle

    async def run(self):
        """
        Tick at max_fps until stop() is called.

        The running flag is checked right before every tick body, so no tick
        runs after stop().
        """
        interval = self.config.tick_interval_s
        last_time = self.clock()

        try:
            while self.is_running:
                await asyncio.sleep(interval)
                if not self.is_running:
                    break

                now = self.clock()
                dt = now - last_time
                last_time = now
                self.step(dt, now)
        except Exception as e:
            self.logger.error(f"Control loop failed: {e}", exc_info=True)
            self.is_running = False

    def start(self) -> asyncio.Task:
        """
        Schedule the loop on the running event loop.

        Returns:
            The loop task (the existing one if already running)
        """
        if self.is_running and self._task is not None:
            return self._task

        self.is_running = True
        self._task = asyncio.get_running_loop().create_task(self.run())
        self.logger.info(f"Control loop started at {self.config.max_fps:g} FPS")
        return self._task

    def stop(self):
        if not self.is_running and self._task is None:
            return

        self.is_running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.logger.info("Control loop stopped")


def _as_vector(position: Union[Vector3, Iterable[float]]) -> Vector3:
    if isinstance(position, Vector3):
        return position
    return Vector3.from_iterable(position)


def _safe_dt(dt: float) -> float:
    if dt is None or not math.isfinite(dt) or dt < 0:
        return 0.0
    return float(dt)
