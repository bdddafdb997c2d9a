from __future__ import annotations

from typing import Callable, Optional

import pytest

from ptg_nav.core.collision import CollisionBehavior
from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.core.params import GeneratorParameters, GeneratorSettings
from ptg_nav.families.base import Pose2D


class StubFamily:
    """
    Straight paths along +x. Path k is length_fn(k) meters long, sampled
    with steps_fn(k) evenly spaced steps. Counts build/release calls.
    """
    def __init__(
        self,
        radius: float = 0.5,
        length_fn: Callable[[int], float] = lambda k: 2.0 + k,
        steps_fn: Callable[[int], int] = lambda k: 11,
        candidate_fn: Optional[Callable[[int, float, float], Optional[float]]] = None,
        fail_build: bool = False,
    ) -> None:
        self.radius = radius
        self.length_fn = length_fn
        self.steps_fn = steps_fn
        self.candidate_fn = candidate_fn
        self.fail_build = fail_build
        self.build_calls = 0
        self.release_calls = 0
        self.cache_keys: list = []

    def build(self, params, cache_key, verbose):
        self.build_calls += 1
        self.cache_keys.append(cache_key)
        if self.fail_build:
            raise OSError("geometry cache unavailable")

    def release(self):
        self.release_calls += 1

    def step_count(self, k):
        return self.steps_fn(k)

    def distance(self, k, step):
        return self.length_fn(k) * step / (self.steps_fn(k) - 1)

    def pose(self, k, step):
        return Pose2D(x=self.distance(k, step), y=0.0, phi=0.0)

    def is_point_inside_robot_shape(self, x, y):
        return x * x + y * y < self.radius * self.radius

    def approx_robot_radius(self):
        return self.radius

    def obstacle_distance(self, k, x, y):
        if self.candidate_fn is not None:
            return self.candidate_fn(k, x, y)
        if abs(y) >= self.radius or x < 0.0:
            return None
        d = x - self.radius
        if d > self.length_fn(k):
            return None
        return d

    def supports_vel_cmd_nop(self):
        return False

    def max_time_in_vel_cmd_nop(self, k):
        return 0.0


@pytest.fixture
def stub_family_cls():
    return StubFamily


@pytest.fixture
def make_generator():
    """
    Build a stub-backed generator: 5 paths of lengths 2..6 m, refDistance
    4.5 m, so baselines are [2, 3, 4, 4.5, 4.5].
    """
    def _make(
        behavior: CollisionBehavior = CollisionBehavior.BACK_AWAY,
        initialize: bool = True,
        **stub_kwargs,
    ) -> TrajectoryGenerator:
        family = StubFamily(**stub_kwargs)
        gen = TrajectoryGenerator(
            family=family,
            params=GeneratorParameters(path_count=5, ref_distance=4.5, score_priority=1.0),
            settings=GeneratorSettings(collision_behavior=behavior),
            name="stub",
        )
        if initialize:
            gen.initialize()
        return gen

    return _make
