from __future__ import annotations

import math

import numpy as np
import pytest

from ptg_nav.core.collision import CollisionBehavior
from ptg_nav.core.errors import ConfigurationError, NotInitializedError, PathIndexError
from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.core.params import GeneratorParameters, GeneratorSettings
from ptg_nav.families import sampled
from ptg_nav.families.base import PathFamily
from ptg_nav.families.cache import load_cached_paths
from ptg_nav.families.footprint import CircularFootprint
from ptg_nav.families.registry import ArcFamily, ClothoidFamily, family_from_config, make_family


def _arrays(fam, k):
    n = fam.step_count(k)
    poses = [fam.pose(k, i) for i in range(n)]
    x = np.array([p.x for p in poses])
    y = np.array([p.y for p in poses])
    phi = np.array([p.phi for p in poses])
    d = np.array([fam.distance(k, i) for i in range(n)])
    return x, y, phi, d


@pytest.fixture
def arc():
    fam = ArcFamily(robot_radius=0.5)
    fam.build(GeneratorParameters(21, 3.0), None, False)
    return fam


def test_families_satisfy_protocol():
    assert isinstance(ArcFamily(), PathFamily)
    assert isinstance(ClothoidFamily(), PathFamily)


def test_queries_before_build_fail():
    fam = ArcFamily()
    with pytest.raises(NotInitializedError):
        fam.step_count(0)
    with pytest.raises(NotInitializedError):
        fam.obstacle_distance(0, 1.0, 0.0)


def test_index_checked(arc):
    with pytest.raises(PathIndexError):
        arc.pose(21, 0)


def test_arc_middle_path_is_straight(arc):
    x, y, phi, d = _arrays(arc, 10)
    np.testing.assert_allclose(y, 0.0, atol=1e-12)
    np.testing.assert_allclose(phi, 0.0, atol=1e-12)
    np.testing.assert_allclose(x, d, atol=1e-12)
    assert d[0] == 0.0
    assert d[-1] == pytest.approx(3.0)


def test_arc_paths_mirror(arc):
    for k in range(10):
        xa, ya, pa, da = _arrays(arc, k)
        xb, yb, pb, db = _arrays(arc, 20 - k)
        np.testing.assert_allclose(xa, xb, atol=1e-9)
        np.testing.assert_allclose(ya, -yb, atol=1e-9)
        np.testing.assert_allclose(pa, -pb, atol=1e-9)
        np.testing.assert_allclose(da, db, atol=1e-12)


def test_arc_samples_lie_on_circle(arc):
    k = 20
    alpha = math.pi * (-1.0 + 2.0 * (k + 0.5) / 21)
    radius = 1.0 / (2.0 * alpha / math.pi)
    x, y, phi, d = _arrays(arc, k)
    np.testing.assert_allclose(np.hypot(x, y - radius), radius, atol=1e-9)
    np.testing.assert_allclose(phi, d / radius, atol=1e-9)


def test_tight_arcs_are_cut_at_half_turn(arc):
    x, y, phi, d = _arrays(arc, 20)
    assert np.all(np.abs(phi) <= math.pi)
    assert d[-1] < 3.0
    assert d[-1] > 1.5


def test_clothoid_heading_grows_quadratically():
    fam = ClothoidFamily(sharpness=1.0, max_curvature=2.0)
    fam.build(GeneratorParameters(21, 1.5), None, False)
    k = 20
    c = (-1.0 + 2.0 * (k + 0.5) / 21)
    x, y, phi, d = _arrays(fam, k)
    np.testing.assert_allclose(phi, 0.5 * c * d**2, atol=1e-9)
    x0, y0, phi0, _ = _arrays(fam, 10)
    np.testing.assert_allclose(y0, 0.0, atol=1e-12)


def test_clothoid_curvature_saturates():
    fam = ClothoidFamily(sharpness=10.0, max_curvature=1.0, max_heading=100.0)
    fam.build(GeneratorParameters(3, 4.0), None, False)
    _, _, phi, d = _arrays(fam, 2)
    slope = np.diff(phi)[-10:] / np.diff(d)[-10:]
    np.testing.assert_allclose(slope, 1.0, atol=1e-9)


# ----------------------------------------------------------------------
# footprint
# ----------------------------------------------------------------------

@pytest.fixture
def straight():
    xs = np.linspace(0.0, 3.0, 31)
    return xs, np.zeros_like(xs), xs.copy()


def test_footprint_first_contact(straight):
    fp = CircularFootprint(0.5)
    assert fp.collision_distance(*straight, 2.05, 0.0) == pytest.approx(1.6)
    assert fp.collision_distance(*straight, 0.0, 2.0) is None


def test_footprint_inside_obstacle_reports_exit_distance(straight):
    fp = CircularFootprint(0.5)
    assert fp.contains(-0.25, 0.0)
    # behind the robot: clear after 0.3 m, i.e. moving away
    assert fp.collision_distance(*straight, -0.25, 0.0) == pytest.approx(0.3)
    # ahead of the robot: clear only after driving through it
    assert fp.collision_distance(*straight, 0.15, 0.0) == pytest.approx(0.7)


def test_footprint_never_clear_returns_path_length():
    fp = CircularFootprint(0.5)
    xs = np.linspace(0.0, 0.2, 5)
    assert fp.collision_distance(xs, np.zeros(5), xs, 0.1, 0.0) == pytest.approx(0.2)


def test_footprint_radius_must_be_positive():
    with pytest.raises(ConfigurationError):
        CircularFootprint(0.0)


# ----------------------------------------------------------------------
# end to end with real geometry
# ----------------------------------------------------------------------

def _arc_generator(behavior):
    gen = TrajectoryGenerator(
        family=ArcFamily(robot_radius=0.5),
        params=GeneratorParameters(21, 3.0),
        settings=GeneratorSettings(collision_behavior=behavior),
    )
    gen.initialize()
    return gen


def test_back_away_from_obstacle_behind():
    gen = _arc_generator(CollisionBehavior.BACK_AWAY)
    tp = gen.compute_free_distances([[-0.25, 0.0]])
    assert tp[10] == gen.init_tp_obstacle_single(10)


def test_back_away_blocks_driving_through_obstacle_ahead():
    gen = _arc_generator(CollisionBehavior.BACK_AWAY)
    tp = gen.compute_free_distances([[0.15, 0.0]])
    assert tp[10] == 0.0


def test_stop_blocks_everything_with_inside_obstacle():
    gen = _arc_generator(CollisionBehavior.STOP)
    tp = gen.compute_free_distances([[-0.25, 0.0]])
    np.testing.assert_array_equal(tp, np.zeros(21))


def test_wall_ahead_limits_straight_path():
    gen = _arc_generator(CollisionBehavior.BACK_AWAY)
    wall = np.column_stack([np.full(41, 2.0), np.linspace(-2.0, 2.0, 41)])
    tp = gen.compute_free_distances(wall)
    assert tp[10] == pytest.approx(1.5, abs=0.06)
    assert np.all(tp <= gen.init_tp_obstacles())
    assert np.all(tp >= 0.0)


# ----------------------------------------------------------------------
# cache
# ----------------------------------------------------------------------

def test_cache_is_reused(tmp_path, monkeypatch):
    key = str(tmp_path / "cache" / "arc.npz")
    params = GeneratorParameters(11, 2.0)
    first = ArcFamily()
    first.build(params, key, True)
    assert (tmp_path / "cache" / "arc.npz").exists()

    def boom(*args, **kwargs):
        raise AssertionError("geometry should come from the cache")

    monkeypatch.setattr(sampled, "integrate_paths", boom)
    second = ArcFamily()
    second.build(params, key, True)
    for k in range(11):
        for a, b in zip(_arrays(first, k), _arrays(second, k)):
            np.testing.assert_array_equal(a, b)


def test_cache_mismatch_rebuilds(tmp_path, monkeypatch):
    key = str(tmp_path / "arc.npz")
    ArcFamily().build(GeneratorParameters(11, 2.0), key, False)

    calls = []
    real = sampled.integrate_paths

    def counting(*args, **kwargs):
        calls.append(1)
        return real(*args, **kwargs)

    monkeypatch.setattr(sampled, "integrate_paths", counting)
    ArcFamily().build(GeneratorParameters(11, 2.5), key, False)
    ArcFamily(robot_radius=0.4).build(GeneratorParameters(11, 2.5), key, False)
    assert len(calls) == 2


def test_corrupt_cache_is_ignored(tmp_path):
    key = tmp_path / "arc.npz"
    key.write_bytes(b"not a cache file")
    fam = ArcFamily()
    fam.build(GeneratorParameters(5, 1.0), str(key), False)
    assert fam.step_count(2) > 1


@pytest.mark.parametrize("content", [b"", b"PK\x03\x04truncated"])
def test_empty_or_broken_zip_cache_is_ignored(tmp_path, content):
    key = tmp_path / "arc.npz"
    key.write_bytes(content)
    gen = TrajectoryGenerator(family=ArcFamily(), params=GeneratorParameters(5, 1.0))
    gen.initialize(cache_key=str(key))
    assert gen.is_initialized()
    assert gen.get_path_step_count(2) > 1


def test_truncated_cache_is_ignored_and_rewritten(tmp_path):
    key = tmp_path / "arc.npz"
    params = GeneratorParameters(11, 2.0)
    ArcFamily().build(params, str(key), False)
    whole = key.read_bytes()
    key.write_bytes(whole[: len(whole) // 2])

    fam = ArcFamily()
    gen = TrajectoryGenerator(family=fam, params=params)
    gen.initialize(cache_key=str(key))
    assert gen.is_initialized()
    restored = load_cached_paths(key, fam.signature(params))
    assert restored is not None
    assert restored.path_count == 11


def test_cache_write_leaves_no_temp_files(tmp_path):
    key = tmp_path / "cache" / "arc.npz"
    ArcFamily().build(GeneratorParameters(5, 1.0), str(key), False)
    assert sorted(p.name for p in key.parent.iterdir()) == ["arc.npz"]


# ----------------------------------------------------------------------
# registry
# ----------------------------------------------------------------------

def test_make_family():
    assert make_family("ARC").kind == "arc"
    assert make_family("clothoid", sharpness=2.0).profile.sharpness == 2.0
    with pytest.raises(ConfigurationError):
        make_family("spline")
    with pytest.raises(ConfigurationError):
        make_family("arc", sharpness=2.0)


def test_family_variants_are_classes():
    arc = make_family("arc", robot_radius=0.4)
    assert isinstance(arc, ArcFamily)
    assert isinstance(arc, sampled.SampledPathFamily)
    assert not isinstance(arc, ClothoidFamily)
    assert isinstance(make_family("clothoid"), ClothoidFamily)
    assert arc.approx_robot_radius() == 0.4


def test_family_from_config():
    cfg = {"p": {"family": "clothoid", "robot_radius": 0.4, "max_steps": 500, "num_paths": 5}}
    fam = family_from_config(cfg, "p")
    assert fam.kind == "clothoid"
    assert fam.approx_robot_radius() == 0.4
    assert fam.max_steps == 500
    assert family_from_config({"p": {}}, "p").kind == "arc"
    with pytest.raises(ConfigurationError):
        family_from_config({"p": {"family": "arc", "robot_radius": "wide"}}, "p")
    with pytest.raises(ConfigurationError):
        family_from_config({}, "p")
