"""End-to-end tests for the World tick pipeline and snapshots."""

import json
import math

import pytest

from snake_arena.config import WorldConfig
from snake_arena.registry import ArenaFullError
from snake_arena.world import World


def _world(**overrides) -> World:
    overrides.setdefault("seed", 0)
    return World(WorldConfig(**overrides))


def _join_at(world, pid, x, z, angle=0.0):
    world.on_connect(pid)
    world.on_join(pid, pid)
    player = world.players[pid]
    player.body = [(x, z)] * 8
    player.angle = angle
    player.target_angle = angle
    return player


# ---------------------------------------------------------------------------
# Construction and collaborator hooks
# ---------------------------------------------------------------------------


class TestWorldInit:
    def test_food_pool_filled(self):
        world = _world(food_count=30)
        assert len(world.foods) == 30
        assert world.tick_count == 0

    def test_default_config(self):
        world = World()
        assert world.config.arena_size == 200.0
        assert len(world.foods) == 100


class TestHooks:
    def test_on_connect_returns_initial_view(self):
        world = _world(food_count=5)
        view = world.on_connect("a")
        assert view["id"] == "a"
        assert view["arena_size"] == 200.0
        assert len(view["foods"]) == 5
        assert view["players"]["a"]["alive"] is False
        assert view["players"]["a"]["body"] == []

    def test_initial_view_is_json_serializable(self):
        world = _world(food_count=5)
        world.on_connect("a")
        world.on_join("a", "alice")
        json.dumps(world.on_connect("b"))

    def test_on_connect_at_capacity(self):
        world = _world(max_players=1)
        world.on_connect("a")
        with pytest.raises(ArenaFullError):
            world.on_connect("b")

    def test_join_input_disconnect(self):
        world = _world(food_count=0)
        world.on_connect("a")
        assert world.on_join("a", "alice")
        assert world.on_input("a", 1.0)
        assert world.players["a"].target_angle == 1.0
        assert world.on_disconnect("a")
        assert "a" not in world.players

    def test_unknown_ids_are_noops(self):
        world = _world(food_count=0)
        assert not world.on_join("ghost", "x")
        assert not world.on_input("ghost", 1.0)
        assert not world.on_disconnect("ghost")
        world.tick(0.05)

    def test_invalid_input_rejected(self):
        world = _world(food_count=0)
        player = _join_at(world, "a", 0.0, 0.0)
        assert not world.on_input("a", math.nan)
        assert player.target_angle == 0.0

    @pytest.mark.parametrize("dt", [-0.1, math.nan, math.inf])
    def test_bad_dt_rejected(self, dt):
        world = _world(food_count=0)
        player = _join_at(world, "a", 0.0, 0.0)
        with pytest.raises(ValueError, match="dt"):
            world.tick(dt)
        assert player.alive
        assert world.tick_count == 0

    def test_huge_steering_rejected(self):
        world = _world(food_count=0)
        player = _join_at(world, "a", 0.0, 0.0)
        assert not world.on_input("a", 1e300)
        world.tick(0.05)
        assert player.target_angle == 0.0
        assert player.head == pytest.approx((0.0, 1.5))


# ---------------------------------------------------------------------------
# Tick scenarios
# ---------------------------------------------------------------------------


class TestTickScenarios:
    def test_single_player_moves_forward(self):
        world = _world(food_count=0)
        _join_at(world, "a", 0.0, 0.0)
        state = world.tick(1.0)
        assert state["tick"] == 1
        [record] = state["players"]
        assert record["x"] == pytest.approx(0.0)
        assert record["z"] == pytest.approx(30.0)

    def test_food_pickup(self):
        world = _world(food_count=1)
        world.foods.clear()
        food = world.registry.add_food(5.0, 5.0, 0x00FF00)
        player = _join_at(world, "a", 5.0, 5.5)
        state = world.tick(0.0)
        assert player.score == 1
        assert len(player.body) == 9
        assert food.id not in world.foods
        assert len(world.foods) == 1
        assert state["players"][0]["score"] == 1

    def test_boundary_death_drops_remains(self):
        world = _world(food_count=0)
        player = _join_at(world, "a", 99.5, 0.0, angle=math.pi / 2)
        state = world.tick(0.1)
        assert not player.alive
        assert state["players"] == []
        assert len(state["foods"]) == 4
        assert all(f["color"] == player.color for f in state["foods"])
        assert world.last_deaths == ["a"]

    def test_dead_player_absent_until_rejoin(self):
        world = _world(food_count=0)
        _join_at(world, "a", 99.5, 0.0, angle=math.pi / 2)
        world.tick(0.1)
        assert world.tick(0.05)["players"] == []
        assert not world.on_input("a", 1.0)
        world.on_join("a", "again")
        ids = [p["id"] for p in world.tick(0.05)["players"]]
        assert ids == ["a"]

    def test_collision_between_players(self):
        world = _world(food_count=0, speed=1.0)
        _join_at(world, "a", 0.0, 0.0)
        crosser = _join_at(world, "b", 0.0, 0.0, angle=math.pi / 2)
        # b lies across a's path and slides along +x.
        crosser.body = [(6.0 - 1.5 * i, 1.5) for i in range(9)]
        world.tick(0.5)
        assert not world.players["a"].alive
        assert world.players["b"].alive

    def test_food_pool_stays_at_target(self):
        world = _world(food_count=50, arena_size=40.0, speed=10.0)
        world.on_connect("a")
        world.on_join("a")
        for i in range(100):
            world.on_input("a", i * 0.3)
            world.tick(0.05)
            assert len(world.foods) >= 50

    def test_heading_change_bounded_per_tick(self):
        world = _world(food_count=0, speed=1.0)
        player = _join_at(world, "a", 0.0, 0.0)
        for i in range(40):
            world.on_input("a", (-1) ** i * 3.0)
            before = player.angle
            world.tick(0.05)
            delta = math.remainder(player.angle - before, 2 * math.pi)
            assert abs(delta) <= 5.0 * 0.05 + 1e-9

    def test_fault_in_one_player_does_not_abort_tick(self):
        world = _world(food_count=0)
        broken = _join_at(world, "a", 0.0, 0.0)
        broken.body = []
        healthy = _join_at(world, "b", 20.0, 0.0)
        state = world.tick(0.05)
        assert not broken.alive
        assert healthy.alive
        assert [p["id"] for p in state["players"]] == ["b"]

    def test_corrupt_player_leaves_no_non_finite_food(self):
        world = _world(food_count=5)
        broken = _join_at(world, "a", 0.0, 0.0)
        broken.body = [(math.nan, 0.0)] * 8
        state = world.tick(0.05)
        assert not broken.alive
        for _ in range(2):
            for food in state["foods"]:
                assert math.isfinite(food["x"]) and math.isfinite(food["z"])
            json.dumps(state, allow_nan=False)
            state = world.tick(0.05)


class TestSnapshot:
    def test_player_record_fields(self):
        world = _world(food_count=3)
        _join_at(world, "a", 1.0, 2.0)
        state = world.get_state()
        assert set(state) == {"tick", "players", "foods"}
        assert set(state["players"][0]) == {"id", "x", "z", "angle", "color", "score"}
        assert set(state["foods"][0]) == {"id", "x", "z", "color"}

    def test_dormant_players_omitted(self):
        world = _world(food_count=0)
        world.on_connect("a")
        assert world.tick(0.05)["players"] == []

    def test_players_sorted_by_id(self):
        world = _world(food_count=0)
        _join_at(world, "c", 40.0, 0.0)
        _join_at(world, "a", -40.0, 0.0)
        _join_at(world, "b", 0.0, 0.0)
        ids = [p["id"] for p in world.tick(0.05)["players"]]
        assert ids == ["a", "b", "c"]

    def test_get_state_does_not_advance(self):
        world = _world(food_count=0)
        world.get_state()
        assert world.tick_count == 0
