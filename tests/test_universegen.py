"""
Tests for universe generation
=============================
Determinism, uniqueness, hazard limits, naming hierarchy, connectivity,
configuration validation and the report/export helpers.
"""

import dataclasses
import json
from collections import deque

import networkx as nx
import pytest

import universegen
from hazards import HazardKind
from randsource import RandomSource
from universegen import (
    ConfigError,
    OrbitalKind,
    SystemConfig,
    UniverseConfig,
    UniverseGenerator,
    acceptance_checks,
    config_from_dict,
    config_to_dict,
    connect_systems,
    count_components,
    link_pairs,
    planet_suffix,
    roman_numeral,
    system_report,
    universe_tables,
    write_gexf,
)


def make_config(systems=4, extra_edges=2, **system_kwargs):
    return UniverseConfig(
        systems=systems,
        extra_edges=extra_edges,
        system=SystemConfig(**system_kwargs),
    )


def reachable(universe):
    """Ids reachable from the first system by BFS over links."""
    if not universe.systems:
        return set()
    by_id = {s.id: s for s in universe.systems}
    start = universe.systems[0].id
    seen = {start}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for other in by_id[node].links:
            if other not in seen:
                seen.add(other)
                queue.append(other)
    return seen


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

class TestDeterminism:

    def test_two_instances_identical(self):
        cfg = UniverseConfig()
        u1 = UniverseGenerator(123, cfg).generate()
        u2 = UniverseGenerator(123, cfg).generate()
        assert u1 == u2

    def test_repeated_generate_on_one_instance(self):
        gen = UniverseGenerator(77, make_config(nickname_chance=1.0))
        assert gen.generate() == gen.generate()

    def test_seed_123_first_star_name_is_stable(self):
        first = UniverseGenerator(123, UniverseConfig()).generate()
        second = UniverseGenerator(123, UniverseConfig()).generate()
        name = first.systems[0].stars[0].name
        assert name == second.systems[0].stars[0].name
        assert name and name[0].isupper()

    def test_different_seeds_differ(self):
        u1 = UniverseGenerator(1, UniverseConfig()).generate()
        u2 = UniverseGenerator(2, UniverseConfig()).generate()
        assert u1 != u2


# ---------------------------------------------------------------------------
# Uniqueness and hazards
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("seed", [0, 321, 555, 2 ** 40])
def test_names_and_nicknames_unique(seed):
    cfg = make_config(
        systems=8, star_count=(1, 3), planetoids=(2, 5),
        asteroids=(1, 2), moons_per_planetoid=(0, 3), nickname_chance=1.0,
    )
    universe = UniverseGenerator(seed, cfg).generate()

    names = universe.names()
    assert len(names) == len(set(names))
    nicks = universe.nicknames()
    assert nicks
    assert len(nicks) == len(set(nicks))


@pytest.mark.parametrize("cap", [0, 1, 2, 3])
def test_hazard_cap_and_distinct_kinds(cap):
    cfg = make_config(systems=6, max_hazards_per_body=cap)
    universe = UniverseGenerator(321, cfg).generate()
    for system in universe.systems:
        for body in system.bodies():
            kinds = body.hazard_kinds
            assert len(kinds) <= cap
            assert len(set(kinds)) == len(kinds)
            assert all(isinstance(k, HazardKind) for k in kinds)
            assert 0.0 <= body.probe_failure <= 0.95


def test_zero_cap_means_no_hazards():
    cfg = make_config(max_hazards_per_body=0)
    universe = UniverseGenerator(5, cfg).generate()
    assert all(not b.hazards for s in universe.systems for b in s.bodies())


def test_ids_unique_and_preorder():
    universe = UniverseGenerator(9, make_config(systems=5)).generate()
    ids = []
    for system in universe.systems:
        ids.append(system.id)
        ids.extend(star.id for star in system.stars)
        ids.extend(body.id for body in system.bodies())
    assert ids == list(range(len(ids)))


def test_only_planetoids_have_moons():
    cfg = make_config(systems=5, moons_per_planetoid=(1, 2))
    universe = UniverseGenerator(12, cfg).generate()
    for system in universe.systems:
        for body in system.orbitals:
            if body.kind is OrbitalKind.PLANETOID:
                assert body.moons
                assert all(m.kind is OrbitalKind.MOON and not m.moons for m in body.moons)
            else:
                assert body.kind is OrbitalKind.ASTEROID_BELT
                assert body.moons == ()


def test_cardinalities_and_distances_within_ranges():
    cfg = make_config(
        systems=10, star_count=(1, 2), planetoids=(2, 3), asteroids=(0, 1),
        moons_per_planetoid=(0, 2),
    )
    universe = UniverseGenerator(31, cfg).generate()
    sc = cfg.system
    for system in universe.systems:
        assert 1 <= len(system.stars) <= 2
        planetoids = [b for b in system.orbitals if b.kind is OrbitalKind.PLANETOID]
        belts = [b for b in system.orbitals if b.kind is OrbitalKind.ASTEROID_BELT]
        assert 2 <= len(planetoids) <= 3
        assert 0 <= len(belts) <= 1
        for p in planetoids:
            assert sc.planetoid_distance[0] <= p.distance <= sc.planetoid_distance[1]
            assert 0 <= len(p.moons) <= 2
            for m in p.moons:
                assert sc.moon_distance[0] <= m.distance <= sc.moon_distance[1]
        for b in belts:
            assert sc.belt_distance[0] <= b.distance <= sc.belt_distance[1]


def test_nickname_chance_zero_gives_no_nicknames():
    universe = UniverseGenerator(4, make_config(nickname_chance=0.0)).generate()
    assert universe.nicknames() == []


# ---------------------------------------------------------------------------
# Naming hierarchy
# ---------------------------------------------------------------------------

class TestNaming:

    def test_single_planet_and_moon(self):
        cfg = make_config(
            systems=1, extra_edges=0, star_count=(1, 1), planetoids=(1, 1),
            asteroids=(0, 0), moons_per_planetoid=(1, 1),
        )
        system = UniverseGenerator(111, cfg).generate().systems[0]
        primary = system.stars[0].name
        planet = system.orbitals[0]

        assert planet.name == f"{primary} b"
        assert planet.moons[0].name == f"{planet.name} I"

    def test_letters_and_numerals_increment(self):
        cfg = make_config(
            systems=2, star_count=(2, 2), planetoids=(3, 3), asteroids=(2, 2),
            moons_per_planetoid=(3, 3),
        )
        for system in UniverseGenerator(8, cfg).generate().systems:
            primary = system.stars[0].name
            planets = [b for b in system.orbitals if b.kind is OrbitalKind.PLANETOID]
            belts = [b for b in system.orbitals if b.kind is OrbitalKind.ASTEROID_BELT]
            assert [p.name for p in planets] == [f"{primary} {c}" for c in "bcd"]
            assert [b.name for b in belts] == [f"{primary} Belt I", f"{primary} Belt II"]
            for p in planets:
                assert [m.name for m in p.moons] == [f"{p.name} {r}" for r in ("I", "II", "III")]

    def test_many_planets_and_moons_stay_unique(self):
        cfg = make_config(
            systems=1, star_count=(1, 1), planetoids=(30, 30), asteroids=(12, 12),
            moons_per_planetoid=(12, 12),
        )
        universe = UniverseGenerator(3, cfg).generate()
        names = universe.names()
        assert len(names) == len(set(names))
        assert len(names) == 1 + 30 + 30 * 12 + 12

    def test_zero_stars_use_placeholder(self):
        cfg = make_config(systems=3, star_count=(0, 0), planetoids=(1, 1), asteroids=(1, 1))
        universe = UniverseGenerator(2, cfg).generate()
        for system in universe.systems:
            assert system.stars == ()
            assert system.primary_name == f"Unnamed {system.id}"
            assert system.orbitals[0].name == f"Unnamed {system.id} b"
        names = universe.names()
        assert len(names) == len(set(names))


def test_roman_numerals():
    assert [roman_numeral(i) for i in range(10)] == [
        "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X",
    ]
    assert roman_numeral(10) == "XI"
    assert roman_numeral(39) == "XL"
    assert len({roman_numeral(i) for i in range(200)}) == 200


def test_planet_suffixes():
    assert planet_suffix(0) == "b"
    assert planet_suffix(24) == "z"
    assert planet_suffix(25) == "27"
    assert len({planet_suffix(i) for i in range(100)}) == 100


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------

class TestConnect:

    @pytest.mark.parametrize("systems", [1, 2, 3, 10, 40])
    @pytest.mark.parametrize("extra_edges", [0, 5])
    def test_connected(self, systems, extra_edges):
        cfg = make_config(systems=systems, extra_edges=extra_edges)
        universe = UniverseGenerator(systems * 7 + extra_edges, cfg).generate()
        assert reachable(universe) == {s.id for s in universe.systems}
        assert count_components(universe) == 1

    def test_spanning_tree_has_n_minus_one_edges(self):
        universe = UniverseGenerator(6, make_config(systems=12, extra_edges=0)).generate()
        assert len(link_pairs(universe)) == 11

    def test_extra_edges_are_an_upper_bound(self):
        universe = UniverseGenerator(6, make_config(systems=12, extra_edges=5)).generate()
        assert 11 <= len(link_pairs(universe)) <= 16

    def test_links_symmetric_and_sorted(self):
        universe = UniverseGenerator(13, make_config(systems=15, extra_edges=6)).generate()
        by_id = {s.id: s for s in universe.systems}
        for system in universe.systems:
            assert list(system.links) == sorted(set(system.links))
            assert system.id not in system.links
            for other in system.links:
                assert system.id in by_id[other].links

    def test_zero_systems(self):
        universe = UniverseGenerator(1, make_config(systems=0, extra_edges=3)).generate()
        assert universe.systems == ()
        assert count_components(universe) == 0

    def test_single_system_draws_nothing(self):
        rng = RandomSource(10)
        assert connect_systems(rng, 1, 5) == [set()]
        assert rng.uniform_float() == RandomSource(10).uniform_float()

    def test_two_systems_single_edge(self):
        adj = connect_systems(RandomSource(10), 2, 10)
        assert adj == [{1}, {0}]


# ---------------------------------------------------------------------------
# Configuration validation
# ---------------------------------------------------------------------------

class TestConfig:

    @pytest.mark.parametrize("cfg", [
        make_config(systems=-1),
        make_config(extra_edges=-2),
        make_config(star_count=(3, 1)),
        make_config(planetoids=(-1, 2)),
        make_config(moons_per_planetoid=(0,)),
        make_config(asteroids=(0.5, 2)),
        make_config(belt_distance=(900, 300)),
        make_config(max_hazards_per_body=4),
        make_config(nickname_chance=1.5),
        make_config(nickname_chance=-0.1),
        make_config(nickname_chance=float("nan")),
    ])
    def test_invalid_config_rejected(self, cfg):
        with pytest.raises(ConfigError):
            UniverseGenerator(1, cfg)

    @pytest.mark.parametrize("seed", [-1, 2 ** 64, 1.5, True])
    def test_invalid_seed_rejected(self, seed):
        with pytest.raises(ConfigError):
            UniverseGenerator(seed, UniverseConfig())

    def test_rejected_before_any_draw(self, monkeypatch):
        def no_rng(seed):
            raise AssertionError("random source created for an invalid config")

        monkeypatch.setattr(universegen, "RandomSource", no_rng)
        gen_cfg = make_config(star_count=(2, 1))
        with pytest.raises(ConfigError):
            UniverseGenerator(1, gen_cfg).generate()

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)

    def test_dict_round_trip_through_json(self):
        cfg = make_config(systems=7, star_count=(2, 2), nickname_chance=0.75)
        data = json.loads(json.dumps(config_to_dict(cfg)))
        assert config_from_dict(data) == cfg

    def test_partial_dict_uses_defaults(self):
        cfg = config_from_dict({"systems": 9, "system": {"planetoids": [1, 1]}})
        assert cfg.systems == 9
        assert cfg.system.planetoids == (1, 1)
        assert cfg.system.star_count == SystemConfig().star_count

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigError):
            config_from_dict({"galaxies": 3})
        with pytest.raises(ConfigError):
            config_from_dict({"system": {"comets": [1, 2]}})

    def test_invalid_dict_values_rejected(self):
        with pytest.raises(ConfigError):
            config_from_dict({"system": {"nickname_chance": 3}})


# ---------------------------------------------------------------------------
# Report, tables, export, checks
# ---------------------------------------------------------------------------

@pytest.fixture
def universe():
    return UniverseGenerator(123, make_config(nickname_chance=0.5)).generate()


def test_system_report(universe):
    report = system_report(universe, 123)
    lines = report.splitlines()
    assert lines[0] == "Universe with 4 systems (seed 123)"
    assert sum(1 for l in lines if l.startswith("System ")) == 4
    first = universe.systems[0]
    assert f"  Star: {first.stars[0].name}" in report
    assert "probe_fail=" in report
    assert "[Planetoid]" in report


def test_universe_tables(universe):
    bodies, links = universe_tables(universe)
    assert list(bodies.columns) == universegen.BODY_COLUMNS
    assert len(bodies) == len(universe.names())
    assert bodies["id"].is_unique
    assert set(bodies["kind"]) <= {"Star", "Planetoid", "Asteroid Belt", "Moon"}

    moons = bodies[bodies["kind"] == "Moon"]
    planet_ids = set(bodies.loc[bodies["kind"] == "Planetoid", "id"])
    assert set(moons["parent_id"].dropna().astype(int)) <= planet_ids

    assert list(links.columns) == ["source", "target"]
    assert len(links) == len(link_pairs(universe))
    assert (links["source"] < links["target"]).all()


def test_write_gexf(universe, tmp_path):
    path = tmp_path / "graph.gexf"
    write_gexf(universe, str(path))
    G = nx.read_gexf(str(path))
    assert G.number_of_nodes() == len(universe.systems)
    assert G.number_of_edges() == len(link_pairs(universe))


def test_acceptance_checks_pass(universe):
    cfg = make_config(nickname_chance=0.5)
    results = acceptance_checks(universe, cfg)
    assert results
    assert all(ok for _, ok, _ in results)


def test_run_writes_outputs(tmp_path, capsys):
    out_dir = tmp_path / "out"
    gen = UniverseGenerator(42, make_config(systems=3))
    universe = gen.run(out_dir=str(out_dir))

    assert universe == gen.generate()
    for name in ("bodies.csv", "links.csv", "report.txt", "graph.gexf"):
        assert (out_dir / name).exists()
    assert (out_dir / "report.txt").read_text(encoding="utf-8") == system_report(universe, 42)

    captured = capsys.readouterr().out
    assert "ACCEPTANCE TESTS" in captured
    assert "FAIL" not in captured


def test_run_without_gexf(tmp_path):
    UniverseGenerator(42, make_config(systems=2)).run(out_dir=str(tmp_path), gexf=False)
    assert not (tmp_path / "graph.gexf").exists()


def test_entities_are_frozen(universe):
    with pytest.raises(dataclasses.FrozenInstanceError):
        universe.systems[0].stars[0].name = "Other"
