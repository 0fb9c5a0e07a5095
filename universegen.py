"""
universegen.py
==============
Core procedural universe generator.

Builds a deterministic universe from one integer seed and a
``UniverseConfig``: a set of star systems, each holding stars and a
hierarchy of orbital bodies (planetoids with their moons, asteroid belts),
every body carrying 0..N environmental hazards, every entity named uniquely
and optionally nicknamed.  The systems are then linked into a connected
graph (random spanning tree plus a few extra edges).

Guarantees
----------
1. Determinism:  the same (seed, config) always yields the same tree –
   ids, names, nicknames, hazards, distances and links.
2. Uniqueness:   every star/body name is unique across the universe; every
   nickname is unique across the universe (separate namespace).
3. Hazards:      no body holds two hazards of the same kind, and never more
   than ``max_hazards_per_body``.
4. Connectivity: every system is reachable from every other one.

Naming
------
  • star       – generated, e.g. "Kraearr"
  • planetoid  – "<primary star> b", "<primary star> c", …
  • moon       – "<planetoid name> I", "<planetoid name> II", …
  • belt       – "<primary star> Belt I", …

Usage (importable)
------------------
    from universegen import UniverseConfig, UniverseGenerator, universe_tables
    gen = UniverseGenerator(123, UniverseConfig())
    universe = gen.generate()
    bodies_df, links_df = universe_tables(universe)

Usage (script, uses all defaults)
----------------------------------
    python universegen.py
"""

from __future__ import annotations

import dataclasses
import enum
import math
import os
import time
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import networkx as nx
import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from hazards import Hazard, HazardKind, hazard_label, probe_failure, yield_multiplier
from randsource import SEED_MAX, RandomSource
from starnames import generate_nickname, generate_star_name

IntRange = Tuple[int, int]   # inclusive (lo, hi)

HAZARD_KINDS: Tuple[HazardKind, ...] = tuple(HazardKind)


class ConfigError(ValueError):
    """Raised when a configuration or seed is rejected before generation."""


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class SystemConfig:
    """Per-system cardinalities and probabilities.

    All ranges are inclusive ``(lo, hi)`` pairs.  Distances share an
    arbitrary unit; only their relative size matters.
    """

    # ---- cardinalities ----
    star_count: IntRange = (1, 3)
    planetoids: IntRange = (2, 4)
    asteroids: IntRange = (1, 3)
    moons_per_planetoid: IntRange = (0, 2)

    # ---- hazards ----
    max_hazards_per_body: int = 2   # at most len(HazardKind)

    # ---- nicknames ----
    nickname_chance: float = 0.2    # probability [0, 1] that an entity tries for a nickname

    # ---- orbital distances ----
    planetoid_distance: IntRange = (40, 400)
    moon_distance: IntRange = (1, 20)
    belt_distance: IntRange = (300, 900)


@dataclasses.dataclass
class UniverseConfig:
    """All tunable parameters for universe generation."""

    systems: int = 4        # number of star systems
    extra_edges: int = 2    # extra link attempts on top of the spanning tree
    system: SystemConfig = dataclasses.field(default_factory=SystemConfig)


_RANGE_FIELDS = (
    "star_count", "planetoids", "asteroids", "moons_per_planetoid",
    "planetoid_distance", "moon_distance", "belt_distance",
)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _check_count(name: str, value) -> None:
    if not _is_int(value) or value < 0:
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")


def _check_range(name: str, value) -> None:
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        raise ConfigError(f"{name} must be an inclusive (lo, hi) pair, got {value!r}")
    lo, hi = value
    if not (_is_int(lo) and _is_int(hi)):
        raise ConfigError(f"{name} bounds must be integers, got {value!r}")
    if lo < 0:
        raise ConfigError(f"{name} lower bound must be >= 0, got {lo}")
    if lo > hi:
        raise ConfigError(f"{name} is empty: lo={lo} > hi={hi}")


def validate_config(cfg: UniverseConfig) -> None:
    """Reject *cfg* with ``ConfigError`` if any field is out of bounds."""
    _check_count("systems", cfg.systems)
    _check_count("extra_edges", cfg.extra_edges)

    sc = cfg.system
    for name in _RANGE_FIELDS:
        _check_range(f"system.{name}", getattr(sc, name))

    _check_count("system.max_hazards_per_body", sc.max_hazards_per_body)
    if sc.max_hazards_per_body > len(HAZARD_KINDS):
        raise ConfigError(
            f"system.max_hazards_per_body must be <= {len(HAZARD_KINDS)} "
            f"(one hazard per kind), got {sc.max_hazards_per_body}"
        )

    p = sc.nickname_chance
    if isinstance(p, bool) or not isinstance(p, (int, float)) or math.isnan(p) or not 0.0 <= p <= 1.0:
        raise ConfigError(f"system.nickname_chance must be in [0, 1], got {p!r}")


def validate_seed(seed) -> int:
    if not _is_int(seed) or not 0 <= seed < SEED_MAX:
        raise ConfigError(f"seed must be an integer in [0, 2**64), got {seed!r}")
    return int(seed)


def config_to_dict(cfg: UniverseConfig) -> Dict:
    """JSON-serialisable view of *cfg*; ranges stay (lo, hi) pairs."""
    return dataclasses.asdict(cfg)


def config_from_dict(data: Dict) -> UniverseConfig:
    """Inverse of ``config_to_dict``; unknown keys raise ``ConfigError``.

    Missing keys fall back to their defaults.  The result is validated.
    """
    data = dict(data)
    system_data = data.pop("system", None) or {}
    if not isinstance(system_data, dict):
        raise ConfigError(f"system must be a mapping, got {system_data!r}")
    system_data = dict(system_data)

    top_fields = {f.name for f in dataclasses.fields(UniverseConfig)} - {"system"}
    sys_fields = {f.name for f in dataclasses.fields(SystemConfig)}
    unknown = (set(data) - top_fields) | {f"system.{k}" for k in set(system_data) - sys_fields}
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    for name in _RANGE_FIELDS:
        if name in system_data and isinstance(system_data[name], list):
            system_data[name] = tuple(system_data[name])

    cfg = UniverseConfig(system=SystemConfig(**system_data), **data)
    validate_config(cfg)
    return cfg


# ---------------------------------------------------------------------------
# Entity tree
# ---------------------------------------------------------------------------

class OrbitalKind(enum.Enum):
    """Kinds of orbital body; the value is the display label."""

    PLANETOID = "Planetoid"
    ASTEROID_BELT = "Asteroid Belt"
    MOON = "Moon"


@dataclasses.dataclass(frozen=True)
class Star:
    id: int
    name: str
    nickname: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class OrbitalBody:
    """A planetoid, asteroid belt or moon.  Only planetoids own moons."""

    id: int
    name: str
    nickname: Optional[str]
    distance: int
    hazards: Tuple[Hazard, ...]
    kind: OrbitalKind
    moons: Tuple["OrbitalBody", ...] = ()

    @property
    def hazard_kinds(self) -> Tuple[HazardKind, ...]:
        return tuple(h.kind for h in self.hazards)

    @property
    def probe_failure(self) -> float:
        return probe_failure(self.hazards)


@dataclasses.dataclass(frozen=True)
class StarSystem:
    id: int
    stars: Tuple[Star, ...]
    orbitals: Tuple[OrbitalBody, ...]
    links: Tuple[int, ...] = ()   # ids of linked systems, ascending

    @property
    def primary_name(self) -> str:
        return self.stars[0].name if self.stars else unnamed_primary(self.id)

    def bodies(self) -> Iterator[OrbitalBody]:
        """All orbital bodies, each planetoid followed by its moons."""
        for body in self.orbitals:
            yield body
            yield from body.moons


@dataclasses.dataclass(frozen=True)
class Universe:
    systems: Tuple[StarSystem, ...]

    def names(self) -> List[str]:
        out: List[str] = []
        for system in self.systems:
            out.extend(s.name for s in system.stars)
            out.extend(b.name for b in system.bodies())
        return out

    def nicknames(self) -> List[str]:
        out: List[str] = []
        for system in self.systems:
            out.extend(s.nickname for s in system.stars if s.nickname is not None)
            out.extend(b.nickname for b in system.bodies() if b.nickname is not None)
        return out


# ---------------------------------------------------------------------------
# Name suffix helpers
# ---------------------------------------------------------------------------

_ROMAN = [
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
]


def roman_numeral(idx: int) -> str:
    """Roman numeral for the 0-based ordinal *idx* (0 → "I", 10 → "XI")."""
    n = idx + 1
    parts = []
    for value, symbol in _ROMAN:
        count, n = divmod(n, value)
        parts.append(symbol * count)
    return "".join(parts)


def planet_suffix(idx: int) -> str:
    """Suffix for the 0-based planetoid *idx*: "b" … "z", then "27", "28", …

    Letters follow the convention that the primary star is "a".  Past "z"
    the suffix is the body's ordinal number, which cannot clash with a
    letter.
    """
    if idx < 25:
        return chr(ord("b") + idx)
    return str(idx + 2)


def unnamed_primary(system_id: int) -> str:
    return f"Unnamed {system_id}"


# ---------------------------------------------------------------------------
# System graph
# ---------------------------------------------------------------------------

def connect_systems(rng: RandomSource, count: int, extra_edges: int) -> List[Set[int]]:
    """Link *count* systems; return a symmetric adjacency list of indices.

    A random permutation is walked and each position ``i ≥ 1`` is linked to
    a uniformly chosen earlier position, giving a random spanning tree with
    ``count − 1`` edges.  Then *extra_edges* further edges are attempted:
    a self-pair is shifted by one (mod count) and an existing edge is simply
    skipped, so fewer than *extra_edges* may be added.

    With ``count ≤ 1`` nothing is drawn and nothing is linked.
    """
    adj: List[Set[int]] = [set() for _ in range(count)]
    if count <= 1:
        return adj

    order = rng.permutation(count)
    for i in range(1, count):
        a = order[i]
        b = order[rng.uniform_int(0, i - 1)]
        adj[a].add(b)
        adj[b].add(a)

    for _ in range(extra_edges):
        a = rng.uniform_int(0, count - 1)
        b = rng.uniform_int(0, count - 1)
        if a == b:
            b = (b + 1) % count
        if b not in adj[a]:
            adj[a].add(b)
            adj[b].add(a)

    return adj


def link_pairs(universe: Universe) -> List[Tuple[int, int]]:
    """Each undirected link once, as ``(lower id, higher id)``, sorted."""
    pairs = set()
    for system in universe.systems:
        for other in system.links:
            pairs.add((min(system.id, other), max(system.id, other)))
    return sorted(pairs)


def count_components(universe: Universe) -> int:
    """Number of connected components of the system link graph."""
    n = len(universe.systems)
    if n == 0:
        return 0
    index = {s.id: i for i, s in enumerate(universe.systems)}
    pairs = link_pairs(universe)
    src = np.array([index[a] for a, _ in pairs], dtype=np.int64)
    tgt = np.array([index[b] for _, b in pairs], dtype=np.int64)
    data = np.ones(len(pairs), dtype=np.int8)
    A = csr_matrix((data, (src, tgt)), shape=(n, n))
    n_components, _ = connected_components(A, directed=False)
    return int(n_components)


# ---------------------------------------------------------------------------
# Reporting and export
# ---------------------------------------------------------------------------

def _nick_suffix(nickname: Optional[str]) -> str:
    return f" ({nickname})" if nickname else ""


def _write_body(lines: List[str], body: OrbitalBody, indent: int) -> None:
    pad = " " * indent
    hazard_list = ", ".join(hazard_label(k) for k in body.hazard_kinds) or "none"
    lines.append(
        f"{pad}- {body.name} [{body.kind.value}] dist={body.distance} "
        f"hazards={hazard_list} probe_fail={body.probe_failure * 100.0:.2f}%"
        f"{_nick_suffix(body.nickname)}"
    )
    for moon in body.moons:
        _write_body(lines, moon, indent + 4)


def system_report(universe: Universe, seed: Optional[int] = None) -> str:
    """Human-readable text dump of the whole tree."""
    header = f"Universe with {len(universe.systems)} systems"
    if seed is not None:
        header += f" (seed {seed})"
    lines = [header]

    for system in universe.systems:
        links = ", ".join(str(l) for l in system.links) or "none"
        lines.append(f"System {system.id} links -> {links}")
        for star in system.stars:
            lines.append(f"  Star: {star.name}{_nick_suffix(star.nickname)}")
        for body in system.orbitals:
            _write_body(lines, body, 2)

    return "\n".join(lines) + "\n"


BODY_COLUMNS = [
    "id", "system_id", "parent_id", "kind", "name", "nickname",
    "distance", "hazards", "probe_fail", "yield_mult",
]


def universe_tables(universe: Universe) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Flatten *universe* into a bodies table and a links table.

    Returns
    -------
    bodies_df : DataFrame  (id, system_id, parent_id, kind, name, nickname,
                            distance, hazards, probe_fail, yield_mult)
                stars have kind "Star" and no distance; ``parent_id`` is the
                planetoid id for moons, else empty; ``hazards`` is a
                "|"-joined label list.
    links_df  : DataFrame  (source, target) – one row per undirected link.
    """
    rows = []

    def body_row(body: OrbitalBody, system_id: int, parent_id: Optional[int]) -> Dict:
        return {
            "id": body.id,
            "system_id": system_id,
            "parent_id": parent_id,
            "kind": body.kind.value,
            "name": body.name,
            "nickname": body.nickname,
            "distance": body.distance,
            "hazards": "|".join(hazard_label(k) for k in body.hazard_kinds),
            "probe_fail": body.probe_failure,
            "yield_mult": yield_multiplier(body.hazards),
        }

    for system in universe.systems:
        for star in system.stars:
            rows.append({
                "id": star.id,
                "system_id": system.id,
                "parent_id": None,
                "kind": "Star",
                "name": star.name,
                "nickname": star.nickname,
                "distance": None,
                "hazards": "",
                "probe_fail": None,
                "yield_mult": None,
            })
        for body in system.orbitals:
            rows.append(body_row(body, system.id, None))
            for moon in body.moons:
                rows.append(body_row(moon, system.id, body.id))

    bodies = pd.DataFrame(rows, columns=BODY_COLUMNS)
    bodies["parent_id"] = bodies["parent_id"].astype("Int64")
    bodies["distance"] = bodies["distance"].astype("Int64")

    pairs = link_pairs(universe)
    links = pd.DataFrame(
        {
            "source": np.array([a for a, _ in pairs], dtype=np.int64),
            "target": np.array([b for _, b in pairs], dtype=np.int64),
        }
    )
    return bodies, links


def link_graph(universe: Universe) -> nx.Graph:
    """networkx graph of systems (nodes) and links (edges)."""
    G = nx.Graph()
    for system in universe.systems:
        G.add_node(
            int(system.id),
            name=system.primary_name,
            stars=len(system.stars),
            orbitals=len(system.orbitals),
            moons=sum(len(b.moons) for b in system.orbitals),
        )
    for a, b in link_pairs(universe):
        G.add_edge(int(a), int(b))
    return G


def write_gexf(universe: Universe, path: str) -> None:
    """Export the system link graph as GEXF for Gephi."""
    nx.write_gexf(link_graph(universe), path)


# ---------------------------------------------------------------------------
# Acceptance checks
# ---------------------------------------------------------------------------

def acceptance_checks(
    universe: Universe, cfg: UniverseConfig
) -> List[Tuple[str, bool, str]]:
    """Evaluate the tree invariants; return ``(label, ok, detail)`` rows."""
    results: List[Tuple[str, bool, str]] = []

    n = len(universe.systems)
    results.append(("System count", n == cfg.systems, f"{n:,}  (target {cfg.systems:,})"))

    names = universe.names()
    dup_names = len(names) - len(set(names))
    results.append(("Unique names", dup_names == 0, f"{len(names):,} names, {dup_names} duplicates"))

    nicks = universe.nicknames()
    dup_nicks = len(nicks) - len(set(nicks))
    results.append(("Unique nicks", dup_nicks == 0, f"{len(nicks):,} nicknames, {dup_nicks} duplicates"))

    cap = cfg.system.max_hazards_per_body
    bad_bodies = 0
    for system in universe.systems:
        for body in system.bodies():
            kinds = body.hazard_kinds
            if len(kinds) > cap or len(set(kinds)) != len(kinds):
                bad_bodies += 1
    results.append(("Hazard cap", bad_bodies == 0, f"{bad_bodies} bodies over cap {cap} or repeating a kind"))

    ids = [s.id for s in universe.systems]
    for system in universe.systems:
        ids.extend(star.id for star in system.stars)
        ids.extend(body.id for body in system.bodies())
    dup_ids = len(ids) - len(set(ids))
    results.append(("Unique ids", dup_ids == 0, f"{len(ids):,} ids, {dup_ids} duplicates"))

    n_components = count_components(universe)
    results.append(("Connected", n_components <= 1, f"{n_components} component(s)"))

    return results


# ---------------------------------------------------------------------------
# Main generator class
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class _GenerationContext:
    """Mutable state for one ``generate()`` call."""

    rng: RandomSource
    used_names: Set[str] = dataclasses.field(default_factory=set)
    used_nicknames: Set[str] = dataclasses.field(default_factory=set)
    next_id: int = 0

    def alloc_id(self) -> int:
        id_ = self.next_id
        self.next_id += 1
        return id_


class UniverseGenerator:
    """Procedural generator for star systems, bodies, names and links.

    Parameters
    ----------
    seed : int
        Unsigned 64-bit seed.
    cfg : UniverseConfig
        All tunable parameters; validated here, before any random draw.

    Each ``generate()`` call starts from a fresh random source, so calling
    it twice on one instance returns two identical universes.
    """

    def __init__(self, seed: int, cfg: Optional[UniverseConfig] = None) -> None:
        self.cfg = cfg if cfg is not None else UniverseConfig()
        self.seed = validate_seed(seed)
        validate_config(self.cfg)

    def _new_context(self) -> _GenerationContext:
        return _GenerationContext(rng=RandomSource(self.seed))

    # ------------------------------------------------------------------
    # Per-entity construction
    # ------------------------------------------------------------------

    def _sample(self, ctx: _GenerationContext, rng_range: IntRange) -> int:
        lo, hi = rng_range
        return ctx.rng.uniform_int(lo, hi)

    def _draw_hazards(self, ctx: _GenerationContext) -> Tuple[Hazard, ...]:
        """0..max_hazards_per_body hazards of distinct kinds.

        A repeated kind is redrawn until the sampled count of distinct
        kinds is reached.
        """
        cap = self.cfg.system.max_hazards_per_body
        if cap == 0:
            return ()

        count = ctx.rng.uniform_int(0, cap)
        kinds: List[HazardKind] = []
        while len(kinds) < count:
            kind = HAZARD_KINDS[ctx.rng.uniform_int(0, len(HAZARD_KINDS) - 1)]
            if kind not in kinds:
                kinds.append(kind)
        return tuple(Hazard.of(k) for k in kinds)

    def _maybe_nickname(
        self, ctx: _GenerationContext, hazard_context: Sequence[HazardKind] = ()
    ) -> Optional[str]:
        if ctx.rng.uniform_float() < self.cfg.system.nickname_chance:
            return generate_nickname(ctx.rng, ctx.used_nicknames, hazard_context)
        return None

    def _claim_name(self, ctx: _GenerationContext, name: str) -> str:
        # Derived names are unique by construction; record them so the
        # shared namespace covers every body.
        ctx.used_names.add(name)
        return name

    def _make_star(self, ctx: _GenerationContext) -> Star:
        id_ = ctx.alloc_id()
        name = generate_star_name(ctx.rng, ctx.used_names)
        nickname = self._maybe_nickname(ctx)
        return Star(id=id_, name=name, nickname=nickname)

    def _make_body(
        self,
        ctx: _GenerationContext,
        name: str,
        distance_range: IntRange,
    ) -> Tuple[int, str, int, Tuple[Hazard, ...], Optional[str]]:
        id_ = ctx.alloc_id()
        name = self._claim_name(ctx, name)
        distance = self._sample(ctx, distance_range)
        hazards = self._draw_hazards(ctx)
        nickname = self._maybe_nickname(ctx, tuple(h.kind for h in hazards))
        return id_, name, distance, hazards, nickname

    def _make_moons(self, ctx: _GenerationContext, parent_name: str) -> Tuple[OrbitalBody, ...]:
        sc = self.cfg.system
        moon_count = self._sample(ctx, sc.moons_per_planetoid)
        moons = []
        for i in range(moon_count):
            id_, name, distance, hazards, nickname = self._make_body(
                ctx, f"{parent_name} {roman_numeral(i)}", sc.moon_distance
            )
            moons.append(OrbitalBody(
                id=id_, name=name, nickname=nickname, distance=distance,
                hazards=hazards, kind=OrbitalKind.MOON,
            ))
        return tuple(moons)

    def _make_planetoid(self, ctx: _GenerationContext, primary_name: str, idx: int) -> OrbitalBody:
        id_, name, distance, hazards, nickname = self._make_body(
            ctx, f"{primary_name} {planet_suffix(idx)}",
            self.cfg.system.planetoid_distance,
        )
        moons = self._make_moons(ctx, name)
        return OrbitalBody(
            id=id_, name=name, nickname=nickname, distance=distance,
            hazards=hazards, kind=OrbitalKind.PLANETOID, moons=moons,
        )

    def _make_belt(self, ctx: _GenerationContext, primary_name: str, idx: int) -> OrbitalBody:
        id_, name, distance, hazards, nickname = self._make_body(
            ctx, f"{primary_name} Belt {roman_numeral(idx)}",
            self.cfg.system.belt_distance,
        )
        return OrbitalBody(
            id=id_, name=name, nickname=nickname, distance=distance,
            hazards=hazards, kind=OrbitalKind.ASTEROID_BELT,
        )

    def _make_system(self, ctx: _GenerationContext) -> StarSystem:
        sc = self.cfg.system
        system_id = ctx.alloc_id()

        star_count = self._sample(ctx, sc.star_count)
        stars = tuple(self._make_star(ctx) for _ in range(star_count))
        primary_name = stars[0].name if stars else unnamed_primary(system_id)

        orbitals: List[OrbitalBody] = []
        planetoid_count = self._sample(ctx, sc.planetoids)
        for i in range(planetoid_count):
            orbitals.append(self._make_planetoid(ctx, primary_name, i))

        asteroid_count = self._sample(ctx, sc.asteroids)
        for i in range(asteroid_count):
            orbitals.append(self._make_belt(ctx, primary_name, i))

        return StarSystem(id=system_id, stars=stars, orbitals=tuple(orbitals))

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _build_systems(self, ctx: _GenerationContext) -> List[StarSystem]:
        return [self._make_system(ctx) for _ in range(self.cfg.systems)]

    def _link_systems(self, ctx: _GenerationContext, systems: List[StarSystem]) -> Universe:
        adj = connect_systems(ctx.rng, len(systems), self.cfg.extra_edges)
        linked = []
        for system, neighbours in zip(systems, adj):
            links = tuple(sorted(systems[j].id for j in neighbours))
            linked.append(dataclasses.replace(system, links=links))
        return Universe(systems=tuple(linked))

    def generate(self) -> Universe:
        """Build and return the whole universe.  Prints nothing."""
        ctx = self._new_context()
        systems = self._build_systems(ctx)
        return self._link_systems(ctx, systems)

    # ------------------------------------------------------------------
    # Acceptance tests
    # ------------------------------------------------------------------

    def _run_checks(self, universe: Universe) -> bool:
        """Print acceptance test results to stdout; return overall pass."""
        sep = "─" * 52

        print(f"\n{sep}")
        print("  ACCEPTANCE TESTS")
        print(sep)

        all_ok = True
        for label, ok, detail in acceptance_checks(universe, self.cfg):
            all_ok = all_ok and ok
            print(f"  {label:<13}: {detail}  {'✓' if ok else '✗ FAIL'}")

        pairs = link_pairs(universe)
        n = len(universe.systems)
        tree_edges = max(n - 1, 0)
        print(f"\n  Links: {len(pairs):,}  (spanning tree {tree_edges:,} + "
              f"{len(pairs) - tree_edges:,} of {self.cfg.extra_edges:,} extra)")

        print(sep + "\n")
        return all_ok

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, out_dir: str = "output", gexf: bool = True) -> Universe:
        """Execute all generation stages; write outputs; return the universe.

        Stages
        ------
        A – build every system: stars, planetoids, moons, belts.
        B – link the systems (spanning tree + extra edges).
        C – flatten to tables and write report / CSV / GEXF into *out_dir*.
        """
        os.makedirs(out_dir, exist_ok=True)
        t_start = time.perf_counter()
        ctx = self._new_context()

        # ── Stage A ──────────────────────────────────────────────────
        print("Stage A: building star systems …")
        t0 = time.perf_counter()
        systems = self._build_systems(ctx)
        n_bodies = sum(len(s.stars) + sum(1 for _ in s.bodies()) for s in systems)
        print(f"  {len(systems):,} systems, {n_bodies:,} stars and bodies "
              f"built in {time.perf_counter() - t0:.2f}s")

        # ── Stage B ──────────────────────────────────────────────────
        print("\nStage B: linking systems …")
        t0 = time.perf_counter()
        universe = self._link_systems(ctx, systems)
        print(f"  {len(link_pairs(universe)):,} links built in "
              f"{time.perf_counter() - t0:.2f}s")

        # ── Acceptance tests ─────────────────────────────────────────
        self._run_checks(universe)

        # ── Stage C: write outputs ───────────────────────────────────
        print("Stage C: writing outputs …")
        bodies, links = universe_tables(universe)
        bodies_path = os.path.join(out_dir, "bodies.csv")
        links_path = os.path.join(out_dir, "links.csv")
        report_path = os.path.join(out_dir, "report.txt")
        bodies.to_csv(bodies_path, index=False)
        links.to_csv(links_path, index=False)
        with open(report_path, "w", encoding="utf-8") as f:
            f.write(system_report(universe, self.seed))
        print(f"  Wrote {bodies_path}")
        print(f"  Wrote {links_path}")
        print(f"  Wrote {report_path}")

        if gexf:
            gexf_path = os.path.join(out_dir, "graph.gexf")
            write_gexf(universe, gexf_path)
            print(f"  Wrote {gexf_path}")

        elapsed = time.perf_counter() - t_start
        print(f"\nTotal time: {elapsed:.2f}s")

        return universe


# ---------------------------------------------------------------------------
# Script entry point (uses all UniverseConfig defaults)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    print(system_report(UniverseGenerator(123).generate(), 123), end="")
