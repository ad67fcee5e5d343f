"""
Replay Resolver - Deterministic tick-by-tick execution of echo programs.

Every living echo restarts from its stored position and executes
instruction N at tick N. Each tick:
1. Projectiles advance one cell (mines stay put)
2. Echoes act in list order (walk, dash, fire, mine, shield)
3. Collisions are resolved cell by cell in (row, col) order

The resolver is a pure function of the echo list. Destroyed echoes are
marked dead in the frames, never dropped, so reporting can still see
where they fell.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import (
    COMPASS,
    Destruction,
    Direction,
    Echo,
    EntityType,
    InstructionType,
    Position,
)


@dataclass(frozen=True)
class Projectile:
    """A projectile or mine in flight during a replay."""
    projectile_id: str
    owner: str
    kind: EntityType
    position: Position
    direction: Direction


@dataclass(frozen=True)
class ReplayFrame:
    """Snapshot of the board after one tick (tick 0 = initial placement)."""
    tick: int
    echoes: tuple[Echo, ...]
    projectiles: tuple[Projectile, ...] = ()
    destroyed: tuple[Destruction, ...] = ()
    collisions: tuple[Position, ...] = ()
    shield_blocks: tuple[Position, ...] = ()

    def board(self, board_size: int = 8) -> list[list[EntityType | None]]:
        grid: list[list[EntityType | None]] = [[None] * board_size for _ in range(board_size)]
        for projectile in self.projectiles:
            grid[projectile.position.row][projectile.position.col] = projectile.kind
        for echo in self.echoes:
            if echo.alive and echo.position.in_bounds(board_size):
                grid[echo.position.row][echo.position.col] = EntityType.ECHO
        return grid


@dataclass(frozen=True)
class ReplayResult:
    """All frames of a replay plus every destruction it caused."""
    frames: tuple[ReplayFrame, ...]
    destroyed: tuple[Destruction, ...] = ()

    @property
    def ticks(self) -> int:
        return self.frames[-1].tick if self.frames else 0

    @property
    def destroyed_ids(self) -> list[str]:
        return [d.echo_id for d in self.destroyed]

    @property
    def score_events(self) -> list[tuple[str, str | None]]:
        return [(d.echo_id, d.destroyed_by) for d in self.destroyed]


def shield_blocks(shield: Direction, approach: Direction) -> bool:
    """
    True if a shield facing `shield` stops a hit arriving from `approach`.

    A shield covers its facing and the two neighbouring compass points.
    """
    distance = abs(COMPASS.index(shield) - COMPASS.index(approach))
    return min(distance, len(COMPASS) - distance) <= 1


@dataclass
class _Actor:
    echo: Echo
    position: Position
    alive: bool = True
    is_shielded: bool = False
    shield_direction: Direction | None = None

    def snapshot(self) -> Echo:
        return self.echo._copy_with(
            position=self.position,
            alive=self.alive,
            is_shielded=self.is_shielded,
            shield_direction=self.shield_direction,
        )


@dataclass
class _Piece:
    projectile: Projectile
    alive: bool = True


@dataclass
class _TickLog:
    destroyed: list[Destruction] = field(default_factory=list)
    collisions: list[Position] = field(default_factory=list)
    shield_blocks: list[Position] = field(default_factory=list)


class ReplayResolver:
    """Runs one replay over a fixed list of echoes."""

    def __init__(self, echoes: list[Echo] | tuple[Echo, ...], board_size: int = 8):
        self.board_size = board_size
        self.actors = [_Actor(echo=e, position=e.position) for e in echoes if e.alive]
        self.pieces: list[_Piece] = []
        self._next_piece = 1

    def run(self) -> ReplayResult:
        frames = [self._frame(0, _TickLog())]
        destroyed: list[Destruction] = []

        tick = 1
        while self._has_instructions(tick):
            log = _TickLog()
            self._advance_projectiles()
            self._act(tick, log)
            self._resolve_collisions(tick, log)
            self.pieces = [p for p in self.pieces if p.alive]
            frames.append(self._frame(tick, log))
            destroyed.extend(log.destroyed)
            tick += 1

        return ReplayResult(frames=tuple(frames), destroyed=tuple(destroyed))

    def _has_instructions(self, tick: int) -> bool:
        return any(a.alive and len(a.echo.instruction_list) >= tick for a in self.actors)

    def _advance_projectiles(self):
        moved = []
        for piece in self.pieces:
            projectile = piece.projectile
            if projectile.kind == EntityType.PROJECTILE:
                position = projectile.position.offset(projectile.direction)
                if not position.in_bounds(self.board_size):
                    continue
                piece = _Piece(_replace_position(projectile, position))
            moved.append(piece)
        self.pieces = moved

    def _act(self, tick: int, log: _TickLog):
        for actor in self.actors:
            if not actor.alive or tick > len(actor.echo.instruction_list):
                # Idle ticks keep whatever shield was up
                continue

            instruction = actor.echo.instruction_list[tick - 1]
            kind = instruction.instruction_type
            direction = instruction.direction

            if kind == InstructionType.SHIELD:
                actor.is_shielded = True
                actor.shield_direction = direction
                continue

            actor.is_shielded = False
            actor.shield_direction = None

            if kind in (InstructionType.WALK, InstructionType.DASH):
                steps = 2 if kind == InstructionType.DASH else 1
                target = actor.position.offset(direction, steps)
                if not target.in_bounds(self.board_size):
                    actor.alive = False
                    log.destroyed.append(Destruction(
                        echo_id=actor.echo.echo_id,
                        player_id=actor.echo.player_id,
                        destroyed_by=None,
                        position=actor.position,
                        tick=tick,
                        cause="off_board",
                    ))
                    continue
                actor.position = target
            elif kind in (InstructionType.FIRE, InstructionType.MINE):
                spawn = actor.position.offset(direction)
                if spawn.in_bounds(self.board_size):
                    self._spawn(actor.echo.player_id, kind, spawn, direction)

    def _spawn(self, owner: str, kind: InstructionType, position: Position, direction: Direction):
        if kind == InstructionType.FIRE:
            entity, prefix = EntityType.PROJECTILE, "p"
        else:
            entity, prefix = EntityType.MINE, "m"
        self.pieces.append(_Piece(Projectile(
            projectile_id=f"{prefix}{self._next_piece}",
            owner=owner,
            kind=entity,
            position=position,
            direction=direction,
        )))
        self._next_piece += 1

    def _resolve_collisions(self, tick: int, log: _TickLog):
        cells: dict[Position, tuple[list[_Actor], list[_Piece]]] = {}
        for actor in self.actors:
            if actor.alive:
                cells.setdefault(actor.position, ([], []))[0].append(actor)
        for piece in self.pieces:
            if piece.alive:
                cells.setdefault(piece.projectile.position, ([], []))[1].append(piece)

        for position in sorted(cells, key=lambda p: (p.row, p.col)):
            actors, pieces = cells[position]
            if len(actors) + len(pieces) < 2:
                continue

            if len(actors) >= 2:
                self._resolve_echo_crash(position, tick, actors, pieces, log)
            elif actors:
                self._resolve_hits(position, tick, actors[0], pieces, log)
            else:
                for piece in pieces:
                    piece.alive = False
                log.collisions.append(position)

    def _resolve_echo_crash(self, position, tick, actors, pieces, log):
        owners = {a.echo.player_id for a in actors}
        for actor in actors:
            opponents = owners - {actor.echo.player_id}
            destroyer = next(iter(opponents)) if opponents else None
            self._destroy(actor, destroyer, position, tick, log)
        for piece in pieces:
            piece.alive = False
        log.collisions.append(position)

    def _resolve_hits(self, position, tick, actor, pieces, log):
        for piece in pieces:
            piece.alive = False
            if not actor.alive:
                continue

            projectile = piece.projectile
            if (
                projectile.kind == EntityType.PROJECTILE
                and actor.is_shielded
                and actor.shield_direction is not None
                and shield_blocks(actor.shield_direction, projectile.direction.opposite())
            ):
                actor.is_shielded = False
                actor.shield_direction = None
                log.shield_blocks.append(position)
                continue

            destroyer = projectile.owner if projectile.owner != actor.echo.player_id else None
            self._destroy(actor, destroyer, position, tick, log)
            log.collisions.append(position)

    @staticmethod
    def _destroy(actor: _Actor, destroyer, position, tick, log: _TickLog):
        actor.alive = False
        log.destroyed.append(Destruction(
            echo_id=actor.echo.echo_id,
            player_id=actor.echo.player_id,
            destroyed_by=destroyer,
            position=position,
            tick=tick,
        ))

    def _frame(self, tick: int, log: _TickLog) -> ReplayFrame:
        return ReplayFrame(
            tick=tick,
            echoes=tuple(a.snapshot() for a in self.actors),
            projectiles=tuple(p.projectile for p in self.pieces if p.alive),
            destroyed=tuple(log.destroyed),
            collisions=tuple(log.collisions),
            shield_blocks=tuple(log.shield_blocks),
        )


def _replace_position(projectile: Projectile, position: Position) -> Projectile:
    return Projectile(
        projectile_id=projectile.projectile_id,
        owner=projectile.owner,
        kind=projectile.kind,
        position=position,
        direction=projectile.direction,
    )


def simulate_replay(echoes, board_size: int = 8) -> ReplayResult:
    """Convenience function to replay a list of echoes."""
    return ReplayResolver(echoes, board_size=board_size).run()
