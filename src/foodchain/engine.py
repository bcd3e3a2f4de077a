"""Rule engine: move classification, resolution and turn progression."""

import copy
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from .eras import load_food_chains
from .events import EventLog
from .exceptions import ConfigError, NoGameError
from .placement import new_game, pick_random_empty
from .rules import (
    APEX_CATCH_POINTS,
    EATEN_PENALTY,
    FOOD_POINTS,
    PREDATOR_CATCH_POINTS,
    ability_cooldown,
    ability_geometry_ok,
    can_enter,
)
from .state import GameState
from .turns import TurnManager
from .types import CellContent, Era, FoodChain, GridSize, MoveKind, Position, Role

if TYPE_CHECKING:
    from .config import GameSettings

logger = structlog.get_logger()


@dataclass
class MoveResult:
    """Outcome of a single move request."""

    role: Role
    success: bool
    kind: MoveKind
    from_pos: Position | None
    to_pos: Position
    consumed: CellContent | None = None
    respawned_at: Position | None = None
    score_deltas: dict[Role, int] = field(default_factory=dict)
    round_ended: bool = False
    game_over: bool = False
    failure_reason: str | None = None


@dataclass(frozen=True)
class WinnerResult:
    """Roles tied at the maximum score, plus every role's score."""

    winners: tuple[Role, ...]
    scores: dict[Role, int]

    def text(self) -> str:
        names = " & ".join(role.name for role in self.winners)
        return (
            f"{names} wins | scores: prey={self.scores[Role.PREY]} "
            f"predator={self.scores[Role.PREDATOR]} apex={self.scores[Role.APEX]}"
        )


class GameEngine:
    """
    One game session: state, turn order and the rules that mutate them.

    Usage:
        engine = GameEngine(rng=random.Random(7))
        engine.start_game(Era.PAST, GridSize.SMALL, total_rounds=10)

        # UI, agents or tests request moves for the role whose turn it is
        if engine.can_move(Role.PREY, target):
            engine.move(Role.PREY, target)

    Moves for a role that is not on turn are refused, so callers need no
    extra synchronization to keep the turn order.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        event_log: EventLog | None = None,
        data_dir: Path | str | None = None,
    ):
        self.rng = rng or random.Random()
        self.event_log = event_log
        self.data_dir = data_dir

        self._state: GameState | None = None
        self._turns: TurnManager | None = None
        self._food_chain: FoodChain | None = None
        # Events held back while a dash is in flight
        self._pending: list[tuple[str, str, bool, dict[str, object]]] | None = None

    @classmethod
    def from_settings(cls, settings: "GameSettings") -> "GameEngine":
        """Create an engine from settings and start a game with them."""
        engine = cls(
            rng=random.Random(settings.seed),
            event_log=EventLog(settings.event_log) if settings.event_log else None,
            data_dir=settings.data_dir,
        )
        engine.start_game(settings.era, settings.grid_size, settings.total_rounds)
        return engine

    # --- Session ---

    @property
    def has_game(self) -> bool:
        return self._state is not None and self._turns is not None

    @property
    def state(self) -> GameState:
        if self._state is None:
            raise NoGameError("No game in progress")
        return self._state

    @property
    def turns(self) -> TurnManager:
        if self._turns is None:
            raise NoGameError("No game in progress")
        return self._turns

    @property
    def food_chain(self) -> FoodChain | None:
        return self._food_chain

    def start_game(
        self, era: Era | str, grid_size: GridSize | str, total_rounds: int
    ) -> GameState:
        """Start a new game, replacing any current one.

        Raises:
            ConfigError: If the era, grid size or round count is invalid.
            EraDataError: If the era's food chain file is missing or malformed.
        """
        if isinstance(era, str):
            era = Era.parse(era)
        if isinstance(grid_size, str):
            grid_size = GridSize.parse(grid_size)
        if total_rounds <= 0:
            raise ConfigError("totalRounds must be > 0")

        chains = load_food_chains(era, self.data_dir)
        state, turns, chain = new_game(era, grid_size, total_rounds, chains, self.rng)

        self._state = state
        self._turns = turns
        self._food_chain = chain

        self._emit(
            "game_start",
            f"GAME START era={era.name} chain={chain}",
            important=True,
            era=era.name,
            grid_size=grid_size.name,
            total_rounds=total_rounds,
            chain=str(chain),
        )
        self._emit("round_begin", f"ROUND BEGIN round={turns.round}", round=turns.round)
        return state

    def load_from(self, state: GameState, turns: TurnManager) -> None:
        """Replace the session with a restored state and turn order.

        Raises:
            ConfigError: If the board does not mirror the entities or the
                round limits disagree.
        """
        state.check_invariant()
        if state.total_rounds != turns.total_rounds:
            raise ConfigError(
                f"State total_rounds {state.total_rounds} != "
                f"turn manager total_rounds {turns.total_rounds}"
            )
        state.round = turns.round

        self._state = state
        self._turns = turns
        self._food_chain = FoodChain(
            apex=state.apex.name,
            predator=state.predator.name,
            prey=state.prey.name,
            food=state.food.name,
        )
        self._emit(
            "game_loaded",
            f"GAME LOADED era={state.era.name} round={turns.round} "
            f"turn={turns.current_turn.name}",
            important=True,
            era=state.era.name,
            round=turns.round,
            turn=turns.current_turn.name,
        )

    def current_turn(self) -> Role:
        return self.turns.current_turn

    def is_game_over(self) -> bool:
        return self.turns.game_over

    # --- Classification ---

    def classify(self, role: Role, to: Position) -> MoveKind:
        """Classify a move without mutating anything."""
        kind, _ = self._classify(role, to)
        return kind

    def can_move(self, role: Role, to: Position) -> bool:
        return self.classify(role, to) != MoveKind.NONE

    def legal_moves(self, role: Role) -> list[Position]:
        """All targets the role may request now, its own cell (skip) included."""
        size = self.state.board.size
        return [
            Position(row=r, col=c)
            for r in range(size)
            for c in range(size)
            if self.can_move(role, Position(row=r, col=c))
        ]

    def _classify(self, role: Role, to: Position) -> tuple[MoveKind, str | None]:
        """Classify a move, returning the rejection reason for NONE."""
        if self._state is None or self._turns is None:
            return MoveKind.NONE, "no_game"
        if self._turns.game_over:
            return MoveKind.NONE, "game_over"
        if role != self._turns.current_turn:
            return MoveKind.NONE, "not_your_turn"

        state = self._state
        mover = state.animal(role)
        from_pos = mover.position

        if from_pos == to:
            return MoveKind.SKIP, None
        if not state.board.in_bounds(to):
            return MoveKind.NONE, "out_of_bounds"

        target = state.board.get(to)
        d = from_pos.chebyshev(to)

        if d == 1:
            if not can_enter(role, target):
                return MoveKind.NONE, "cannot_enter"
            return MoveKind.WALK, None

        if mover.ability_cooldown > 0:
            return MoveKind.NONE, "ability_on_cooldown"
        if not ability_geometry_ok(state.era, role, from_pos, to, state.apex.position):
            return MoveKind.NONE, "illegal_geometry"
        # Future prey may not leap straight onto food
        if state.era == Era.FUTURE and role == Role.PREY and target == CellContent.FOOD:
            return MoveKind.NONE, "ability_onto_food"
        if not can_enter(role, target):
            return MoveKind.NONE, "cannot_enter"
        return MoveKind.ABILITY, None

    # --- Execution ---

    def move(self, role: Role, to: Position) -> bool:
        """Request a move for a role, using the Predator dash when it applies."""
        if role == Role.PREDATOR and self._is_dash_candidate(to):
            mid = self._find_dash_mid(self.state.predator.position, to)
            if mid is not None:
                return self.dash_predator(mid, to)
        return self.execute(role, to).success

    def skip(self, role: Role) -> bool:
        """Pass the role's turn without moving."""
        if not self.has_game:
            return False
        return self.execute(role, self.state.animal(role).position).success

    def execute(self, role: Role, to: Position, end_turn: bool = True) -> MoveResult:
        """
        Validate and apply a single move.

        Args:
            role: Role requesting the move
            to: Target cell
            end_turn: Whether to advance the turn order afterwards

        Returns:
            MoveResult; success is False (and nothing changed) if illegal.
        """
        kind, reason = self._classify(role, to)
        if kind == MoveKind.NONE:
            logger.debug("move_rejected", role=role.name, to=str(to), reason=reason)
            from_pos = self._state.animal(role).position if self._state else None
            return MoveResult(
                role=role,
                success=False,
                kind=kind,
                from_pos=from_pos,
                to_pos=to,
                failure_reason=reason,
            )

        state = self.state
        from_pos = state.animal(role).position
        result = MoveResult(role=role, success=True, kind=kind, from_pos=from_pos, to_pos=to)

        if kind == MoveKind.SKIP:
            self._emit("skip_turn", f"SKIP TURN role={role.name}", role=role.name)
        else:
            self._apply_move(result)

        if end_turn:
            self._finish_turn(result)
        return result

    def _apply_move(self, result: MoveResult) -> None:
        """Move the mover onto the target, resolving any consumption."""
        state = self.state
        role = result.role
        to = result.to_pos
        target = state.board.get(to)

        state.clear_cell(result.from_pos)
        state.place_animal(role, to)

        eaten: Role | None = None
        if role == Role.PREY and target == CellContent.FOOD:
            result.score_deltas[Role.PREY] = FOOD_POINTS
        elif role == Role.PREDATOR and target == CellContent.PREY:
            result.score_deltas[Role.PREDATOR] = PREDATOR_CATCH_POINTS
            eaten = Role.PREY
        elif role == Role.APEX and target in (CellContent.PREY, CellContent.PREDATOR):
            result.score_deltas[Role.APEX] = APEX_CATCH_POINTS
            eaten = Role.PREY if target == CellContent.PREY else Role.PREDATOR

        if eaten is not None:
            result.score_deltas[eaten] = -EATEN_PENALTY

        for scored, delta in result.score_deltas.items():
            state.replace_animal(state.animal(scored).with_score_delta(delta))

        if target != CellContent.EMPTY:
            result.consumed = target
            # Respawn only on a cell that was empty before this move
            new_pos = pick_random_empty(state.board, self.rng, exclude=(result.from_pos,))
            if eaten is None:
                state.place_food(new_pos)
            else:
                state.place_animal(eaten, new_pos)
            result.respawned_at = new_pos

        self._emit(
            "move_applied",
            f"MOVE role={role.name} from={result.from_pos} to={to} target={target.name}",
            role=role.name,
            kind=result.kind.name,
            from_pos=str(result.from_pos),
            to_pos=str(to),
            target=target.name,
        )
        for scored in (Role.APEX, Role.PREDATOR, Role.PREY):
            delta = result.score_deltas.get(scored, 0)
            if delta:
                self._emit(
                    "score_changed",
                    f"SCORE role={scored.name} delta={delta:+d}",
                    role=scored.name,
                    delta=delta,
                )
        if result.respawned_at is not None:
            respawned = eaten.name if eaten is not None else "FOOD"
            self._emit(
                "respawned",
                f"RESPAWN role={respawned} at={result.respawned_at}",
                role=respawned,
                at=str(result.respawned_at),
            )

    def _finish_turn(self, result: MoveResult) -> None:
        """Advance turn order, tick cooldowns and apply the ability cooldown."""
        state = self.state
        turns = self.turns

        round_ended = turns.end_turn()
        if round_ended:
            self._tick_cooldowns()
        state.round = turns.round

        if result.kind == MoveKind.ABILITY:
            cooldown = ability_cooldown(state.era, result.role)
            if cooldown > 0:
                state.replace_animal(state.animal(result.role).with_cooldown(cooldown))
                self._emit(
                    "cooldown_set",
                    f"COOLDOWN role={result.role.name} set={cooldown}",
                    role=result.role.name,
                    cooldown=cooldown,
                )

        if round_ended:
            self._emit("round_end", "ROUND END", round=turns.round)
            if not turns.game_over:
                self._emit(
                    "round_begin", f"ROUND BEGIN round={turns.round}", round=turns.round
                )
        if turns.game_over:
            text = self.winner_text()
            self._emit("game_over", f"GAME OVER {text}", important=True, result=text)

        result.round_ended = round_ended
        result.game_over = turns.game_over

    def _tick_cooldowns(self) -> None:
        state = self.state
        for animal in list(state.animals()):
            if animal.ability_cooldown > 0:
                state.replace_animal(animal.with_cooldown(animal.ability_cooldown - 1))

    # --- Dash ---

    def _is_dash_candidate(self, to: Position) -> bool:
        if not self.has_game or self.turns.game_over:
            return False
        state = self.state
        if state.era != Era.PRESENT or not state.board.in_bounds(to):
            return False
        from_pos = state.predator.position
        return from_pos.chebyshev(to) == 2 and from_pos.is_adjacent(state.apex.position)

    def _find_dash_mid(self, from_pos: Position, to: Position) -> Position | None:
        """First neighbour of from_pos the Predator can pass through to reach to."""
        board = self.state.board
        if not can_enter(Role.PREDATOR, board.get(to)):
            return None
        for mid in from_pos.neighbors():
            if not board.in_bounds(mid):
                continue
            if can_enter(Role.PREDATOR, board.get(mid)) and mid.is_adjacent(to):
                return mid
        return None

    def dash_predator(self, mid: Position, to: Position) -> bool:
        """
        Present-era Predator dash: step to mid, then to `to`, as one move.

        The turn ends only after the second step. Events from both steps
        are held back until the dash completes; if the second step is
        refused the session and the RNG are restored to their state before
        the dash and only DASH ABORTED is logged.
        """
        if not self.has_game or self.turns.game_over:
            return False
        state = self.state
        if state.era != Era.PRESENT or self.turns.current_turn != Role.PREDATOR:
            return False
        from_pos = state.predator.position
        if not from_pos.is_adjacent(state.apex.position):
            return False
        if from_pos.chebyshev(to) != 2 or not state.board.in_bounds(to):
            return False
        if not (from_pos.is_adjacent(mid) and mid.is_adjacent(to)):
            return False

        snapshot = (copy.deepcopy(self._state), copy.deepcopy(self._turns))
        rng_state = self.rng.getstate()

        self._pending = []
        try:
            self._emit(
                "dash_started",
                f"DASH role=PREDATOR via={mid}",
                from_pos=str(from_pos),
                via=str(mid),
                to_pos=str(to),
            )
            first = self.execute(Role.PREDATOR, mid, end_turn=False)
            second = None
            if first.success:
                second = self.execute(Role.PREDATOR, to, end_turn=True)
            pending = self._pending
        finally:
            self._pending = None

        if second is None or not second.success:
            reason = first.failure_reason if second is None else second.failure_reason
            if second is not None:
                self._state, self._turns = snapshot
                self.rng.setstate(rng_state)
                logger.warning("dash_rolled_back", via=str(mid), to_pos=str(to), reason=reason)
            self._emit("dash_aborted", "DASH ABORTED", reason=reason)
            return False

        for event, message, important, fields in pending:
            self._emit(event, message, important, **fields)
        return True

    # --- Results ---

    def winner(self) -> WinnerResult:
        """Roles tied at the highest score (several may win)."""
        scores = {animal.role: animal.score for animal in self.state.animals()}
        best = max(scores.values())
        winners = tuple(role for role in Role if scores[role] == best)
        return WinnerResult(winners=winners, scores=scores)

    def winner_text(self) -> str:
        return self.winner().text()

    def _emit(self, event: str, message: str, important: bool = False, **fields: object) -> None:
        """Log a game event to structlog and, if attached, the event log."""
        if self._pending is not None:
            self._pending.append((event, message, important, fields))
            return
        log = logger.info if important else logger.debug
        log(event, **fields)
        if self.event_log is not None:
            self.event_log.record(message)
