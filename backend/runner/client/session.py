"""Client session state machine.

One status value decides which subsystem gets control on each tick. Solo
runs end in GAME_OVER or VICTORY. Team runs report their final score to the
room, wait in WAITING_RESULTS until the shared clock runs out, then show the
leaderboard.
"""

import logging
from contextlib import ExitStack
from enum import Enum
from typing import Callable, List, Optional, Sequence

from config import Config
from runner.client.clock import SessionClock, wall_clock_ms
from runner.client.engine import Cue, InterruptKind, SimulationEngine, new_context
from runner.client.quiz import DEFAULT_QUESTIONS, Question, QuizInterrupt, QuizResult
from runner.client.transport import EventKind, SessionTransport, TransportError, TransportEvent
from runner.models import Player, PlayerStatus

log = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = 'IDLE'
    WAITING_ROOM = 'WAITING_ROOM'
    PLAYING = 'PLAYING'
    QUIZ = 'QUIZ'
    GAME_OVER = 'GAME_OVER'
    WAITING_RESULTS = 'WAITING_RESULTS'
    LEADERBOARD = 'LEADERBOARD'
    VICTORY = 'VICTORY'


class GameMode(str, Enum):
    SOLO = 'SOLO'
    TEAM = 'TEAM'


class LobbyStep(str, Enum):
    MENU = 'MENU'
    NAME_INPUT = 'NAME_INPUT'


TRANSITIONS = {
    SessionStatus.IDLE: {SessionStatus.WAITING_ROOM, SessionStatus.PLAYING},
    SessionStatus.WAITING_ROOM: {SessionStatus.PLAYING},
    SessionStatus.PLAYING: {
        SessionStatus.QUIZ,
        SessionStatus.GAME_OVER,
        SessionStatus.VICTORY,
        SessionStatus.WAITING_RESULTS,
    },
    SessionStatus.QUIZ: {SessionStatus.PLAYING, SessionStatus.WAITING_RESULTS},
    SessionStatus.WAITING_RESULTS: {SessionStatus.LEADERBOARD},
    SessionStatus.LEADERBOARD: {SessionStatus.IDLE},
    SessionStatus.GAME_OVER: {SessionStatus.IDLE},
    SessionStatus.VICTORY: {SessionStatus.IDLE},
}

TERMINAL = {SessionStatus.GAME_OVER, SessionStatus.VICTORY, SessionStatus.LEADERBOARD}


class InvalidTransition(Exception):
    def __init__(self, current: SessionStatus, target: SessionStatus):
        super().__init__(f'cannot move from {current.value} to {target.value}')
        self.current = current
        self.target = target


class SessionStateMachine:
    def __init__(self, config, questions: Sequence[Question] = DEFAULT_QUESTIONS,
                 transport_factory: Optional[Callable[[], SessionTransport]] = None,
                 now: Callable[[], int] = wall_clock_ms,
                 on_cue: Optional[Callable[[Cue], None]] = None):
        self.config = config
        self.transport_factory = transport_factory
        self.engine = SimulationEngine(config, questions, on_cue=on_cue)
        self.clock = SessionClock(config.DURATION_SECONDS, config.TICKS_PER_SECOND, now=now)
        self.quiz = QuizInterrupt(config.QUIZ_SECONDS, config.QUIZ_BONUS)

        self.status = SessionStatus.IDLE
        self.mode: Optional[GameMode] = None
        self.lobby_step = LobbyStep.MENU
        self.ctx = None
        self.roster: List[Player] = []
        self.my_id: Optional[str] = None
        self.room_id: Optional[str] = None
        self.error: Optional[str] = None
        self.connecting = False
        self.transport: Optional[SessionTransport] = None
        self._resources = ExitStack()
        self._playing_ticks = 0

    # -- lifecycle -------------------------------------------------------

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self._release()
        return False

    def _release(self) -> None:
        self._resources.close()
        self._resources = ExitStack()
        self.transport = None

    def _transition(self, target: SessionStatus) -> None:
        if target not in TRANSITIONS[self.status]:
            raise InvalidTransition(self.status, target)
        log.debug(f"[transition] {self.status.value} -> {target.value}")
        self.status = target

    def _reset_to_idle(self, message: Optional[str] = None) -> None:
        self._release()
        self.status = SessionStatus.IDLE
        self.mode = None
        self.lobby_step = LobbyStep.MENU
        self.roster = []
        self.my_id = None
        self.connecting = False
        self.error = message
        self.quiz.cancel()
        self.clock.reset()

    def abort(self, message: Optional[str] = None) -> None:
        """Drop whatever is running and go back to the menu."""
        if message:
            log.info(f"[abort] status={self.status.value} reason={message}")
        self._reset_to_idle(message)

    def return_to_menu(self) -> None:
        self._transition(SessionStatus.IDLE)
        self._reset_to_idle()

    # -- properties ------------------------------------------------------

    @property
    def score(self) -> int:
        return self.ctx.score if self.ctx else 0

    @property
    def distance(self) -> float:
        return self.ctx.distance if self.ctx else 0.0

    @property
    def time_left(self) -> float:
        return self.clock.remaining

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL

    @property
    def is_active(self) -> bool:
        return self.status != SessionStatus.IDLE or self.transport is not None

    @property
    def simulating(self) -> bool:
        return self.status == SessionStatus.PLAYING and self.clock.has_started

    def leaderboard(self) -> List[Player]:
        return sorted(self.roster, key=lambda p: p.score, reverse=True)

    # -- commands --------------------------------------------------------

    def start_solo(self, seed: Optional[int] = None) -> None:
        self._transition(SessionStatus.PLAYING)
        self.mode = GameMode.SOLO
        self.error = None
        self._begin_run(seed)
        self.clock.start_solo()

    def begin_join(self) -> None:
        if self.status == SessionStatus.IDLE:
            self.lobby_step = LobbyStep.NAME_INPUT

    def join_team(self, name: str, room_id: Optional[str] = None) -> bool:
        if self.status != SessionStatus.IDLE:
            raise InvalidTransition(self.status, SessionStatus.WAITING_ROOM)
        name = (name or '').strip()
        if not name:
            return False
        if self.transport_factory is None:
            raise TransportError('no transport configured for team play')

        self._release()
        self.transport = self._resources.enter_context(self.transport_factory())
        self.mode = GameMode.TEAM
        self.room_id = room_id or Config.DEFAULT_ROOM_ID
        self.lobby_step = LobbyStep.NAME_INPUT
        self.connecting = True
        self.error = None
        try:
            self.transport.open(self.room_id, name)
        except TransportError as exc:
            self.abort(str(exc))
            return False
        return True

    def toggle_ready(self) -> None:
        if self.transport and self.status == SessionStatus.WAITING_ROOM:
            self.transport.toggle_ready()

    def request_start(self) -> None:
        if self.transport and self.status == SessionStatus.WAITING_ROOM:
            self.transport.start_game()

    def jump(self) -> bool:
        if not self.simulating:
            return False
        return self.engine.jump(self.ctx)

    def answer_quiz(self, index: Optional[int]) -> Optional[QuizResult]:
        if self.status != SessionStatus.QUIZ:
            return None
        result = self.quiz.answer(index)
        if result:
            self._resolve_quiz(result)
        return result

    # -- tick ------------------------------------------------------------

    def tick(self, dt: Optional[float] = None) -> None:
        dt = dt if dt is not None else 1 / self.config.TICKS_PER_SECOND
        self._drain()

        if self.mode == GameMode.TEAM and self.clock.start_time is not None:
            self.clock.tick()
            if self.clock.expired:
                if self.status in (SessionStatus.PLAYING, SessionStatus.QUIZ):
                    self._victory()
                if self.status == SessionStatus.WAITING_RESULTS:
                    self._transition(SessionStatus.LEADERBOARD)
                return
        elif self.mode == GameMode.SOLO and self.status == SessionStatus.PLAYING:
            self.clock.tick()
            if self.clock.expired:
                self._victory()
                return

        if self.simulating:
            if self.mode == GameMode.TEAM:
                self._playing_ticks += 1
                if self._playing_ticks % self.config.SCORE_REPORT_INTERVAL_TICKS == 0:
                    self.transport.update_player(self.score, PlayerStatus.ALIVE)

            interrupt = self.engine.step(self.ctx)
            if interrupt is None:
                return
            if interrupt.kind == InterruptKind.DEATH:
                self._death()
            elif interrupt.kind == InterruptKind.QUIZ:
                self.quiz.open(interrupt.question)
                self._transition(SessionStatus.QUIZ)
        elif self.status == SessionStatus.QUIZ:
            result = self.quiz.advance(dt)
            if result:
                self._resolve_quiz(result)

    # -- internals -------------------------------------------------------

    def _begin_run(self, seed: Optional[int] = None) -> None:
        self.ctx = new_context(self.config, seed)
        self.quiz.cancel()
        self._playing_ticks = 0

    def _resolve_quiz(self, result: QuizResult) -> None:
        self.ctx.score += result.bonus
        self.engine.cue(Cue.WIN if result.correct else Cue.HIT)
        self._transition(SessionStatus.PLAYING)

    def _death(self) -> None:
        if self.mode == GameMode.TEAM:
            self._report(PlayerStatus.DEAD)
            self._transition(SessionStatus.WAITING_RESULTS)
        else:
            self._transition(SessionStatus.GAME_OVER)

    def _victory(self) -> None:
        self.engine.cue(Cue.WIN)
        self.quiz.cancel()
        if self.mode == GameMode.TEAM:
            self._report(PlayerStatus.FINISHED)
            self._transition(SessionStatus.WAITING_RESULTS)
        else:
            self._transition(SessionStatus.VICTORY)

    def _report(self, status: PlayerStatus) -> None:
        """Final score report; the room only trusts this one, not the samples."""
        if self.transport:
            self.transport.update_player(self.score, status)
        for player in self.roster:
            if player.id == self.my_id:
                player.score = self.score
                player.status = status

    def _drain(self) -> None:
        if not self.transport:
            return
        for event in self.transport.poll():
            self._handle(event)
            if not self.transport:
                break

    def _handle(self, event: TransportEvent) -> None:
        kind = event.kind
        if kind == EventKind.CONNECTED:
            self.my_id = event.payload
        elif kind == EventKind.ROOM_UPDATE:
            self.roster = list(event.payload)
            self.my_id = self.transport.sid or self.my_id
            self.connecting = False
            if self.status == SessionStatus.IDLE:
                self._transition(SessionStatus.WAITING_ROOM)
        elif kind == EventKind.PLAYER_UPDATED:
            updated = event.payload
            self.roster = [updated if p.id == updated.id else p for p in self.roster]
        elif kind == EventKind.START_GAME:
            if self.status != SessionStatus.WAITING_ROOM:
                log.warning(f"[start-ignored] status={self.status.value}")
                return
            self._begin_run()
            self.clock.start_team(event.payload)
            self._transition(SessionStatus.PLAYING)
        elif kind == EventKind.ERROR:
            self.abort(event.payload)
        elif kind in (EventKind.DISCONNECTED, EventKind.CONNECT_FAILED):
            if self.status == SessionStatus.LEADERBOARD:
                self._release()
            else:
                self.abort('Connection to the game server was lost.')
