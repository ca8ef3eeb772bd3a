import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from runner.client.entities import CoinKind, PlayerEntity, SimulationContext
from runner.client.generator import extend_level, opening_platform
from runner.client.quiz import DEFAULT_QUESTIONS, Question

log = logging.getLogger(__name__)


class Cue(str, Enum):
    """Feedback moments an audio layer may react to."""

    JUMP = 'jump'
    COIN = 'coin'
    SPECIAL = 'special'
    HIT = 'hit'
    WIN = 'win'


class InterruptKind(str, Enum):
    DEATH = 'DEATH'
    QUIZ = 'QUIZ'


@dataclass(frozen=True)
class Interrupt:
    kind: InterruptKind
    question: Optional[Question] = None


def new_context(config, seed: Optional[int] = None) -> SimulationContext:
    """Opening state: the player standing on a platform wider than the viewport."""
    player = PlayerEntity(
        x=config.PLAYER_X,
        y=config.GROUND_LEVEL - config.PLAYER_HEIGHT,
        width=config.PLAYER_WIDTH,
        height=config.PLAYER_HEIGHT,
    )
    ctx = SimulationContext(player=player, rng=random.Random(seed))
    opening = opening_platform(ctx, config)
    ctx.platforms.append(opening)
    ctx.frontier_x = opening.right
    return ctx


class SimulationEngine:
    """Advances one playthrough by a tick at a time.

    The engine holds no per-run state of its own; everything lives in the
    SimulationContext handed to each call.
    """

    def __init__(self, config, questions: Sequence[Question] = DEFAULT_QUESTIONS,
                 on_cue: Optional[Callable[[Cue], None]] = None):
        self.config = config
        self.questions = list(questions)
        self.on_cue = on_cue

    def cue(self, cue: Cue) -> None:
        if self.on_cue:
            self.on_cue(cue)

    def jump(self, ctx: SimulationContext) -> bool:
        player = ctx.player
        if player.is_jumping:
            return False
        player.vy = self.config.JUMP_FORCE
        player.is_jumping = True
        self.cue(Cue.JUMP)
        return True

    def step(self, ctx: SimulationContext) -> Optional[Interrupt]:
        config = self.config
        player = ctx.player
        ctx.ticks += 1

        player.vy += config.GRAVITY
        player.y += player.vy

        if player.vy >= 0:
            self._land(ctx)

        if player.y > config.HEIGHT:
            log.debug(f"[pit-fall] tick={ctx.ticks} score={ctx.score}")
            self.cue(Cue.HIT)
            return Interrupt(InterruptKind.DEATH)

        self._scroll(ctx)

        extend_level(ctx, config)

        pad = config.OBSTACLE_HIT_PADDING
        for obstacle in ctx.obstacles:
            if player.overlaps(obstacle, pad=pad, other_pad=pad):
                log.debug(f"[obstacle-hit] tick={ctx.ticks} obstacle={obstacle.id}")
                self.cue(Cue.HIT)
                return Interrupt(InterruptKind.DEATH)

        for coin in ctx.coins:
            if coin.collected or not player.overlaps(coin):
                continue
            coin.collected = True
            if coin.kind == CoinKind.SPECIAL:
                self.cue(Cue.SPECIAL)
                return Interrupt(InterruptKind.QUIZ, question=ctx.rng.choice(self.questions))
            ctx.score += config.COIN_SCORE
            self.cue(Cue.COIN)

        return None

    def _land(self, ctx: SimulationContext) -> None:
        player = ctx.player
        tolerance = self.config.GROUND_SNAP_TOLERANCE
        for platform in ctx.platforms:
            if (
                player.right > platform.x
                and player.x < platform.right
                and platform.y <= player.bottom <= platform.y + tolerance
            ):
                player.y = platform.y - player.height
                player.vy = 0
                player.is_jumping = False
                break

    def _scroll(self, ctx: SimulationContext) -> None:
        speed = self.config.SPEED
        ctx.distance += speed
        ctx.frontier_x -= speed
        for entity in (*ctx.platforms, *ctx.obstacles, *ctx.coins):
            entity.x -= speed

        cutoff = -self.config.DESPAWN_MARGIN
        ctx.platforms = [p for p in ctx.platforms if p.right > cutoff]
        ctx.obstacles = [o for o in ctx.obstacles if o.right > cutoff]
        ctx.coins = [c for c in ctx.coins if c.right > cutoff]
