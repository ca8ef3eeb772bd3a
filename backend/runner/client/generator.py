"""Procedural level generation.

The level is built just ahead of the visible frontier: pits and platforms
alternate at random, and each platform may carry one obstacle and a couple of
coins. All randomness comes from the context's seeded RNG so a seed fully
determines a layout.
"""

import logging
import math

from runner.client.entities import Coin, CoinKind, Obstacle, Platform, SimulationContext

log = logging.getLogger(__name__)


def airtime_ticks(config) -> int:
    """Ticks from a grounded jump until the player is back at launch height.

    The integrator applies gravity before moving, so after n ticks the
    displacement is n * JUMP_FORCE + GRAVITY * n * (n + 1) / 2, which returns
    to zero at n = -2 * JUMP_FORCE / GRAVITY - 1.
    """
    return max(0, math.ceil(-2 * config.JUMP_FORCE / config.GRAVITY - 1e-9) - 1)


def max_jump_distance(config) -> float:
    """Horizontal distance the world scrolls during one full jump."""
    return airtime_ticks(config) * config.SPEED


def max_pit_width(config) -> float:
    return min(config.PIT_MAX_WIDTH, max_jump_distance(config))


def generation_horizon(config) -> float:
    return config.WIDTH + config.WIDTH * config.LOOKAHEAD_FACTOR


def opening_platform(ctx: SimulationContext, config) -> Platform:
    return Platform(
        id=ctx.next_id(),
        x=0,
        y=config.GROUND_LEVEL,
        width=config.WIDTH + config.START_PLATFORM_EXTRA,
        height=config.HEIGHT - config.GROUND_LEVEL,
    )


def extend_level(ctx: SimulationContext, config) -> float:
    """Generate pits and platforms from ctx.frontier_x until the horizon is covered.

    A pit rolled last stays part of the frontier, so the next call resumes
    after it. Returns the new frontier.
    """
    horizon = generation_horizon(config)
    widest_pit = max_pit_width(config)
    rng = ctx.rng
    frontier_x = ctx.frontier_x
    after_pit = ctx.after_pit

    while frontier_x < horizon:
        # Two pits in a row would add up to an unjumpable gap
        if not after_pit and rng.random() < config.PIT_PROBABILITY:
            frontier_x += rng.uniform(min(config.PIT_MIN_WIDTH, widest_pit), widest_pit)
            after_pit = True
            continue
        after_pit = False

        width = rng.uniform(config.PLATFORM_MIN_WIDTH, config.PLATFORM_MAX_WIDTH)
        platform = Platform(
            id=ctx.next_id(),
            x=frontier_x,
            y=config.GROUND_LEVEL,
            width=width,
            height=config.HEIGHT - config.GROUND_LEVEL,
        )
        ctx.platforms.append(platform)
        _populate(ctx, config, platform)
        frontier_x += width

    ctx.frontier_x = frontier_x
    ctx.after_pit = after_pit
    return frontier_x


def _populate(ctx: SimulationContext, config, platform: Platform) -> None:
    rng = ctx.rng
    start_x = platform.x + config.PLATFORM_EDGE_MARGIN
    span = max(0.0, platform.width - 2 * config.PLATFORM_EDGE_MARGIN)
    placed = []

    if rng.random() < config.OBSTACLE_PROBABILITY:
        obstacle = Obstacle(
            id=ctx.next_id(),
            x=start_x + rng.random() * span,
            y=config.GROUND_LEVEL - config.OBSTACLE_HEIGHT,
            width=config.OBSTACLE_WIDTH,
            height=config.OBSTACLE_HEIGHT,
        )
        ctx.obstacles.append(obstacle)
        placed.append(obstacle)

    for _ in range(rng.randint(0, config.MAX_COINS_PER_PLATFORM)):
        coin = Coin(
            id=0,
            x=start_x + rng.random() * span,
            y=config.GROUND_LEVEL - config.COIN_MIN_LIFT - rng.random() * config.COIN_LIFT_RANGE,
            width=config.COIN_SIZE,
            height=config.COIN_SIZE,
        )
        pad = -config.COIN_OBSTACLE_PADDING
        if any(coin.overlaps(obstacle, other_pad=pad) for obstacle in placed):
            log.debug(f"[coin-reject] x={coin.x:.1f} y={coin.y:.1f} overlaps obstacle")
            continue
        if rng.random() < config.SPECIAL_COIN_PROBABILITY:
            coin.kind = CoinKind.SPECIAL
        coin.id = ctx.next_id()
        ctx.coins.append(coin)
