from config import GameConfig
from runner.client.engine import Cue, InterruptKind, SimulationEngine, new_context
from runner.client.entities import Coin, CoinKind, Obstacle, Platform
from runner.client.generator import generation_horizon, max_jump_distance
from runner.client.quiz import DEFAULT_QUESTIONS

GROUND = GameConfig.GROUND_LEVEL
STANDING_Y = GROUND - GameConfig.PLAYER_HEIGHT


def _platform(ctx, x, width):
    return Platform(id=ctx.next_id(), x=x, y=GROUND, width=width, height=GameConfig.HEIGHT - GROUND)


def _coin_on_player(ctx, kind=CoinKind.NORMAL):
    player = ctx.player
    coin = Coin(id=ctx.next_id(), x=player.x + 5, y=player.y + 5, width=20, height=20, kind=kind)
    ctx.coins.append(coin)
    return coin


def _run(engine, ctx, ticks):
    for _ in range(ticks):
        interrupt = engine.step(ctx)
        if interrupt:
            return interrupt
    return None


def test_new_context_starts_on_the_opening_platform():
    ctx = new_context(GameConfig, seed=1)
    assert ctx.player.x == GameConfig.PLAYER_X
    assert ctx.player.bottom == GROUND
    assert len(ctx.platforms) == 1
    assert ctx.platforms[0].width == GameConfig.WIDTH + GameConfig.START_PLATFORM_EXTRA


def test_standing_player_stays_grounded():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    assert _run(engine, ctx, 30) is None
    assert ctx.player.y == STANDING_Y
    assert ctx.player.vy == 0
    assert ctx.player.x == GameConfig.PLAYER_X


def test_world_scrolls_and_generates_ahead():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    opening = ctx.platforms[0]
    engine.step(ctx)
    assert opening.x == -GameConfig.SPEED
    assert ctx.distance == GameConfig.SPEED
    assert ctx.frontier_x >= generation_horizon(GameConfig)


def test_entities_are_discarded_behind_the_viewport():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    trailing = _platform(ctx, -GameConfig.DESPAWN_MARGIN - 50, 52)
    ctx.platforms.insert(0, trailing)
    engine.step(ctx)
    assert trailing not in ctx.platforms


def test_jump_only_from_the_ground():
    cues = []
    engine = SimulationEngine(GameConfig, on_cue=cues.append)
    ctx = new_context(GameConfig, seed=1)
    assert engine.jump(ctx) is True
    assert ctx.player.vy == GameConfig.JUMP_FORCE
    assert engine.jump(ctx) is False
    assert cues == [Cue.JUMP]
    engine.step(ctx)
    assert ctx.player.y < STANDING_Y


def test_falling_into_a_pit_is_fatal():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    ctx.platforms.clear()
    interrupt = _run(engine, ctx, 60)
    assert interrupt.kind == InterruptKind.DEATH
    assert ctx.player.y > GameConfig.HEIGHT


def test_hitting_an_obstacle_is_fatal():
    cues = []
    engine = SimulationEngine(GameConfig, on_cue=cues.append)
    ctx = new_context(GameConfig, seed=1)
    ctx.obstacles.append(Obstacle(id=ctx.next_id(), x=GameConfig.PLAYER_X + 10, y=GROUND - 40, width=30, height=40))
    interrupt = engine.step(ctx)
    assert interrupt.kind == InterruptKind.DEATH
    assert cues[-1] == Cue.HIT


def test_grazing_an_obstacle_inside_the_padding_survives():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    player_right = GameConfig.PLAYER_X + GameConfig.PLAYER_WIDTH
    # After the scroll the crate overlaps the player by less than both paddings
    ctx.obstacles.append(Obstacle(id=ctx.next_id(), x=player_right - 5 + GameConfig.SPEED, y=GROUND - 40, width=30, height=40))
    assert engine.step(ctx) is None


def test_normal_coin_scores():
    cues = []
    engine = SimulationEngine(GameConfig, on_cue=cues.append)
    ctx = new_context(GameConfig, seed=1)
    coin = _coin_on_player(ctx)
    assert engine.step(ctx) is None
    assert coin.collected
    assert ctx.score == GameConfig.COIN_SCORE
    assert Cue.COIN in cues
    # Collected coins never score twice
    engine.step(ctx)
    assert ctx.score == GameConfig.COIN_SCORE


def test_special_coin_raises_a_quiz():
    engine = SimulationEngine(GameConfig)
    ctx = new_context(GameConfig, seed=1)
    _coin_on_player(ctx, kind=CoinKind.SPECIAL)
    interrupt = engine.step(ctx)
    assert interrupt.kind == InterruptKind.QUIZ
    assert interrupt.question in DEFAULT_QUESTIONS
    assert ctx.score == 0


def _pit_course(gap):
    ctx = new_context(GameConfig, seed=1)
    edge = GameConfig.PLAYER_X + 10
    ctx.platforms[:] = [_platform(ctx, edge - 600, 600), _platform(ctx, edge + gap, 3000)]
    ctx.frontier_x = ctx.platforms[-1].right
    return ctx


def test_late_jump_clears_the_widest_pit():
    engine = SimulationEngine(GameConfig)
    ctx = _pit_course(max_jump_distance(GameConfig))
    engine.jump(ctx)
    assert _run(engine, ctx, 90) is None
    assert not ctx.player.is_jumping
    assert ctx.player.y == STANDING_Y


def test_wider_gap_than_reach_is_unclearable():
    engine = SimulationEngine(GameConfig)
    ctx = _pit_course(max_jump_distance(GameConfig) + 45)
    engine.jump(ctx)
    interrupt = _run(engine, ctx, 120)
    assert interrupt is not None and interrupt.kind == InterruptKind.DEATH
