import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    # Exact team size; a room starts only when this many players are ready
    REQUIRED_PLAYERS = int(os.environ.get('REQUIRED_PLAYERS', '10'))
    # Grace window between the start command and the shared start timestamp (ms)
    START_DELAY_MS = int(os.environ.get('START_DELAY_MS', '3000'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    DEFAULT_ROOM_ID = os.environ.get('DEFAULT_ROOM_ID', 'TEAM_ARENA_01')
    SERVER_URL = os.environ.get('SERVER_URL', 'http://localhost:5000')


class GameConfig:
    # Viewport
    WIDTH = 800
    HEIGHT = 400
    GROUND_LEVEL = 320

    # Physics, in units per tick
    TICKS_PER_SECOND = 60
    GRAVITY = 0.6
    JUMP_FORCE = -12
    SPEED = int(os.environ.get('MOVEMENT_SPEED', '3'))
    GROUND_SNAP_TOLERANCE = 20
    DESPAWN_MARGIN = 100

    # Player
    PLAYER_X = 100
    PLAYER_WIDTH = 30
    PLAYER_HEIGHT = 30

    # Generation
    LOOKAHEAD_FACTOR = 1.5
    START_PLATFORM_EXTRA = 200
    PIT_PROBABILITY = 0.2
    PIT_MIN_WIDTH = 80
    PIT_MAX_WIDTH = 130
    PLATFORM_MIN_WIDTH = 300
    PLATFORM_MAX_WIDTH = 800
    PLATFORM_EDGE_MARGIN = 50
    OBSTACLE_PROBABILITY = 0.7
    OBSTACLE_WIDTH = 30
    OBSTACLE_HEIGHT = 40
    OBSTACLE_HIT_PADDING = 5
    MAX_COINS_PER_PLATFORM = 2
    COIN_SIZE = 20
    COIN_MIN_LIFT = 40
    COIN_LIFT_RANGE = 80
    COIN_OBSTACLE_PADDING = 20
    SPECIAL_COIN_PROBABILITY = 0.4

    # Scoring and timing
    DURATION_SECONDS = int(os.environ.get('DURATION_SECONDS', '30'))
    COIN_SCORE = 1
    QUIZ_BONUS = 5
    QUIZ_SECONDS = 10
    # Team mode only: sampled score hint every N playing ticks
    SCORE_REPORT_INTERVAL_TICKS = 20
