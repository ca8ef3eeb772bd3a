from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config, GameConfig
from runner.rooms import RoomRegistry

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry per app; torn down explicitly by run.py on shutdown
    flask_app.extensions['room_registry'] = RoomRegistry(
        required_players=flask_app.config['REQUIRED_PLAYERS'],
        start_delay_ms=flask_app.config['START_DELAY_MS'],
    )

    from runner.main import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from runner.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config['SOCKETIO_NAMESPACE'])

    @click.command('simulate')
    @click.option('--seed', type=int, default=None, help='Seed for level generation.')
    def simulate_command(seed):
        """Plays a headless solo run with the autopilot."""
        from runner.client.autopilot import Autopilot
        from runner.client.loop import TickLoop
        from runner.client.session import SessionStateMachine

        session = SessionStateMachine(GameConfig)
        pilot = Autopilot(GameConfig)
        session.start_solo(seed=seed)
        TickLoop(session, GameConfig.TICKS_PER_SECOND, realtime=False, before_tick=pilot.drive).run(
            until=lambda s: s.is_terminal
        )
        click.echo(f'{session.status.value} score={session.score} distance={int(session.distance)}')

    @click.command('bot')
    @click.option('--url', default=None, help='Game server URL.')
    @click.option('--name', default='Bot', help='Player name shown in the roster.')
    @click.option('--room', default=None, help='Room to join.')
    def bot_command(url, name, room):
        """Joins the team room, readies up and plays with the autopilot."""
        from runner.client.autopilot import Autopilot
        from runner.client.loop import TickLoop
        from runner.client.session import SessionStateMachine
        from runner.client.transport import SessionTransport

        server_url = url or flask_app.config['SERVER_URL']
        namespace = flask_app.config['SOCKETIO_NAMESPACE']
        pilot = Autopilot(GameConfig, required_players=flask_app.config['REQUIRED_PLAYERS'])
        with SessionStateMachine(
            GameConfig,
            transport_factory=lambda: SessionTransport(server_url, namespace=namespace),
        ) as session:
            session.join_team(name, room_id=room or flask_app.config['DEFAULT_ROOM_ID'])
            TickLoop(session, GameConfig.TICKS_PER_SECOND, before_tick=pilot.drive_team).run(
                until=lambda s: s.is_terminal or not s.is_active
            )
            for rank, player in enumerate(session.leaderboard(), start=1):
                click.echo(f'{rank}. {player.name} {player.score} {player.status.value}')
            if session.error:
                click.echo(session.error, err=True)

    flask_app.cli.add_command(simulate_command)
    flask_app.cli.add_command(bot_command)

    return flask_app
