from flask_socketio import join_room, emit
from flask import current_app, request
from runner import socketio
from runner.rooms import RoomError, RoomRegistry


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry() -> RoomRegistry:
    return current_app.extensions['room_registry']


def _roster(players):
    return [p.to_dict() for p in players]


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    for room_id, players in _registry().leave(sid):
        emit('room_update', _roster(players), to=room_id)


def handle_join_room(data):
    room_id = (data or {}).get('roomId')
    name = ((data or {}).get('name') or '').strip()
    if not room_id:
        current_app.logger.warning(f"[join-skip] sid={_get_sid()} missing roomId")
        return
    try:
        players = _registry().join(room_id, _get_sid(), name)
    except RoomError as exc:
        emit('error_msg', exc.message)
        return
    join_room(room_id)
    emit('room_update', _roster(players), to=room_id)


def handle_toggle_ready(room_id):
    players = _registry().toggle_ready(room_id, _get_sid())
    if players is not None:
        emit('room_update', _roster(players), to=room_id)


def handle_start_game(room_id):
    start_time = _registry().start(room_id)
    if start_time is not None:
        emit('start_game', {'startTime': start_time}, to=room_id)


def handle_update_player(data):
    data = data or {}
    room_id = data.get('roomId')
    player = _registry().update_player(room_id, _get_sid(), data.get('score'), data.get('status'))
    if player is not None:
        emit('player_updated', player.to_dict(), to=room_id, include_self=False)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('toggle_ready', handle_toggle_ready, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('update_player', handle_update_player, namespace=namespace)
