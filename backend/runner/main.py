from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    registry = current_app.extensions['room_registry']
    return jsonify({
        'message': 'Digital Runner game server is running',
        'requiredPlayers': registry.required_players,
        'rooms': len(registry.rooms),
    })
