from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the tic-tac-toe match server!'})


@main.route('/health')
def health():
    registry = current_app.extensions['match_registry']
    return jsonify({
        'status': 'online',
        'socketio': 'ready',
        'matches': registry.count(),
    })
