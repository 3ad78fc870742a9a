from flask import Blueprint, current_app, jsonify

matches = Blueprint('matches', __name__)


def _registry():
    return current_app.extensions['match_registry']


def _directory():
    return current_app.extensions['participant_directory']


@matches.route('', methods=['GET'])
@matches.route('/', methods=['GET'])
def list_joinable_matches():
    """
    Returns the identifiers of matches still waiting for a second player.
    """
    return jsonify(_registry().list_joinable()), 200


@matches.route('/<string:match_id>', methods=['GET'])
def get_match_state(match_id):
    """
    Returns the current state of a single match.
    """
    match = _registry().get(match_id.upper())
    if match is None:
        return jsonify({'error': 'Match not found'}), 404
    return jsonify(match.to_dict(_directory().names_for(match.participants))), 200
