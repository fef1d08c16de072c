from flask import Blueprint, jsonify

from quiz.services import get_services

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Espresso quiz server!'})


@main.route('/api/game/state')
def game_state():
    return jsonify(get_services().controller.snapshot())
