"""
Wiki routes: resolve a selected place into its article panel
"""
import logging

from quart import Blueprint, current_app, jsonify, request

from place_wiki.src.place_parsing import place_from_request
from place_wiki.src.selection import PanelStatus, SelectionRunner

logger = logging.getLogger(__name__)

bp = Blueprint('wiki', __name__)


def _runner_for(client_id):
    """Runner shared by requests carrying the same client_id; fresh otherwise."""
    from place_wiki.src.app import get_provider

    provider = get_provider(current_app)
    settings = current_app.config.get('WIKI_SETTINGS')
    tracer = current_app.config.get('WIKI_TRACER')
    if not client_id:
        return SelectionRunner(provider, settings, tracer)
    runners = current_app.config['SELECTION_RUNNERS']
    runner = runners.get(client_id)
    if runner is None:
        runner = runners[client_id] = SelectionRunner(provider, settings, tracer)
    return runner


@bp.route('/api/wiki/resolve', methods=['POST'])
async def resolve():
    """Primary article plus ranked nearby POIs for a selected place.

    Body: the selected place (widget or Places-style JSON), optional client_id.
    """
    payload = await request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({'error': 'JSON object required'}), 400

    place = place_from_request(payload.get('place') if isinstance(payload.get('place'), dict) else payload)
    if not place.name and place.location is None:
        return jsonify({'error': 'place name or location required'}), 400

    client_id = str(payload.get('client_id') or '').strip()
    runner = _runner_for(client_id)
    logger.info("Resolving %r (client=%s)", place.name, client_id or '-')

    try:
        state = await runner.select(place)
    finally:
        runners = current_app.config['SELECTION_RUNNERS']
        if client_id and runners.get(client_id) is runner and not runner.busy:
            runners.pop(client_id, None)

    if state is None:
        return jsonify({'status': 'superseded'}), 409
    if state.status is PanelStatus.ERROR:
        return jsonify(state.to_dict()), 502
    return jsonify(state.to_dict())


def register(app):
    """Register wiki blueprint with app"""
    app.register_blueprint(bp)
