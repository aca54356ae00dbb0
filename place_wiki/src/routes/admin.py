"""
Admin routes: health check and metrics
"""
import logging
import time

from quart import Blueprint, current_app, jsonify, request

from place_wiki.src.metrics import get_metrics as get_metrics_dict

logger = logging.getLogger(__name__)

bp = Blueprint('admin', __name__)


@bp.route('/healthz')
async def healthz():
    """Lightweight health endpoint returning component status.

    ?deep=1 also runs the provider's own health check.
    """
    settings = current_app.config.get('WIKI_SETTINGS')
    runners = current_app.config.get('SELECTION_RUNNERS') or {}
    status = {
        'app': 'ok',
        'time': time.time(),
        'ready': current_app.config.get('WIKI_PROVIDER') is not None,
        'session': bool(current_app.config.get('SESSION_READY')),
        'in_flight': sum(1 for r in runners.values() if r.busy),
        'config': settings.to_dict() if settings else None,
    }
    if request.args.get('deep') and current_app.config.get('WIKI_PROVIDER') is not None:
        provider = current_app.config['WIKI_PROVIDER']
        metadata = await provider.get_metadata()
        result = await provider.health_check()
        status['providers'] = {metadata.name: result.to_dict()}
        if not result.is_healthy:
            status['app'] = 'degraded'
    return jsonify(status)


@bp.route('/metrics/json')
async def metrics_json():
    """Return simple JSON metrics (counters and latency summaries)"""
    try:
        return jsonify(get_metrics_dict())
    except Exception:
        logger.exception('Failed to get metrics')
        return jsonify({'error': 'failed to fetch metrics'}), 500


def register(app):
    """Register admin blueprint with app"""
    app.register_blueprint(bp)
