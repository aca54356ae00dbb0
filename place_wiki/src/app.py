"""
Quart application for the place -> Wikipedia panel.
"""
import logging
import os

from dotenv import load_dotenv
from quart import Quart
from quart_cors import cors

from place_wiki.config import get_config, reload_config, setup_logging
from place_wiki.providers.wikipedia_provider import WikipediaProvider
from place_wiki.services.session_manager import close_session, get_session

from . import tracing
from .metrics import MetricsTracer
from .routes import register_blueprints

logger = logging.getLogger(__name__)


def create_app(provider=None, config=None) -> Quart:
    """Build the app. Pass `provider` to skip the shared HTTP session."""
    load_dotenv()
    config = config or reload_config()
    setup_logging()

    app = Quart(__name__)
    app = cors(app, allow_origin=config.cors_origin, allow_methods=["GET", "POST", "OPTIONS"])

    app.config['WIKI_SETTINGS'] = config
    app.config['WIKI_PROVIDER'] = provider
    app.config['WIKI_TRACER'] = tracing.CompositeTracer([MetricsTracer(), tracing.LoggingTracer()])
    app.config['SELECTION_RUNNERS'] = {}
    app.config['SESSION_READY'] = False

    @app.before_serving
    async def startup():
        if app.config['WIKI_PROVIDER'] is None:
            await get_session()
            app.config['SESSION_READY'] = True
            app.config['WIKI_PROVIDER'] = WikipediaProvider(config=config)
        logger.info("place-wiki ready (%s, lang=%s)", config.environment.value, config.wikipedia_config.lang)

    @app.after_serving
    async def shutdown():
        runners = app.config['SELECTION_RUNNERS']
        for runner in runners.values():
            runner.cancel()
        runners.clear()
        if app.config['SESSION_READY']:
            await close_session()
            app.config['SESSION_READY'] = False

    register_blueprints(app)
    return app


def get_provider(app: Quart):
    provider = app.config.get('WIKI_PROVIDER')
    if provider is None:
        # routes hit before startup (e.g. test_client without test_app)
        provider = WikipediaProvider(config=app.config.get('WIKI_SETTINGS') or get_config())
        app.config['WIKI_PROVIDER'] = provider
    return provider


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.getenv("PORT", "5010")))
