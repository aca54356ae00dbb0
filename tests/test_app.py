import asyncio

import pytest

from place_wiki.providers.wikipedia_provider import WikipediaProvider
from place_wiki.src import metrics
from place_wiki.src.app import create_app
from place_wiki.src.routes import wiki as wiki_routes

from conftest import GREER, GatedWikipedia, StubResponse, StubSession, north_of

GREER_JSON = {
    'name': "Greer",
    'formattedAddress': "Greer, SC, USA",
    'location': {'lat': GREER.lat, 'lng': GREER.lng},
    'admin': {'city': "Greer", 'county': "Greenville County", 'state': "South Carolina", 'stateCode': "SC",
              'country': "United States", 'countryCode': "US"},
}


@pytest.fixture(autouse=True)
def clean_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.mark.asyncio
async def test_resolve_returns_panel(greer_wiki, config):
    greer_wiki.add_geo("Greer Heritage Museum", "History museum in Greer, South Carolina",
                       north_of(GREER, 2), GREER)
    app = create_app(provider=greer_wiki, config=config)
    client = app.test_client()

    resp = await client.post('/api/wiki/resolve', json=GREER_JSON)

    assert resp.status_code == 200
    data = await resp.get_json()
    assert data['status'] == 'ready'
    assert data['primary'] == "Greer, South Carolina"
    assert [item['title'] for item in data['items']] == ["Greer, South Carolina", "Greer Heritage Museum"]
    assert data['items'][0]['is_primary'] is True
    assert data['items'][1]['badge'] == "Museum"
    assert data['items'][1]['distance_km'] == 2.0


@pytest.mark.asyncio
async def test_resolve_accepts_nested_place(greer_wiki, config):
    client = create_app(provider=greer_wiki, config=config).test_client()

    resp = await client.post('/api/wiki/resolve', json={'place': GREER_JSON, 'client_id': 'tab-1'})

    assert resp.status_code == 200
    assert (await resp.get_json())['primary'] == "Greer, South Carolina"


@pytest.mark.asyncio
async def test_resolve_requires_name_or_location(fake_wiki, config):
    client = create_app(provider=fake_wiki, config=config).test_client()

    resp = await client.post('/api/wiki/resolve', json={'formattedAddress': ""})

    assert resp.status_code == 400
    assert fake_wiki.calls == []


@pytest.mark.asyncio
async def test_resolve_empty_is_ok(fake_wiki, config):
    client = create_app(provider=fake_wiki, config=config).test_client()

    resp = await client.post('/api/wiki/resolve', json={'name': "Nowhere"})

    assert resp.status_code == 200
    assert (await resp.get_json())['status'] == 'empty'


@pytest.mark.asyncio
async def test_resolve_failure_is_502(greer_wiki, config):
    greer_wiki.fail.add('geo')
    client = create_app(provider=greer_wiki, config=config).test_client()

    resp = await client.post('/api/wiki/resolve', json=GREER_JSON)

    assert resp.status_code == 502
    data = await resp.get_json()
    assert data['status'] == 'error'
    assert data['items'] == []


@pytest.mark.asyncio
async def test_newer_request_supersedes_older(config):
    wiki = GatedWikipedia(gated={"Greer"})
    wiki.add_page("Greer, South Carolina", "City in South Carolina, United States", coordinates=GREER)
    app = create_app(provider=wiki, config=config)
    client = app.test_client()

    first = asyncio.ensure_future(client.post('/api/wiki/resolve', json=dict(GREER_JSON, client_id='tab-1')))
    await wiki.entered.wait()
    second = await client.post('/api/wiki/resolve', json={'name': "Nowhere", 'client_id': 'tab-1'})
    first = await first

    assert first.status_code == 409
    assert (await first.get_json()) == {'status': 'superseded'}
    assert second.status_code == 200
    assert app.config['SELECTION_RUNNERS'] == {}


@pytest.mark.asyncio
async def test_cancelled_request_releases_client_runner(config):
    wiki = GatedWikipedia(gated={"Greer"})
    wiki.add_page("Greer, South Carolina", "City in South Carolina, United States", coordinates=GREER)
    app = create_app(provider=wiki, config=config)

    async with app.test_request_context('/api/wiki/resolve', method='POST',
                                        json=dict(GREER_JSON, client_id='tab-1')):
        pending = asyncio.ensure_future(wiki_routes.resolve())
        await wiki.entered.wait()
        assert 'tab-1' in app.config['SELECTION_RUNNERS']
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

    assert app.config['SELECTION_RUNNERS'] == {}


@pytest.mark.asyncio
async def test_metrics_endpoint(greer_wiki, config):
    client = create_app(provider=greer_wiki, config=config).test_client()
    await client.post('/api/wiki/resolve', json=GREER_JSON)

    resp = await client.get('/metrics/json')

    assert resp.status_code == 200
    data = await resp.get_json()
    assert data['counters']['trace.pool_built'] == 1
    assert data['counters']['primary.found'] == 1
    assert data['counters']['primary.rejected.disambiguation'] == 1
    assert data['latencies']['pool.build']['count'] == 1


@pytest.mark.asyncio
async def test_healthz(config):
    provider = WikipediaProvider(session=StubSession(StubResponse(200, {'query': {'search': []}})), config=config)
    client = create_app(provider=provider, config=config).test_client()

    data = await (await client.get('/healthz')).get_json()
    assert data['app'] == 'ok'
    assert data['ready'] is True
    assert data['config']['pool_config']['max_items'] == 51

    deep = await (await client.get('/healthz?deep=1')).get_json()
    assert deep['providers']['wikipedia']['status'] == 'healthy'
