import pytest

from place_wiki.providers.base import ProviderError
from place_wiki.src import tracing
from place_wiki.src.models import AdminAreas, BadgeTag, SelectedPlace
from place_wiki.src.pool_builder import admin_titles, build_pool

from conftest import GREER, FakeWikipedia, north_of


@pytest.fixture
def greer_pois(greer_wiki):
    greer_wiki.add_geo("Greer, South Carolina", "City in South Carolina, United States", GREER, GREER)
    greer_wiki.add_geo("Enoree River", "River in South Carolina", north_of(GREER, 1), GREER)
    greer_wiki.add_geo("Greer Heritage Museum", "History museum in Greer, South Carolina",
                       north_of(GREER, 2), GREER)
    return greer_wiki


def titles(pool):
    return [item.title for item in pool]


@pytest.mark.asyncio
async def test_primary_first_then_ranked_pois(greer_pois, greer_place, config):
    pool = await build_pool(greer_place, greer_pois, config)

    assert titles(pool) == ["Greer, South Carolina", "Greer Heritage Museum", "Enoree River"]
    assert pool[0].is_primary
    assert not any(item.is_primary for item in pool[1:])
    assert pool[1].badge is BadgeTag.MUSEUM
    assert pool[2].badge is BadgeTag.RIVER
    assert pool[1].distance_km == pytest.approx(2.0, abs=0.01)


@pytest.mark.asyncio
async def test_titles_are_unique(greer_pois, greer_place, config):
    greer_pois.searches["Greer South Carolina United States museum"] = ["Greer Heritage Museum"]
    greer_pois.geo.append(greer_pois.geo[-1])

    pool = await build_pool(greer_place, greer_pois, config)

    assert len(titles(pool)) == len(set(titles(pool)))


@pytest.mark.asyncio
async def test_pool_is_capped(greer_wiki, greer_place, config):
    for i in range(80):
        greer_wiki.add_geo(f"Park {i}", "Park in South Carolina", north_of(GREER, 0.1 * (i + 1)), GREER)

    pool = await build_pool(greer_place, greer_wiki, config)

    assert len(pool) == 51
    assert pool[0].title == "Greer, South Carolina"
    assert pool[1].title == "Park 0"


@pytest.mark.asyncio
async def test_full_pool_skips_keyword_searches(greer_pois, greer_place, config):
    config.pool_config.max_items = 3

    pool = await build_pool(greer_place, greer_pois, config)

    assert len(pool) == 3
    assert greer_pois.titles_called('search') == []


@pytest.mark.asyncio
async def test_nothing_to_search_yields_empty_pool(config):
    wiki = FakeWikipedia()

    pool = await build_pool(SelectedPlace(), wiki, config)

    assert pool == []
    assert wiki.calls == []


@pytest.mark.asyncio
async def test_nearby_filters(greer_pois, greer_place, config):
    greer_pois.add_geo("Paris Mountain State Park", "State park in South Carolina", north_of(GREER, 50), GREER)
    greer_pois.add_geo("Germaine Greer", "Australian writer and actress", north_of(GREER, 1), GREER)
    greer_pois.add_geo("Greenville County, South Carolina", "County in South Carolina, United States",
                       north_of(GREER, 5), GREER)
    tracer = tracing.RecordingTracer()

    pool = await build_pool(greer_place, greer_pois, config, tracer)

    discarded = {e['title']: e['reason'] for e in tracer.of(tracing.POI_DISCARDED)}
    assert discarded["Paris Mountain State Park"] == "outside_geofence"
    assert discarded["Germaine Greer"] == "not_place"
    assert discarded["Greenville County, South Carolina"] == "admin"
    assert "Germaine Greer" not in titles(pool)


@pytest.mark.asyncio
async def test_nearby_uses_looked_up_coordinates(greer_pois, greer_place, config):
    greer_pois.add_geo("Greer Station", "Historic district in Greer, South Carolina", north_of(GREER, 2.5), GREER,
                       with_coords=False)

    pool = await build_pool(greer_place, greer_pois, config)

    station = next(item for item in pool if item.title == "Greer Station")
    assert station.distance_km == pytest.approx(2.5, abs=0.01)
    assert titles(pool)[1] == "Greer Station"


@pytest.mark.asyncio
async def test_keyword_fallback_respects_wider_geofence(greer_pois, greer_place, config):
    greer_pois.searches["Greer South Carolina United States museum"] = [
        "Upcountry History Museum", "Columbia Museum of Art", "Greer Mill Museum",
    ]
    greer_pois.add_page("Upcountry History Museum", "History museum in Greenville, South Carolina",
                        coordinates=north_of(GREER, 40))
    greer_pois.add_page("Columbia Museum of Art", "Art museum in Columbia, South Carolina",
                        coordinates=north_of(GREER, -140))
    greer_pois.add_page("Greer Mill Museum", "Museum in South Carolina")
    tracer = tracing.RecordingTracer()

    pool = await build_pool(greer_place, greer_pois, config, tracer)

    assert titles(pool)[-1] == "Upcountry History Museum"
    discarded = {e['title']: e['reason'] for e in tracer.of(tracing.POI_DISCARDED) if e['stage'] == 'keyword'}
    assert discarded == {"Columbia Museum of Art": "outside_geofence", "Greer Mill Museum": "no_distance"}


@pytest.mark.asyncio
async def test_admin_fallback_when_pool_is_nearly_empty(greer_place, config):
    wiki = FakeWikipedia()
    wiki.add_page("Greenville County, South Carolina", "County in South Carolina, United States")
    wiki.add_page("South Carolina", "U.S. state")
    wiki.add_page("United States", "Country in North America")

    pool = await build_pool(greer_place, wiki, config)

    assert titles(pool) == ["Greenville County, South Carolina", "South Carolina", "United States"]
    assert [item.badge for item in pool] == [BadgeTag.COUNTY, BadgeTag.STATE_PROVINCE, BadgeTag.COUNTRY]
    assert not any(item.is_primary for item in pool)


@pytest.mark.asyncio
async def test_transport_failure_propagates(greer_pois, greer_place, config):
    greer_pois.fail.add('geo')

    with pytest.raises(ProviderError):
        await build_pool(greer_place, greer_pois, config)


@pytest.mark.asyncio
async def test_pool_events(greer_pois, greer_place, config):
    tracer = tracing.RecordingTracer()

    await build_pool(greer_place, greer_pois, config, tracer)

    stages = [e['stage'] for e in tracer.of(tracing.POOL_STAGE)]
    assert stages == ["primary", "nearby", "keyword"]
    built = tracer.of(tracing.POOL_BUILT)[0]
    assert built['size'] == 3
    assert built['primary'] == "Greer, South Carolina"


def test_admin_titles(greer_place):
    assert admin_titles(greer_place) == ["Greenville County, South Carolina", "South Carolina", "United States"]
    assert admin_titles(SelectedPlace(admin=AdminAreas(country="France"))) == ["France"]
