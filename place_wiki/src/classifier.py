"""
Article classification: label a page summary as a POI type, an admin area,
a generic place, or nothing.

Heuristics include:
  - a non-place blocklist (government bodies, elections, list/index pages)
  - an ordered (badge, patterns) table where the first match wins, so the
    specific categories sit above the general ones
  - description-anchored checks for County / State-Province / Country
  - a generic place keyword plus a place-shaped title for Place
"""
import re
from typing import Iterable, List, Optional, Pattern, Tuple

from .models import ADMIN_BADGES, ArticleSummary, BadgeTag


def _rx(*patterns: str) -> Pattern:
    return re.compile("|".join(f"(?:{p})" for p in patterns), re.IGNORECASE)


NON_PLACE_RX = _rx(
    r'\bmayor\b', r'\b(city|town|county|borough|village) council\b', r'\bcouncil (of|for)\b',
    r'\belections?\b', r'\breferendum\b',
    r'\blist of\b', r'\bindex of\b', r'\boutline of\b', r'\btimeline of\b',
    r'\bdepartment\b', r'\bagency\b', r'\bministry\b',
    r'\b(local|city|municipal|state|federal|county|provincial) government\b', r'\bgovernment (body|agency|of)\b',
    r'\blegislature\b', r'\bparliament\b', r'\bpolitical party\b', r'\badministration\b', r'\boffice of\b',
)

BIOGRAPHY_MEDIA_RX = _rx(
    r'\bactor\b', r'\bactress\b', r'\bsinger\b', r'\brapper\b', r'\bmusician\b',
    r'\bband\b', r'\balbum\b', r'\bsong\b', r'\bfilm\b', r'\bmovie\b', r'\bnovel\b', r'\bbook\b',
    r'\btelevision series\b', r'\btv series\b', r'\bvideo game\b',
    r'\bcompany\b', r'\bcorporation\b', r'\bpolitician\b', r'\bsoftware\b',
    r'\bsurname\b', r'\bgiven name\b', r'\bfootballer\b', r'\bnewspaper\b', r'\bmagazine\b',
)

# Order matters: first match wins.
BADGE_RULES: List[Tuple[BadgeTag, Pattern]] = [
    (BadgeTag.NRHP_SITE, _rx(r'national register of historic places', r'\bnrhp\b')),
    (BadgeTag.HISTORIC_DISTRICT, _rx(r'\bhistoric district\b')),
    (BadgeTag.HISTORIC_HOUSE, _rx(r'\bhistoric (house|home|mansion)\b', r'\bplantation\b',
                                  r'\bmansion\b', r'\bmanor house\b', r'\bhomestead\b')),
    (BadgeTag.MUSEUM, _rx(r'\bmuseums?\b', r'\bart gallery\b')),
    (BadgeTag.ZOO_AQUARIUM, _rx(r'\bzoo\b', r'\bzoological\b', r'\baquarium\b')),
    (BadgeTag.UNIVERSITY, _rx(r'\buniversity\b', r'\bcollege\b', r'\binstitute of technology\b')),
    (BadgeTag.AIRPORT, _rx(r'\bairport\b', r'\bairfield\b', r'\bair (force )?base\b')),
    (BadgeTag.STADIUM, _rx(r'\bstadium\b', r'\barena\b', r'\bballpark\b', r'\bspeedway\b')),
    (BadgeTag.LIBRARY, _rx(r'\blibrary\b')),
    (BadgeTag.THEATER, _rx(r'\btheat(er|re)\b', r'\bopera house\b', r'\bconcert hall\b', r'\bamphitheat(er|re)\b')),
    (BadgeTag.RELIGIOUS_SITE, _rx(r'\bchurch\b', r'\bcathedral\b', r'\bbasilica\b', r'\bchapel\b', r'\bmosque\b',
                                  r'\bsynagogue\b', r'\btemple\b', r'\babbey\b', r'\bmonastery\b', r'\bshrine\b')),
    (BadgeTag.FORT_CASTLE, _rx(r'\bcastle\b', r'\bfortress\b', r'\bcitadel\b', r'\bfortification\b',
                               r'\b(historic|military|star|colonial|former|army) fort\b')),
    (BadgeTag.MONUMENT, _rx(r'\bmonument\b', r'\bmemorial\b', r'\bstatue\b', r'\bobelisk\b')),
    (BadgeTag.WATERFALL, _rx(r'\bwaterfalls?\b', r'\bfalls\b', r'\bcascades?\b')),
    (BadgeTag.DAM, _rx(r'\bdam\b', r'\bweir\b', r'\blevee\b')),
    (BadgeTag.BRIDGE, _rx(r'\bbridges?\b', r'\bviaduct\b', r'\baqueduct\b')),
    (BadgeTag.MILL, _rx(r'\bmills?\b', r'\bgristmill\b')),
    (BadgeTag.FACTORY, _rx(r'\bfactory\b', r'\bmanufactur\w*', r'\bbrewery\b', r'\bdistillery\b',
                           r'\bpower (plant|station)\b', r'\bfoundry\b')),
    (BadgeTag.MARKET, _rx(r'\bmarket(place)?\b', r'\bbazaar\b', r'\bshopping (mall|center|centre)\b')),
    (BadgeTag.TRAIL_GREENWAY, _rx(r'\btrail\b', r'\bgreenway\b', r'\bboardwalk\b', r'\bpromenade\b')),
    (BadgeTag.PARK, _rx(r'\bpark\b', r'\bgardens?\b', r'\barboretum\b', r'\bnature (reserve|preserve)\b',
                        r'\bwildlife refuge\b', r'\bnational forest\b')),
    (BadgeTag.LAKE, _rx(r'\blake\b', r'\breservoir\b', r'\bpond\b', r'\blagoon\b')),
    (BadgeTag.RIVER, _rx(r'\briver\b', r'\bcreek\b', r'\bstream\b', r'\bbrook\b', r'\bcanal\b')),
    (BadgeTag.NEIGHBORHOOD, _rx(r'\bneighbou?rhoods?\b', r'\bsuburb\b', r'\bcommunity area\b', r'\bsubdivision\b')),
]

# Description whose head noun is a settlement, e.g. "City in South Carolina".
SETTLEMENT_HEAD_RX = re.compile(
    r'^(?:(?:a|an|the)\s+)?'
    r'(?:(?:small|large|largest|second-largest|major|former|incorporated|unincorporated|coastal|historic|'
    r'port|market|resort|seaside|border|mining|suburban|rural|home-rule|charter|independent|state|provincial|national)\s+)*'
    r'(?:city|town|village|municipality|borough|hamlet|commune|township|census-designated place|capital|'
    r'unincorporated community|human settlement|settlement|metropolis|consolidated city-county)\b',
    re.IGNORECASE,
)

COUNTY_RX = re.compile(
    r'^(?:(?:ceremonial|historic|non-metropolitan|metropolitan|administrative)\s+)?county\b(?!\s+(?:seat|town))',
    re.IGNORECASE,
)
STATE_RX = re.compile(
    r'^(?:(?:u\.s\.|us|federal|constituent|mexican|australian|indian|brazilian|german|austrian)\s+)?'
    r'(?:state|province|territory)\b(?!\s+(?:capital|university|park|highway|route|road|college|forest))',
    re.IGNORECASE,
)
COUNTRY_RX = re.compile(
    r'^(?:(?:sovereign|island|landlocked|transcontinental|constituent)\s+)*(?:country|nation)\b'
    r'|^(?:(?:sovereign|island)\s+)?(?:city|island)[- ]state\b|^sovereign\b',
    re.IGNORECASE,
)

PLACE_KEYWORD_RX = _rx(
    r'\bcity\b', r'\btown\b', r'\bvillage\b', r'\bmunicipality\b', r'\bcapital\b', r'\bcountry\b',
    r'\bstate\b', r'\bprovince\b', r'\bcounty\b', r'\bdistrict\b', r'\bborough\b', r'\bhamlet\b',
    r'\bcommune\b', r'\btownship\b', r'\bsettlement\b', r'\bmetropolitan\b', r'\bcommunity\b',
)

PLACE_PREFIX_RX = re.compile(
    r"^(?:North|South|East|West|Upper|Lower|New|Old|Port|Mount|Saint|St\.?|San|Santa|Santo|São|Fort|Lake)\s+\S",
)
COMMA_TITLE_RX = re.compile(r'^[^,()]+,\s*[^,()]+$')
PAREN_TITLE_RX = re.compile(r'^[^()]+\s\([^()]+\)$')
CITY_OF_RX = re.compile(r'^City of\s+\S')


def _lower(text: Optional[str]) -> str:
    return (text or "").lower()


def is_non_place_text(*texts: Optional[str]) -> bool:
    """True when any text names a government body, election or list page."""
    return any(NON_PLACE_RX.search(_lower(t)) for t in texts)


def is_biography_or_media(description: Optional[str]) -> bool:
    return bool(BIOGRAPHY_MEDIA_RX.search(_lower(description)))


def looks_like_place_name(title: Optional[str]) -> bool:
    """Surface check on a title: "X, Y", "X (Y)", "City of X", a
    directional/saint prefix, or one to four capitalized words."""
    title = (title or "").strip()
    if not title:
        return False
    if COMMA_TITLE_RX.match(title) or PAREN_TITLE_RX.match(title) or CITY_OF_RX.match(title):
        return True
    if PLACE_PREFIX_RX.match(title):
        return True
    words = title.split()
    return 1 <= len(words) <= 4 and all(w[:1].isupper() for w in words)


def _match_rules(texts: Iterable[str]) -> Optional[BadgeTag]:
    texts = [t for t in texts if t]
    for badge, pattern in BADGE_RULES:
        if any(pattern.search(t) for t in texts):
            return badge
    return None


def _admin_badge(description: str) -> Optional[BadgeTag]:
    if COUNTY_RX.search(description):
        return BadgeTag.COUNTY
    if STATE_RX.search(description):
        return BadgeTag.STATE_PROVINCE
    if COUNTRY_RX.search(description):
        return BadgeTag.COUNTRY
    return None


def detect_badge(summary: Optional[ArticleSummary]) -> Optional[BadgeTag]:
    """Classify a summary. Pure: the same summary always yields the same badge."""
    if summary is None:
        return None
    title = _lower(summary.title).strip()
    desc = _lower(summary.description).strip()

    if is_non_place_text(title, desc):
        return None

    # Settlements never take a POI badge: "Highland Park, Illinois" is "City in
    # Lake County, Illinois", neither a park nor a lake.
    if not SETTLEMENT_HEAD_RX.search(desc):
        badge = _match_rules([title, desc])
        if badge is not None:
            return badge

    badge = _admin_badge(desc)
    if badge is not None:
        return badge

    if PLACE_KEYWORD_RX.search(desc) and looks_like_place_name(summary.title):
        return BadgeTag.PLACE
    return None


def is_admin(summary: Optional[ArticleSummary]) -> bool:
    return detect_badge(summary) in ADMIN_BADGES


def is_place_or_poi(summary: Optional[ArticleSummary], allow_place_shaped: bool = False) -> bool:
    """True for summaries worth showing as a place or point of interest.

    With allow_place_shaped, an unbadged summary still passes when its title
    looks like a place name; this admits more false positives.
    """
    if summary is None or summary.is_disambiguation:
        return False
    if is_biography_or_media(summary.description):
        return False
    if is_non_place_text(summary.title, summary.description):
        return False
    if detect_badge(summary) is not None:
        return True
    return allow_place_shaped and looks_like_place_name(summary.title)
