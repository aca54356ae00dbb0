import math

from place_wiki.src.models import BadgeTag
from place_wiki.src.scoring import BASE_SCORES, base_score, rank_by_score, score_item


def test_every_badge_has_a_base_score():
    assert set(BASE_SCORES) == set(BadgeTag)


def test_museum_near_beats_river_nearer():
    assert score_item(BadgeTag.MUSEUM, 2.0) == 10
    assert score_item(BadgeTag.RIVER, 1.0) == 8


def test_bonus_vanishes_beyond_cap():
    assert score_item(BadgeTag.PARK, 6.0) == 6
    assert score_item(BadgeTag.PARK, 25.0) == 6


def test_closer_never_scores_lower():
    previous = None
    for d in [30, 10, 6, 5, 3, 1, 0.5, 0]:
        s = score_item(BadgeTag.LAKE, d)
        if previous is not None:
            assert s >= previous
        previous = s


def test_unknown_distance_gets_no_bonus():
    assert score_item(BadgeTag.MUSEUM, None) == 6
    assert score_item(BadgeTag.MUSEUM, math.nan) == 6
    assert score_item(BadgeTag.MUSEUM, math.inf) == 6


def test_unknown_badge_scores_like_place():
    assert base_score(None) == BASE_SCORES[BadgeTag.PLACE]


def test_rank_is_stable_for_ties():
    items = [("a", 5), ("b", 7), ("c", 5), ("d", 7)]
    assert [name for name, _ in rank_by_score(items, key=lambda p: p[1])] == ["b", "d", "a", "c"]
