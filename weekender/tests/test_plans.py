from __future__ import annotations

import pytest
from weekender.app.contracts import PlanStop, WeekendPlan
from weekender.app.errors import InvalidOrder, NotFoundError
from weekender.app.plans import (
    add_place,
    ensure_share_code,
    place_ids,
    referenced_places,
    remove_place,
    reorder,
    share_url,
)


def make_plan(*stops, share_code=None) -> WeekendPlan:
    return WeekendPlan(
        id=7,
        title="Fall weekend",
        places=[PlanStop(place_id=pid, note=note) for pid, note in stops],
        share_code=share_code,
    )


def test_add_place_appends_and_allows_repeats():
    plan = make_plan((1, None))
    updated = add_place(add_place(plan, 2, "lunch"), 1, "return visit")
    assert place_ids(updated) == [1, 2, 1]
    assert updated.places[1].note == "lunch"
    assert place_ids(plan) == [1]


def test_remove_place_drops_first_occurrence():
    plan = make_plan((1, "first"), (2, None), (1, "second"))
    updated = remove_place(plan, 1)
    assert place_ids(updated) == [2, 1]
    assert updated.places[1].note == "second"


def test_remove_missing_place_raises():
    with pytest.raises(NotFoundError):
        remove_place(make_plan((1, None)), 9)


def test_reorder_moves_notes_with_stops():
    plan = make_plan((1, "zoo"), (2, "museum"), (3, "dinner"))
    updated = reorder(plan, [3, 1, 2])
    assert [(s.place_id, s.note) for s in updated.places] == [
        (3, "dinner"),
        (1, "zoo"),
        (2, "museum"),
    ]


def test_reorder_repeated_ids_keep_note_order():
    plan = make_plan((1, "morning"), (2, None), (1, "evening"))
    updated = reorder(plan, [1, 1, 2])
    assert [s.note for s in updated.places] == ["morning", "evening", None]


@pytest.mark.parametrize("new_order", [[1, 2], [1, 2, 3, 4], [1, 2, 2], [3, 2, 9], []])
def test_reorder_rejects_non_permutations(new_order):
    plan = make_plan((1, None), (2, None), (3, None))
    with pytest.raises(InvalidOrder):
        reorder(plan, new_order)
    assert place_ids(plan) == [1, 2, 3]


def test_share_code_is_minted_once():
    plan = make_plan((1, None))
    shared, minted = ensure_share_code(plan)
    assert minted is True
    assert shared.share_code and len(shared.share_code) >= 16
    again, minted_again = ensure_share_code(shared)
    assert minted_again is False
    assert again.share_code == shared.share_code


def test_share_codes_differ_between_plans():
    first, _ = ensure_share_code(make_plan())
    second, _ = ensure_share_code(make_plan())
    assert first.share_code != second.share_code


def test_share_url():
    assert share_url("https://weekender.test/", "abc") == "https://weekender.test/shared/abc"


def test_referenced_places_in_itinerary_order_without_dangling():
    plan = make_plan((3, None), (1, None), (3, None), (99, None))
    places = {1: "one", 3: "three"}
    assert referenced_places(plan, places) == ["three", "one"]
