from types import SimpleNamespace

import pytest

from volunteerhub.services import capacity


def opportunity(max_volunteers, status="open"):
    return SimpleNamespace(max_volunteers=max_volunteers, status=status)


def test_unlimited_capacity():
    unlimited = opportunity(None)

    assert capacity.spots_remaining(unlimited, 500) is None
    assert capacity.is_full(unlimited, 500) is False


@pytest.mark.parametrize(
    "max_volunteers,count,expected",
    [(5, 0, 5), (5, 3, 2), (5, 5, 0), (5, 7, 0), (0, 0, 0)],
)
def test_spots_remaining(max_volunteers, count, expected):
    assert capacity.spots_remaining(opportunity(max_volunteers), count) == expected


def test_occupying_statuses():
    assert capacity.occupies_slot("confirmed")
    assert capacity.occupies_slot("pending")
    assert capacity.occupies_slot("attended")
    assert not capacity.occupies_slot("declined")
    assert not capacity.occupies_slot("no_show")


def test_derived_status_flips_open_and_full():
    assert capacity.derived_status(opportunity(2, "open"), 2) == "full"
    assert capacity.derived_status(opportunity(2, "full"), 1) == "open"
    assert capacity.derived_status(opportunity(None, "full"), 10) == "open"


def test_derived_status_leaves_closed_opportunities():
    assert capacity.derived_status(opportunity(2, "canceled"), 2) == "canceled"
    assert capacity.derived_status(opportunity(2, "completed"), 0) == "completed"
