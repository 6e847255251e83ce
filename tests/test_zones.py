import random

import pytest

from kitchen_gce.errors import ConfigurationError
from kitchen_gce.zones import select_zone, zones_for_area

US_ZONES = {"us-central1-a", "us-central1-b", "us-central2-a"}
EUROPE_ZONES = {"europe-west1-a"}


def test_default_area_is_us():
    assert select_zone() in US_ZONES


def test_europe():
    assert select_zone(area="europe") in EUROPE_ZONES


def test_any_chooses_from_all_zones():
    seen = {select_zone(area="any", rng=random.Random(seed)) for seed in range(50)}
    assert seen <= US_ZONES | EUROPE_ZONES
    assert len(seen) > 1


def test_any_is_union_of_catalog():
    assert {z.name for z in zones_for_area("any")} == US_ZONES | EUROPE_ZONES


def test_zone_override_skips_selection(mocker):
    rng = mocker.Mock()
    assert select_zone(area="us", zone_name="asia-east1-a", rng=rng) == "asia-east1-a"
    rng.choice.assert_not_called()


def test_injected_rng_is_used(mocker):
    rng = mocker.Mock()
    rng.choice.return_value = "us-central1-b"

    assert select_zone(area="us", rng=rng) == "us-central1-b"
    rng.choice.assert_called_once_with(
        ["us-central1-a", "us-central1-b", "us-central2-a"]
    )


def test_empty_area_raises():
    with pytest.raises(ConfigurationError):
        select_zone(area="europe", catalog={"us": ["us-central1-a"], "europe": []})
