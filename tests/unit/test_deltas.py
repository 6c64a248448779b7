import pytest

from report_reconcile.common.constants import BRAND_VISIBILITY_CHANGE_SCALE
from report_reconcile.pipeline.deltas import change_percent, compute_delta

AXIS = ("2024-01-01", "2024-01-08")


def _by_date(previous, latest):
    out = {}
    if previous is not None:
        out["2024-01-01"] = {"visibility": previous}
    if latest is not None:
        out["2024-01-08"] = {"visibility": latest}
    return out


def test_change_percent_increase():
    delta = compute_delta("eom.de", _by_date(10, 15), AXIS, "visibility")
    assert delta.latest_value == 15
    assert delta.previous_value == 10
    assert delta.change_percent == 50.0


def test_change_percent_drop_to_zero():
    delta = compute_delta("eom.de", _by_date(10, 0), AXIS, "visibility")
    assert delta.change_percent == -100.0


def test_change_percent_rounds_to_one_decimal():
    assert change_percent(4, 3) == 33.3
    assert change_percent(2, 3) == -33.3


@pytest.mark.parametrize("previous", [None, 0, 0.0, -4])
def test_degenerate_previous_gives_zero_change(previous):
    assert change_percent(5, previous) == 0.0
    assert change_percent(-5, previous) == 0.0


def test_previous_zero_latest_positive_is_not_infinite():
    delta = compute_delta("eom.de", _by_date(0, 5), AXIS, "visibility")
    assert delta.previous_value == 0
    assert delta.change_percent == 0.0


def test_single_date_axis_has_no_previous():
    delta = compute_delta("eom.de", {"2024-01-01": {"visibility": 10}}, ("2024-01-01",), "visibility")
    assert delta.latest_value == 10
    assert delta.previous_value is None
    assert delta.change_percent == 0.0


def test_subject_absent_on_latest_date_defaults_to_zero():
    delta = compute_delta("eom.de", _by_date(8, None), AXIS, "visibility")
    assert delta.latest_value == 0.0
    assert delta.previous_value == 8
    assert delta.change_percent == -100.0


def test_empty_axis():
    delta = compute_delta("eom.de", {}, (), "visibility")
    assert delta.latest_value == 0.0
    assert delta.previous_value is None
    assert delta.change_percent == 0.0


def test_brand_scale_is_a_tenth_of_domain_scale():
    assert change_percent(15, 10, scale=BRAND_VISIBILITY_CHANGE_SCALE) == 5.0
