import pytest

from report_reconcile.common.errors import ContractError
from report_reconcile.common.models import AlignedSeries
from report_reconcile.pipeline.assemble import assemble_bundle


def test_assemble_bundle_labels_each_axis_date():
    bundle = assemble_bundle(
        ("2024-01-01", "2024-01-08"),
        [AlignedSeries(name="eom.de", values=(1.0, 2.0), metric="visibility")],
        {"competitor_count": 0},
    )

    assert bundle.date_labels == ("01.01.", "08.01.")
    assert bundle.kpis == {"competitor_count": 0}


def test_assemble_bundle_rejects_series_shorter_than_axis():
    short = AlignedSeries(name="eom.de", values=(1.0,))

    with pytest.raises(ContractError, match="eom.de"):
        assemble_bundle(("2024-01-01", "2024-01-08"), [short], {})


def test_contract_error_code():
    with pytest.raises(ContractError) as excinfo:
        assemble_bundle((), [AlignedSeries(name="x", values=(0.0,))], {})

    assert excinfo.value.error_code == "CONTRACT_ERROR"
