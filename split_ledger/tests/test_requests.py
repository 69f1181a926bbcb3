import pytest
from pydantic import ValidationError

from split_ledger.schemas.requests import (
    CheckEligibilityRequest,
    ExecuteSplitRequest,
    ListBucketsRequest,
    ResolveSplitOptionsRequest,
)


def test_execute_split_accepts_legacy_field_names():
    req = ExecuteSplitRequest.model_validate({
        "bucket_key": "P_1000 - 2.5",
        "requested_sqm": 40,
        "splits": [{"product_code": "P_600"}, {"product_code": " P_400 "}],
    })
    assert req.requested_area == 40
    assert req.requested_length is None
    assert req.splits == ["P_600", "P_400"]


def test_execute_split_requires_exactly_one_quantity():
    with pytest.raises(ValidationError):
        ExecuteSplitRequest.model_validate({"entry_id": "x", "splits": ["P_600"]})
    with pytest.raises(ValidationError):
        ExecuteSplitRequest.model_validate({
            "entry_id": "x", "requested_area": 1, "requested_length_m": 1, "splits": ["P_600"],
        })


@pytest.mark.parametrize("splits", [[], [""], [{"product_code": None}]])
def test_execute_split_rejects_bad_rows(splits):
    with pytest.raises(ValidationError):
        ExecuteSplitRequest.model_validate({"entry_id": "x", "requested_area": 1, "splits": splits})


def test_execute_split_rejects_non_positive_area():
    with pytest.raises(ValidationError):
        ExecuteSplitRequest.model_validate({"entry_id": "x", "requested_area": 0, "splits": ["P_600"]})


def test_eligibility_needs_an_identifier():
    with pytest.raises(ValidationError):
        CheckEligibilityRequest.model_validate({"entry_id": " ", "product_code": "P_1000"})


def test_split_options_query_string_values():
    req = ResolveSplitOptionsRequest.model_validate(
        {"product_code": "P_1000", "remaining_width": "600", "is_first_split": "true"}
    )
    assert req.remaining_width == 600
    assert req.is_first_row is True


def test_list_buckets_defaults():
    req = ListBucketsRequest.model_validate({"mode": ""})
    assert (req.mode, req.page, req.limit) == ("all", 1, 10)
