# split_ledger/schemas/requests.py
"""
Request models for the three split operations and the bucket listing.

Business rules:
 - entry_id or bucket_key identifies the source bucket (at least one)
 - product_code: required for split options, cannot be blank
 - remaining_width: required, positive integer
 - is_first_row: optional boolean, default false
 - requested_area / requested_length: exactly one, positive
 - splits: at least one product code, either as strings or {"product_code": ...} objects
"""
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from split_ledger.constants import DEFAULT_LIMIT, DEFAULT_PAGE, LIST_MODE_ALL


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


class SourceIdentifier(BaseModel):
    entry_id: Optional[str] = None
    bucket_key: Optional[str] = None

    @field_validator("entry_id", "bucket_key", mode="before")
    @classmethod
    def _strip(cls, value):
        return _blank_to_none(value)


class CheckEligibilityRequest(SourceIdentifier):
    product_code: Optional[str] = None

    @field_validator("product_code", mode="before")
    @classmethod
    def _strip_code(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _require_identifier(self):
        if not self.entry_id and not self.bucket_key:
            raise ValueError("Either entry_id or bucket_key must be provided")
        return self


class ResolveSplitOptionsRequest(BaseModel):
    product_code: str = Field(min_length=1)
    remaining_width: int = Field(gt=0)
    is_first_row: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_first_row", "is_first_split"),
    )

    @field_validator("product_code", mode="before")
    @classmethod
    def _strip_code(cls, value):
        return value.strip() if isinstance(value, str) else value


class ExecuteSplitRequest(SourceIdentifier):
    requested_area: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("requested_area", "requested_sqm"),
    )
    requested_length: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("requested_length", "requested_length_m"),
    )
    splits: List[str] = Field(min_length=1)
    operator_id: Optional[str] = None

    @field_validator("splits", mode="before")
    @classmethod
    def _flatten_rows(cls, value):
        # rows may arrive as {"product_code": "..."} objects
        if isinstance(value, list):
            return [row.get("product_code") if isinstance(row, dict) else row for row in value]
        return value

    @field_validator("splits")
    @classmethod
    def _no_blank_codes(cls, value: List[str]) -> List[str]:
        codes = [code.strip() for code in value]
        if any(not code for code in codes):
            raise ValueError("product_code is required and cannot be blank")
        return codes

    @model_validator(mode="after")
    def _check_identifiers(self):
        if not self.entry_id and not self.bucket_key:
            raise ValueError("Either entry_id or bucket_key must be provided")
        if (self.requested_area is None) == (self.requested_length is None):
            raise ValueError("Exactly one of requested_area or requested_length must be provided")
        return self


class ListBucketsRequest(BaseModel):
    mode: str = LIST_MODE_ALL
    item_kind: Optional[str] = None
    order_id: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @field_validator("mode", mode="before")
    @classmethod
    def _default_mode(cls, value):
        return _blank_to_none(value) or LIST_MODE_ALL

    @field_validator("item_kind", "order_id", mode="before")
    @classmethod
    def _strip(cls, value):
        return _blank_to_none(value)
