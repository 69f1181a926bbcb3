# split_ledger/routes/inventory_split.py
from flask import Blueprint, jsonify, request
from pydantic import ValidationError as RequestValidationError

from split_ledger.db.session import get_session
from split_ledger.errors import SplitLedgerError
from split_ledger.logger import get_logger
from split_ledger.schemas.error_type import ErrorType
from split_ledger.schemas.requests import (
    CheckEligibilityRequest,
    ResolveSplitOptionsRequest,
    ExecuteSplitRequest,
    ListBucketsRequest,
)
from split_ledger.schemas.dto.eligibility_dto import EligibilityDTO
from split_ledger.schemas.dto.split_option_dto import SplitOptionsDTO
from split_ledger.schemas.dto.split_result_dto import SplitResultDTO
from split_ledger.schemas.dto.ledger_dto import BucketPageDTO, LedgerEntryDTO
from split_ledger.services.audit_log_service import AuditLogService
from split_ledger.services.eligibility_service import EligibilityService
from split_ledger.services.split_option_service import SplitOptionService
from split_ledger.services.split_execution_service import SplitExecutionService
from split_ledger.services.inventory_query_service import InventoryQueryService
from split_ledger.constants import SYSTEM_OPERATOR

logger = get_logger(__name__)

inventory_split_bp = Blueprint('inventory_split', __name__, url_prefix='/inventory')


def _error_response(e: SplitLedgerError):
    return jsonify(e.to_dict()), e.http_status


def _request_error_response(e: RequestValidationError):
    errors = e.errors(include_url=False, include_context=False, include_input=False)
    message = errors[0]["msg"] if errors else "Invalid request"
    return jsonify({
        "error": ErrorType.VALIDATION_ERROR.value,
        "message": message,
        "details": {"errors": errors},
    }), 400


@inventory_split_bp.route('/split/eligibility', methods=['GET'])
def check_eligibility():
    """Eligibility of a bucket addressed by entry_id or bucket_key."""
    try:
        req = CheckEligibilityRequest.model_validate(request.args.to_dict())
    except RequestValidationError as e:
        return _request_error_response(e)

    db = get_session()
    try:
        result = EligibilityService(db).check_eligibility(
            entry_id=req.entry_id,
            bucket_key=req.bucket_key,
            product_code=req.product_code,
        )
        return jsonify(EligibilityDTO.from_domain_model(result).model_dump())
    except SplitLedgerError as e:
        return _error_response(e)
    finally:
        db.close()


@inventory_split_bp.route('/split/options', methods=['GET'])
def resolve_split_options():
    """Compatible products for one row of a split plan."""
    try:
        req = ResolveSplitOptionsRequest.model_validate(request.args.to_dict())
    except RequestValidationError as e:
        return _request_error_response(e)

    db = get_session()
    try:
        options = SplitOptionService(db).resolve_split_options(
            product_code=req.product_code,
            remaining_width=req.remaining_width,
            is_first_row=req.is_first_row,
        )
        return jsonify(SplitOptionsDTO.from_domain_model(options).model_dump())
    except SplitLedgerError as e:
        return _error_response(e)
    finally:
        db.close()


@inventory_split_bp.route('/split', methods=['POST'])
def execute_split():
    """Execute a split plan; the service commits or rolls back."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({
            "error": ErrorType.VALIDATION_ERROR.value,
            "message": "Request body must be a JSON object",
        }), 400
    try:
        req = ExecuteSplitRequest.model_validate(payload)
    except RequestValidationError as e:
        return _request_error_response(e)

    db = get_session()
    try:
        service = SplitExecutionService(db=db, audit_log_service=AuditLogService(db))
        result = service.execute_split(
            splits=req.splits,
            entry_id=req.entry_id,
            bucket_key=req.bucket_key,
            requested_area=req.requested_area,
            requested_length=req.requested_length,
            operator_id=req.operator_id or SYSTEM_OPERATOR,
        )
        return jsonify(SplitResultDTO.from_domain_model(result).model_dump()), 201
    except SplitLedgerError as e:
        return _error_response(e)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@inventory_split_bp.route('/buckets', methods=['GET'])
def list_buckets():
    try:
        req = ListBucketsRequest.model_validate(request.args.to_dict())
    except RequestValidationError as e:
        return _request_error_response(e)

    db = get_session()
    try:
        service = InventoryQueryService(db, AuditLogService(db))
        page = service.list_buckets(
            mode=req.mode,
            item_kind=req.item_kind,
            order_id=req.order_id,
            page=req.page,
            limit=req.limit,
        )
        return jsonify(BucketPageDTO.from_domain_model(page).model_dump())
    except SplitLedgerError as e:
        return _error_response(e)
    finally:
        db.close()


@inventory_split_bp.route('/buckets/<bucket_key>/entries', methods=['GET'])
def list_bucket_entries(bucket_key):
    db = get_session()
    try:
        service = InventoryQueryService(db, AuditLogService(db))
        entries = service.list_bucket_entries(bucket_key)
        return jsonify({
            "bucket_key": bucket_key,
            "entries": [LedgerEntryDTO.from_orm_model(e).model_dump(mode="json") for e in entries],
        })
    except SplitLedgerError as e:
        return _error_response(e)
    finally:
        db.close()
