"""/transactions - parse, create, list, update and delete a user's transactions"""

import asyncio
import datetime as dt
import logging
import math
import time
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import (
    CategoryListResponse,
    MessageResponse,
    ParsedTransactionResponse,
    ParseRequest,
    TransactionCreateRequest,
    TransactionResponse,
    TransactionUpdateRequest,
)
from finance_tracker.api.dependencies import get_current_user, get_request_id, get_transaction_parser
from finance_tracker.config import settings
from finance_tracker.domain.categories import CATEGORIES
from finance_tracker.domain.exceptions import (
    AuthorizationDeniedError,
    LLMServiceError,
    ParseFailureError,
    TransactionNotFoundError,
    UpstreamQuotaExhaustedError,
    UpstreamRateLimitedError,
)
from finance_tracker.domain.models import Transaction, User
from finance_tracker.domain.parser import TransactionParser
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.infrastructure.database.repositories import TransactionRepository, record_to_transaction
from finance_tracker.infrastructure.observability.metrics import (
    auth_failure_counter,
    record_parse,
    transaction_mutation_counter,
)
from finance_tracker.infrastructure.observability.logging import log_parse, log_transaction_event

router = APIRouter()


def to_response(txn: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        user_id=txn.user_id,
        amount=txn.amount,
        description=txn.description,
        category=txn.category,
        type=txn.type,
        date=txn.date,
        created_at=txn.created_at,
        confidence=txn.confidence,
    )


def _parse_transaction_id(transaction_id: str) -> uuid.UUID:
    # A malformed id can never exist, so it is reported as not found
    try:
        return uuid.UUID(transaction_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Transaction not found")


@router.post("/parse", response_model=ParsedTransactionResponse)
async def parse_transaction(
    request_body: ParseRequest,
    request: Request,
    user: User = Depends(get_current_user),
    parser: TransactionParser = Depends(get_transaction_parser),
):
    """
    Turn free text into a candidate transaction for the user to confirm.

    Nothing is persisted; the client POSTs the confirmed candidate.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        parsed = await asyncio.wait_for(parser.parse(request_body.text), timeout=settings.parse_timeout_seconds)

    except asyncio.TimeoutError:
        record_parse(parser.name, success=False)
        logging.error("Parse timed out", extra={"request_id": request_id})
        raise HTTPException(status_code=504, detail="Transaction parsing timed out")

    except ParseFailureError as e:
        record_parse(parser.name, success=False)
        logging.error(f"Undecodable model output: {e}", extra={"request_id": request_id, "raw_text": e.raw_text})
        raise HTTPException(status_code=502, detail={"error": str(e), "details": e.raw_text})

    except UpstreamQuotaExhaustedError as e:
        record_parse(parser.name, success=False)
        logging.error(f"LLM quota exhausted: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=429, detail="AI quota exceeded. Please check your billing details.")

    except UpstreamRateLimitedError as e:
        record_parse(parser.name, success=False)
        logging.warning(f"LLM rate limited after retries: {e}", extra={"request_id": request_id})
        headers = {"Retry-After": str(math.ceil(e.retry_after))} if e.retry_after else None
        raise HTTPException(status_code=503, detail="AI service is busy, try again later", headers=headers)

    except LLMServiceError as e:
        record_parse(parser.name, success=False)
        logging.error(f"LLM error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="AI parsing failed")

    except Exception as e:
        record_parse(parser.name, success=False)
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_parse(parser.name, success=True, confidence=parsed.confidence)
    log_parse(request_id, user.id, parser.name, parsed.category, parsed.confidence, duration_ms)

    return ParsedTransactionResponse(
        amount=parsed.amount,
        description=parsed.description,
        category=parsed.category,
        type=parsed.type,
        confidence=parsed.confidence,
    )


@router.get("/categories", response_model=CategoryListResponse)
def list_categories():
    """Fixed category set accepted by create/update"""
    return CategoryListResponse(categories=list(CATEGORIES))


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Persist a confirmed transaction; the server assigns its id"""
    request_id = get_request_id(request)

    try:
        repo = TransactionRepository(db)
        db_txn = repo.create_transaction(
            user_id=user.id,
            amount=request_body.amount,
            category=request_body.category,
            description=request_body.description,
            txn_type=request_body.type,
            txn_date=request_body.date or dt.date.today(),
            confidence=request_body.confidence,
        )
        db.commit()

        txn = record_to_transaction(db_txn)
        transaction_mutation_counter.labels(operation="created").inc()
        log_transaction_event(request_id, user.id, "created", txn.id)
        return to_response(txn)

    except Exception as e:
        db.rollback()
        logging.error(f"Create transaction error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to create transaction")


@router.get("", response_model=List[TransactionResponse])
def list_transactions(
    request: Request,
    category: Optional[str] = Query(None, description="Only this category"),
    start_date: Optional[dt.date] = Query(None, alias="startDate"),
    end_date: Optional[dt.date] = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's transactions, newest first"""
    request_id = get_request_id(request)

    try:
        records = TransactionRepository(db).list_transactions(
            user.id,
            category=category,
            start_date=start_date,
            end_date=end_date,
        )
        return [to_response(record_to_transaction(r)) for r in records]

    except Exception as e:
        logging.error(f"List transactions error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    request_body: TransactionUpdateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update fields of a transaction the caller owns"""
    request_id = get_request_id(request)
    txn_uuid = _parse_transaction_id(transaction_id)

    try:
        changes = request_body.model_dump(exclude_unset=True)

        db_txn = TransactionRepository(db).update_transaction(txn_uuid, user.id, changes)
        db.commit()

        txn = record_to_transaction(db_txn)
        transaction_mutation_counter.labels(operation="updated").inc()
        log_transaction_event(request_id, user.id, "updated", txn.id)
        return to_response(txn)

    except TransactionNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Transaction not found")

    except AuthorizationDeniedError as e:
        db.rollback()
        auth_failure_counter.labels(reason="forbidden").inc()
        logging.warning(f"Update denied: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail="Unauthorized")

    except Exception as e:
        db.rollback()
        logging.error(f"Update transaction error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to update transaction")


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a transaction the caller owns"""
    request_id = get_request_id(request)
    txn_uuid = _parse_transaction_id(transaction_id)

    try:
        TransactionRepository(db).delete_transaction(txn_uuid, user.id)
        db.commit()

        transaction_mutation_counter.labels(operation="deleted").inc()
        log_transaction_event(request_id, user.id, "deleted", str(txn_uuid))
        return MessageResponse(message="Transaction deleted")

    except TransactionNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Transaction not found")

    except AuthorizationDeniedError as e:
        db.rollback()
        auth_failure_counter.labels(reason="forbidden").inc()
        logging.warning(f"Delete denied: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail="Unauthorized")

    except Exception as e:
        db.rollback()
        logging.error(f"Delete transaction error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to delete transaction")
