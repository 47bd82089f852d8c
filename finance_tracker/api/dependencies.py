"""Dependency injection for FastAPI endpoints"""

import logging
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request
from finance_tracker.config import settings
from finance_tracker.domain.exceptions import (
    AuthenticationInvalidError,
    AuthenticationMissingError,
    IdentityProviderError,
)
from finance_tracker.domain.llm_parser import LLMTransactionParser
from finance_tracker.domain.models import User
from finance_tracker.domain.parser import HeuristicParser, TransactionParser
from finance_tracker.infrastructure.clients.identity import IdentityClient
from finance_tracker.infrastructure.clients.llm import LLMClient
from finance_tracker.infrastructure.observability.metrics import auth_failure_counter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity provider client instance"""
    return IdentityClient()


def get_transaction_parser() -> TransactionParser:
    """Provide the configured parser backend (heuristic unless PARSER_BACKEND=llm)"""
    if settings.parser_backend == "llm":
        return LLMTransactionParser(
            LLMClient(),
            max_retries=settings.llm_max_retries,
            backoff_base=settings.llm_backoff_base,
        )
    return HeuristicParser()


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        AuthenticationMissingError: Header absent or token empty
        AuthenticationInvalidError: Scheme is not Bearer
    """
    if not authorization or not authorization.strip():
        raise AuthenticationMissingError("Authorization header missing")

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise AuthenticationInvalidError("Unsupported authorization scheme")
    token = token.strip()
    if not token:
        raise AuthenticationMissingError("Token missing")
    return token


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> User:
    """Resolve the bearer token to a user or reject the request"""
    request_id = get_request_id(request)

    try:
        token = extract_bearer_token(authorization)
        return await identity_client.get_user(token)

    except AuthenticationMissingError as e:
        auth_failure_counter.labels(reason="missing").inc()
        raise HTTPException(status_code=401, detail=str(e))

    except AuthenticationInvalidError as e:
        auth_failure_counter.labels(reason="invalid").inc()
        logging.warning(f"Token rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    except IdentityProviderError as e:
        auth_failure_counter.labels(reason="provider_unavailable").inc()
        logging.error(f"Identity provider error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Identity service unavailable")
