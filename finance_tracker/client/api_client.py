"""Async HTTP client for the finance tracker API"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from finance_tracker.domain.exceptions import (
    APIRequestError,
    AuthenticationInvalidError,
    AuthenticationMissingError,
    AuthorizationDeniedError,
    LLMServiceError,
    ParseFailureError,
    TransactionNotFoundError,
    UpstreamQuotaExhaustedError,
    UpstreamRateLimitedError,
)
from finance_tracker.domain.models import ParsedTransaction, Transaction, User


def transaction_from_json(data: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=data["id"],
        user_id=data["userId"],
        amount=Decimal(str(data["amount"])),
        description=data["description"],
        category=data["category"],
        type=data["type"],
        date=date.fromisoformat(data["date"]),
        created_at=datetime.fromisoformat(data["createdAt"]),
        confidence=data.get("confidence"),
    )


def _detail(response: httpx.Response) -> Any:
    try:
        return response.json().get("detail")
    except (ValueError, AttributeError):
        return response.text


class FinanceTrackerClient:
    """Thin wrapper over the REST surface; raises domain exceptions on errors"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, ownership_checked: bool = False, **kwargs) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            response = await client.request(method, path, headers=headers, **kwargs)

        if response.status_code < 400:
            return response.json()

        detail = _detail(response)
        status = response.status_code
        if status == 401:
            raise AuthenticationMissingError(str(detail))
        if status == 403:
            if ownership_checked and detail == "Unauthorized":
                raise AuthorizationDeniedError(str(detail))
            raise AuthenticationInvalidError(str(detail))
        if status == 404 and ownership_checked:
            raise TransactionNotFoundError(str(detail))
        if status == 429:
            raise UpstreamQuotaExhaustedError(str(detail))
        if status == 503 and path.endswith("/parse"):
            retry_after = response.headers.get("retry-after")
            raise UpstreamRateLimitedError(str(detail), retry_after=float(retry_after) if retry_after else None)
        if status == 502 and isinstance(detail, dict):
            raise ParseFailureError(str(detail.get("error")), raw_text=str(detail.get("details")))
        if status == 502:
            raise LLMServiceError(str(detail))
        raise APIRequestError(f"{method} {path} failed: {detail}", status_code=status)

    async def verify(self) -> User:
        data = await self._request("POST", "/auth/verify")
        return User(**data)

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def parse(self, text: str) -> ParsedTransaction:
        data = await self._request("POST", "/transactions/parse", json={"text": text})
        return ParsedTransaction(
            amount=Decimal(str(data["amount"])),
            description=data["description"],
            category=data["category"],
            type=data["type"],
            confidence=data["confidence"],
        )

    async def list_transactions(
        self,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Transaction]:
        params = {}
        if category:
            params["category"] = category
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()

        data = await self._request("GET", "/transactions", params=params)
        return [transaction_from_json(item) for item in data]

    async def create_transaction(
        self,
        amount: Decimal,
        category: str,
        description: str,
        txn_type: str,
        txn_date: Optional[date] = None,
        confidence: Optional[float] = None,
    ) -> Transaction:
        payload: Dict[str, Any] = {
            "amount": float(amount),
            "category": category,
            "description": description,
            "type": txn_type,
        }
        if txn_date is not None:
            payload["date"] = txn_date.isoformat()
        if confidence is not None:
            payload["confidence"] = confidence

        data = await self._request("POST", "/transactions", json=payload)
        return transaction_from_json(data)

    async def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        payload = {}
        for field, value in changes.items():
            if isinstance(value, Decimal):
                value = float(value)
            elif isinstance(value, date):
                value = value.isoformat()
            payload[field] = value

        data = await self._request("PUT", f"/transactions/{transaction_id}", ownership_checked=True, json=payload)
        return transaction_from_json(data)

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._request("DELETE", f"/transactions/{transaction_id}", ownership_checked=True)
