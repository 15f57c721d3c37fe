"""Transaction service client with exponential backoff retry logic"""

import httpx
import asyncio
from datetime import date
from typing import Optional
from ledgerly.config import settings
from ledgerly.domain.exceptions import TransactionServiceError
from ledgerly.domain.models import TransactionRecord
from ledgerly.infrastructure.observability.metrics import transaction_latency_histogram, transaction_failure_counter


class TransactionClient:
    """Client for recording money movements in the transaction service"""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.transactions_api_base
        self.max_retries = settings.transaction_max_retries
        self.backoff_base = settings.transaction_backoff_base
        self.timeout = settings.http_timeout_seconds
        self.transport = transport

    async def create_transaction(
        self,
        user_id: str,
        amount_cents: int,
        type: str,
        description: str,
        on: date,
        account_id: Optional[str] = None,
    ) -> TransactionRecord:
        """
        Record a transaction and return the persisted copy.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ...
        - Retries on 5xx errors and network failures; 4xx fails immediately
        - Tracks latency histogram and failure counter

        Raises:
            TransactionServiceError: rejected request or retries exhausted
        """
        payload = {
            "amount_cents": amount_cents,
            "type": type,
            "description": description,
            "date": on.isoformat(),
            "account_id": account_id,
        }

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with transaction_latency_histogram.time():
                        response = await client.post(
                            f"{self.base_url}/transactions",
                            json=payload,
                            headers={"X-User-ID": user_id},
                        )
                        response.raise_for_status()
                    data = response.json()
                    return TransactionRecord(
                        transaction_id=str(data["id"]),
                        amount_cents=data.get("amount_cents", amount_cents),
                        type=data.get("type", type),
                        description=data.get("description", description),
                        date=date.fromisoformat(data["date"]) if data.get("date") else on,
                        account_id=data.get("account_id", account_id),
                    )

                except httpx.HTTPStatusError as e:
                    transaction_failure_counter.inc()
                    if e.response.status_code < 500:
                        raise TransactionServiceError(
                            f"Transaction rejected: {e.response.status_code}"
                        ) from e
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise TransactionServiceError(
                            f"Transaction service error after {attempt} attempts: {e.response.status_code}"
                        ) from e

                except httpx.RequestError as e:
                    transaction_failure_counter.inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise TransactionServiceError(
                            f"Transaction service unreachable after {attempt} attempts"
                        ) from e

                except (KeyError, ValueError, TypeError) as e:
                    raise TransactionServiceError(f"Invalid transaction data: {e}") from e

                # Exponential backoff
                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)
