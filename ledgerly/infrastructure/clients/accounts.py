"""Account service HTTP client for verifying account references"""

import httpx
from typing import Any, Dict
from ledgerly.domain.exceptions import AccountServiceError, NotFoundError
from ledgerly.config import settings
from ledgerly.infrastructure.observability.metrics import account_lookup_failures_counter


class AccountClient:
    """Client for the external account API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.accounts_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_account(self, user_id: str, account_id: str) -> Dict[str, Any]:
        """
        Resolve an account id in the user's scope.

        Raises:
            NotFoundError: account does not exist for this user
            AccountServiceError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/accounts/{account_id}",
                    headers={"X-User-ID": user_id},
                )
                if response.status_code == 404:
                    raise NotFoundError(f"Account {account_id} not found")
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                account_lookup_failures_counter.inc()
                raise AccountServiceError(f"Account API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                account_lookup_failures_counter.inc()
                raise AccountServiceError(f"Account API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                account_lookup_failures_counter.inc()
                raise AccountServiceError(f"Account API unreachable: {e}") from e
            except ValueError as e:
                raise AccountServiceError(f"Invalid account data: {e}") from e
