"""
Statements API client for fetching one page of an account's ledger.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

import httpx
import structlog

from ..config import get_settings
from ..models import FilterSet, LedgerEntry, SourceType, StatementSnapshot

logger = structlog.get_logger()


class StatementFetchError(Exception):
    """Custom exception for statements API errors."""
    def __init__(self, message: str, status_code: int = 0, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class StatementsApiClient:
    """
    Client for the statements API.
    Fetches a single page of a statement; never retries on its own.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = get_settings()
        self.base_url = base_url or self.settings.statements_api_url
        self.token = token or self.settings.statements_api_token
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.settings.statements_api_timeout_seconds,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "StatementsApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs,
    ) -> Dict[str, Any]:
        """Make a request to the statements API."""
        client = await self._get_client()

        try:
            response = await client.request(method, endpoint, **kwargs)
        except httpx.TimeoutException:
            raise StatementFetchError("Request timeout")
        except httpx.RequestError as e:
            raise StatementFetchError(f"Request error: {str(e)}")

        if response.status_code == 401:
            raise StatementFetchError(
                "Authentication failed. Check the API token.",
                status_code=401,
            )

        if response.status_code == 404:
            raise StatementFetchError(
                f"Resource not found: {endpoint}",
                status_code=404,
            )

        if response.status_code >= 400:
            error_detail: Any = response.text
            try:
                error_detail = response.json()
            except ValueError:
                pass
            raise StatementFetchError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                details=error_detail,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise StatementFetchError(
                "Response body is not valid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise StatementFetchError(
                "Unexpected statement response format",
                status_code=response.status_code,
                details=body,
            )
        return body

    async def fetch(
        self,
        tenant_id: str,
        account_id: str,
        page: int,
        page_size: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source_type: Optional[SourceType] = None,
        linked_invoice_id: Optional[str] = None,
    ) -> StatementSnapshot:
        """
        Fetch one page of an account statement.

        Args:
            tenant_id: Tenant owning the account
            account_id: Account identifier
            page: 1-based page number
            page_size: Entries per page
            start_date: Only entries on or after this date
            end_date: Only entries on or before this date
            source_type: Only entries of this source type
            linked_invoice_id: Only entries referencing this invoice

        Returns:
            StatementSnapshot with entries matching every given filter
        """
        if not tenant_id:
            raise ValueError("tenant_id is required")
        if not account_id:
            raise ValueError("account_id is required")
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")

        params: Dict[str, Union[str, int]] = {"page": page, "pageSize": page_size}

        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()
        if source_type:
            params["sourceType"] = SourceType(source_type).value
        if linked_invoice_id:
            params["invoiceId"] = linked_invoice_id

        response = await self._request(
            "GET",
            f"/api/tenants/{tenant_id}/accounts/{account_id}/statement",
            params=params,
            headers={"X-Tenant-Id": tenant_id},
        )

        try:
            statement = self._parse_statement(response, account_id)
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise StatementFetchError(
                f"Malformed statement response: {e}",
                details=response,
            ) from e

        requested = FilterSet(
            start_date=start_date,
            end_date=end_date,
            source_type=source_type,
            linked_invoice_id=linked_invoice_id,
        )
        if requested.is_empty:
            return statement

        kept = tuple(e for e in statement.entries if requested.matches(e))
        if len(kept) != len(statement.entries):
            logger.warning(
                "Dropped statement entries outside requested filters",
                account_id=account_id,
                dropped=len(statement.entries) - len(kept),
            )
            statement = StatementSnapshot(
                account_id=statement.account_id,
                account_name=statement.account_name,
                opening_balance=statement.opening_balance,
                closing_balance=statement.closing_balance,
                entries=kept,
                total_count=statement.total_count,
                page=statement.page,
                page_size=statement.page_size,
                period_start=statement.period_start,
                period_end=statement.period_end,
            )
        return statement

    def _parse_statement(
        self, data: Dict[str, Any], account_id: str
    ) -> StatementSnapshot:
        """Parse a statement from API response."""
        transactions = data.get("transactions") or []

        return StatementSnapshot(
            account_id=data.get("accountId") or account_id,
            account_name=data.get("accountName") or "",
            opening_balance=_parse_decimal(data.get("openingBalance")),
            closing_balance=_parse_decimal(data.get("closingBalance")),
            entries=tuple(self._parse_entry(item) for item in transactions),
            total_count=int(data.get("totalCount") or 0),
            page=int(data.get("page") or 0),
            page_size=int(data.get("pageSize") or 0),
            period_start=_parse_date(data.get("periodStart")),
            period_end=_parse_date(data.get("periodEnd")),
        )

    def _parse_entry(self, data: Dict[str, Any]) -> LedgerEntry:
        """Parse a ledger entry from API response."""
        raw_source = data["sourceType"]
        try:
            source_type: Union[SourceType, str] = SourceType(raw_source)
        except ValueError:
            source_type = raw_source

        return LedgerEntry(
            id=str(data["id"]),
            transaction_date=_parse_timestamp(data["transactionDate"]),
            ledger_account=data.get("ledgerAccount") or "",
            debit_amount=_parse_decimal(data.get("debitAmount")),
            credit_amount=_parse_decimal(data.get("creditAmount")),
            description=data.get("description") or "",
            source_type=source_type,
            source_reference_id=data.get("sourceReferenceId"),
        )


def _parse_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return _parse_timestamp(value).date()
