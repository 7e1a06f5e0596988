"""
Ledger view state - pagination/filter state machine for an account ledger.

Owns the filter set, the pagination cursor, the last loaded statement and the
loading status, and decides when the statement fetcher is called:
1. initialize (account/tenant known)
2. change_filters (always restarts at page 1)
3. change_page (ignored while a load is running)
4. retry (only after an error)

Every public operation returns immediately. The fetch runs as an asyncio task
and only the most recently issued request may update state; older responses
are discarded when they arrive.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Protocol, Set, Tuple, Union

import structlog

from ..config import get_settings
from ..context import RouteContext, TenantResolver
from ..integrations import StatementFetchError
from ..models import (
    FilterSet,
    LedgerEntry,
    LoadingStatus,
    LoadState,
    PaginationCursor,
    SourceType,
    StatementSnapshot,
)

logger = structlog.get_logger()

NO_TENANT_MESSAGE = "No tenant selected"
LOAD_FAILED_MESSAGE = "Failed to load transactions. Please try again."


class StatementFetcher(Protocol):
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
        ...


StateListener = Callable[["LedgerViewState"], None]


class LedgerViewState:
    """
    Controller behind a paginated, filterable ledger view.

    Must be driven from a running event loop: loads are scheduled with
    ``asyncio.create_task`` and the created task is returned so callers (and
    tests) can await it. Operations that do not start a load return None.
    """

    def __init__(
        self,
        fetcher: StatementFetcher,
        tenant_resolver: Optional[TenantResolver] = None,
        page_size: Optional[int] = None,
    ):
        self.settings = get_settings()
        self._fetcher = fetcher
        self._tenant_resolver = tenant_resolver

        self._account_id: Optional[str] = None
        self._tenant_override: Optional[str] = None
        self._tenant_id: Optional[str] = None
        self._filters = FilterSet()
        self._pagination = PaginationCursor.initial(
            page_size or self.settings.default_page_size
        )
        self._statement: Optional[StatementSnapshot] = None
        self._load_state = LoadState.idle()

        self._request_seq = 0
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[StateListener] = []
        self._route_unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def account_id(self) -> Optional[str]:
        return self._account_id

    @property
    def tenant_id(self) -> Optional[str]:
        """Tenant used by the most recent load, or the override before any load."""
        return self._tenant_id

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def pagination(self) -> PaginationCursor:
        return self._pagination

    @property
    def statement(self) -> Optional[StatementSnapshot]:
        return self._statement

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def entries(self) -> Tuple[LedgerEntry, ...]:
        return self._statement.entries if self._statement else ()

    @property
    def account_name(self) -> str:
        return self._statement.account_name if self._statement else ""

    @property
    def opening_balance(self) -> Decimal:
        return self._statement.opening_balance if self._statement else Decimal("0")

    @property
    def closing_balance(self) -> Decimal:
        return self._statement.closing_balance if self._statement else Decimal("0")

    @property
    def is_loading(self) -> bool:
        return self._load_state.is_loading

    @property
    def is_empty(self) -> bool:
        """Loaded successfully but the page has no entries."""
        return self._load_state.status == LoadingStatus.LOADED and not self.entries

    @staticmethod
    def entry_identity(entry: LedgerEntry) -> str:
        """Stable key for incremental rendering of list rows."""
        return entry.id

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(self)`` after every state transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Ledger state listener failed")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def initialize(
        self,
        account_id: Optional[str],
        tenant_id: Optional[str] = None,
        initial_filters: Optional[Union[FilterSet, Mapping[str, Any]]] = None,
    ) -> Optional[asyncio.Task]:
        """
        Set the account and tenant, seed filters and load the first page.

        Args:
            account_id: Account to show; without one the view stays idle
            tenant_id: Tenant override; falls back to the tenant resolver
            initial_filters: Filters supplied by navigation (e.g. an invoice)
        """
        if isinstance(initial_filters, FilterSet):
            filters = initial_filters
        else:
            try:
                filters = FilterSet().merge(initial_filters or {})
            except ValueError as e:
                logger.warning("Initial filters rejected", error=str(e))
                return None

        self._account_id = account_id or None
        self._tenant_override = tenant_id or None
        self._tenant_id = self._tenant_override
        self._filters = filters
        self._pagination = PaginationCursor.initial(self._pagination.page_size)

        logger.info(
            "Ledger view initialized",
            account_id=self._account_id,
            tenant_id=self._tenant_id,
        )
        self._notify()
        return self._load()

    def change_filters(
        self,
        changes: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> Optional[asyncio.Task]:
        """
        Merge filter changes and reload from page 1.

        Fields not mentioned keep their value; a field set to None is cleared.
        Page size is preserved.

        Invalid values (unknown fields, unknown source types, malformed
        dates) are logged and leave the view untouched.
        """
        merged = dict(changes or {})
        merged.update(fields)

        try:
            filters = self._filters.merge(merged)
        except ValueError as e:
            logger.warning("Filter change rejected", error=str(e))
            return None

        self._filters = filters
        self._pagination = self._pagination.reset_to_first_page()
        self._notify()
        return self._load()

    def change_page(self, page: int) -> Optional[asyncio.Task]:
        """Load another page with the current filters; ignored while loading."""
        if self._load_state.is_loading:
            logger.debug("Page change ignored while loading", page=page)
            return None
        if page < 1:
            logger.warning("Page change ignored, invalid page", page=page)
            return None

        self._pagination = self._pagination.with_page(page)
        self._notify()
        return self._load()

    def retry(self) -> Optional[asyncio.Task]:
        """Re-issue the failed request with unchanged filters and cursor."""
        if not self._load_state.is_error:
            return None
        return self._load()

    def bind_route(self, route: RouteContext) -> Optional[asyncio.Task]:
        """
        Follow a route context: account changes reload from page 1 and
        invoice changes are applied as filter changes.
        """
        if self._route_unsubscribe is not None:
            self._route_unsubscribe()
        self._route_unsubscribe = route.subscribe(self._on_route_change)

        if route.account_id is None:
            return None
        return self.initialize(
            route.account_id,
            self._tenant_override,
            self._filters.merge({"linked_invoice_id": route.linked_invoice_id}),
        )

    def _on_route_change(
        self, account_id: Optional[str], linked_invoice_id: Optional[str]
    ) -> None:
        if account_id and account_id != self._account_id:
            self._account_id = account_id
            self._filters = self._filters.merge({"linked_invoice_id": linked_invoice_id})
            self._pagination = self._pagination.reset_to_first_page()
            self._notify()
            self._load()
        elif self._account_id and linked_invoice_id != self._filters.linked_invoice_id:
            self.change_filters(linked_invoice_id=linked_invoice_id)

    async def wait_idle(self) -> None:
        """Wait until every scheduled load has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        if self._route_unsubscribe is not None:
            self._route_unsubscribe()
            self._route_unsubscribe = None
        await self.wait_idle()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Load orchestration
    # ------------------------------------------------------------------

    def _resolve_tenant(self) -> Optional[str]:
        if self._tenant_override:
            return self._tenant_override
        if self._tenant_resolver is not None:
            return self._tenant_resolver.get_current_tenant_id() or None
        return None

    def _load(self) -> Optional[asyncio.Task]:
        if not self._account_id:
            return None

        # Any newer load supersedes older in-flight requests, even a failed one
        self._request_seq += 1
        seq = self._request_seq

        tenant_id = self._resolve_tenant()
        self._tenant_id = tenant_id
        if not tenant_id:
            self._load_state = LoadState.error(NO_TENANT_MESSAGE)
            self._notify()
            return None

        self._load_state = LoadState.loading()
        self._notify()

        task = asyncio.get_running_loop().create_task(
            self._fetch(seq, tenant_id, self._account_id, self._pagination, self._filters)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fetch(
        self,
        seq: int,
        tenant_id: str,
        account_id: str,
        cursor: PaginationCursor,
        filters: FilterSet,
    ) -> None:
        log = logger.bind(
            request_seq=seq,
            tenant_id=tenant_id,
            account_id=account_id,
            page=cursor.current_page,
        )

        try:
            statement = await self._fetcher.fetch(
                tenant_id,
                account_id,
                cursor.current_page,
                cursor.page_size,
                start_date=filters.start_date,
                end_date=filters.end_date,
                source_type=filters.source_type,
                linked_invoice_id=filters.linked_invoice_id,
            )
        except StatementFetchError as e:
            if self._is_stale(seq):
                return
            log.error(
                "Failed to load statement",
                error=str(e),
                status_code=e.status_code,
            )
            self._fail()
            return
        except Exception as e:
            if self._is_stale(seq):
                return
            log.exception("Failed to load statement", error=str(e))
            self._fail()
            return

        if self._is_stale(seq):
            return

        self._statement = statement
        self._pagination = PaginationCursor.from_response(
            statement.page,
            statement.page_size,
            statement.total_count,
            default_page_size=cursor.page_size,
        )
        self._load_state = LoadState.loaded()
        log.debug(
            "Statement loaded",
            entries=len(statement.entries),
            total_count=statement.total_count,
        )
        self._notify()

    def _is_stale(self, seq: int) -> bool:
        if seq == self._request_seq:
            return False
        logger.debug(
            "Discarding stale statement response",
            request_seq=seq,
            latest_seq=self._request_seq,
        )
        return True

    def _fail(self) -> None:
        # Keep the previously displayed statement and cursor
        self._load_state = LoadState.error(LOAD_FAILED_MESSAGE)
        self._notify()
