"""
Context collaborators consumed by the ledger view: the current tenant and the
account/invoice identifiers supplied by navigation.
"""

from typing import Callable, List, Mapping, Optional, Protocol

import structlog

from .config import get_settings

logger = structlog.get_logger()

RouteListener = Callable[[Optional[str], Optional[str]], None]


class TenantResolver(Protocol):
    def get_current_tenant_id(self) -> Optional[str]:
        ...


class TenantService:
    """Holds the tenant currently selected by the user."""

    def __init__(self, tenant_id: Optional[str] = None):
        self._tenant_id = tenant_id or get_settings().default_tenant_id or None

    def get_current_tenant_id(self) -> Optional[str]:
        return self._tenant_id

    def set_current_tenant_id(self, tenant_id: Optional[str]) -> None:
        self._tenant_id = tenant_id or None
        logger.info("Tenant selected", tenant_id=self._tenant_id)

    def clear(self) -> None:
        self._tenant_id = None


class RouteContext:
    """
    Account id from the enclosing route plus the ``invoiceId`` query parameter.

    Listeners are called with ``(account_id, linked_invoice_id)`` whenever
    either value changes.
    """

    INVOICE_QUERY_PARAM = "invoiceId"

    def __init__(
        self,
        account_id: Optional[str] = None,
        linked_invoice_id: Optional[str] = None,
    ):
        self.account_id = account_id or None
        self.linked_invoice_id = linked_invoice_id or None
        self._listeners: List[RouteListener] = []

    def subscribe(self, listener: RouteListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(
        self,
        account_id: Optional[str] = None,
        query_params: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Apply new route values and notify listeners if anything changed.

        ``account_id=None`` keeps the current account. ``query_params=None``
        keeps the current invoice; a mapping without ``invoiceId`` clears it.

        Returns:
            True if listeners were notified
        """
        new_account = account_id or self.account_id
        new_invoice = self.linked_invoice_id
        if query_params is not None:
            new_invoice = query_params.get(self.INVOICE_QUERY_PARAM) or None

        if new_account == self.account_id and new_invoice == self.linked_invoice_id:
            return False

        self.account_id = new_account
        self.linked_invoice_id = new_invoice
        for listener in list(self._listeners):
            listener(self.account_id, self.linked_invoice_id)
        return True
