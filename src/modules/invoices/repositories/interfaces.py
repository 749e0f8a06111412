"""Invoice repository interface.

Besides the generic CRUD contract, the order lifecycle engine needs two
look-ups keyed by sales order: "is this order invoiced?" and "give me
its invoice".
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.invoices.models import Invoice


class IInvoiceRepository(IRepository["Invoice"]):
    """Repository contract for invoices."""

    @abstractmethod
    def exists_for_order(self, order_id: Any, exclude_id: Any = None) -> bool:
        """Whether an invoice (other than ``exclude_id``) references the order."""

    @abstractmethod
    def get_by_order_id(self, order_id: Any) -> Optional[Invoice]:
        """Retrieve the invoice of a sales order, if any."""
