"""
Module: stock_kernel.selectors.request_selector
Responsibility: Read-only queries over shop requests, catalog names and
    shop-to-representative assignment, shaped for the fulfillment matcher.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Only requests with status ``pending`` contribute lines.
    - Two filtered selects, no joins: pending request ids first, then their
      lines, mirroring the persistence collaborator contract.
"""

from collections.abc import Iterable

from sqlalchemy import or_, select

from stock_kernel.domain.fulfillment import PendingLine
from stock_kernel.models.directory import Item, Route, Shop
from stock_kernel.models.request import Request, RequestItem, RequestStatus
from stock_kernel.selectors.base import BaseSelector


class RequestSelector(BaseSelector):
    """Pending-demand queries."""

    def pending_request_ids(self, shop_ids: Iterable[str]) -> dict[str, str]:
        """Map of pending request id -> shop id for the given shops."""
        shops = sorted(set(shop_ids))
        if not shops:
            return {}
        stmt = (
            select(Request.id, Request.shop_id)
            .where(
                Request.status == RequestStatus.PENDING.value,
                Request.shop_id.in_(shops),
            )
            .order_by(Request.created_at, Request.id)
        )
        return {str(req_id): shop_id for req_id, shop_id in self.session.execute(stmt)}

    def pending_lines(self, shop_ids: Iterable[str]) -> list[PendingLine]:
        """
        Every line of every pending request of the given shops.

        Lines with nothing left to deliver are included; discarding them is
        the caller's rule (see domain.fulfillment.aggregate_pending).
        """
        requests = self.pending_request_ids(shop_ids)
        if not requests:
            return []
        stmt = (
            select(RequestItem)
            .where(RequestItem.request_id.in_(list(requests)))
            .order_by(RequestItem.item_id, RequestItem.request_id, RequestItem.line_no)
        )
        return [
            PendingLine(
                request_id=str(row.request_id),
                shop_id=requests[str(row.request_id)],
                item_id=row.item_id,
                requested_qty=row.requested_qty,
                delivered_qty=row.delivered_qty or 0,
            )
            for row in self.session.execute(stmt).scalars()
        ]

    def item_names(self, item_ids: Iterable[str]) -> dict[str, str]:
        """Catalog names for the given item ids (unknown ids are omitted)."""
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        stmt = select(Item.code, Item.name).where(Item.code.in_(ids))
        return {code: name for code, name in self.session.execute(stmt)}


class ShopAssignmentSelector(BaseSelector):
    """Resolves which shops a representative serves."""

    def route_ids(self, rep_id: str) -> list[str]:
        stmt = select(Route.code).where(Route.rep_id == rep_id).order_by(Route.code)
        return list(self.session.execute(stmt).scalars())

    def assigned_shop_ids(self, rep_id: str) -> list[str]:
        """
        Shops assigned to the rep directly or through one of the rep's routes.

        Returns:
            Sorted, de-duplicated shop ids.
        """
        routes = self.route_ids(rep_id)
        condition = Shop.rep_id == rep_id
        if routes:
            condition = or_(condition, Shop.route_id.in_(routes))
        stmt = select(Shop.code).where(condition).distinct().order_by(Shop.code)
        return list(self.session.execute(stmt).scalars())
