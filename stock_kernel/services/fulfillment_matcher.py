"""
RequestFulfillmentMatcher -- can a representative cover what shops are waiting on?

Responsibility:
    Aggregates outstanding request lines across the shops a representative
    serves and classifies each item as READY or DEFICIT against the
    representative's carried stock for today.

Architecture position:
    Kernel > Services (read-only orchestration).  Reads requests through
    RequestSelector, balances through BalanceProjector, and applies the
    pure rules in domain.fulfillment.  Never writes.

Algorithm:
    1. Pending requests of the given shops.
    2. Their lines; pending = requested - delivered; lines with pending <= 0
       are discarded.
    3. Sum pending per item across shops.
    4. available = max(0, signed balance of the rep over
       DailyResetPolicy.current_window(now)).
    5. READY if available >= aggregate pending, else DEFICIT.

Invariants enforced:
    - Output is sorted by item_id (stable for a fixed input).
    - Items with zero aggregate pending never appear.
    - Clamping affects the reported ``available_stock`` only; ledger
      balances are never altered.
"""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.orm import Session

from stock_kernel.domain.daily_reset import DailyResetPolicy
from stock_kernel.domain.fulfillment import (
    DeploymentStatus,
    ItemFulfillment,
    aggregate_pending,
    build_fulfillments,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.selectors.balance_projector import BalanceProjector
from stock_kernel.selectors.request_selector import (
    RequestSelector,
    ShopAssignmentSelector,
)

logger = get_logger("services.fulfillment_matcher")


class RequestFulfillmentMatcher:
    """Classifies pending demand against a representative's daily stock."""

    def __init__(self, session: Session, reset_policy: DailyResetPolicy | None = None):
        self._session = session
        self._policy = reset_policy or DailyResetPolicy()
        self._requests = RequestSelector(session)
        self._projector = BalanceProjector(session)
        self._assignments = ShopAssignmentSelector(session)

    def match(
        self,
        rep_id: str,
        shop_ids: Iterable[str],
        now: datetime,
    ) -> list[ItemFulfillment]:
        """
        Deployment status of every item the given shops are waiting on.

        Args:
            rep_id: Representative whose carried stock is checked.
            shop_ids: Shops whose pending requests form the demand.
            now: Current instant (timezone-aware); fixes the daily window.

        Returns:
            ItemFulfillment rows sorted by item_id.
        """
        shops = set(shop_ids)
        window = self._policy.current_window(now, rep_id)

        with LogContext.bind(actor_id=rep_id):
            if not shops:
                logger.info("fulfillment_matched", extra={"shop_count": 0, "item_count": 0})
                return []

            demand = aggregate_pending(self._requests.pending_lines(shops))
            if not demand:
                logger.info(
                    "fulfillment_matched",
                    extra={"shop_count": len(shops), "item_count": 0},
                )
                return []

            balances = self._projector.project_all_window(rep_id, window)
            names = self._requests.item_names(demand)
            results = build_fulfillments(demand, balances, names)

            logger.info(
                "fulfillment_matched",
                extra={
                    "shop_count": len(shops),
                    "item_count": len(results),
                    "deficit_count": sum(
                        1 for r in results
                        if r.deployment_status is DeploymentStatus.DEFICIT
                    ),
                    "window_start": window.start,
                },
            )
            return results

    def match_assigned(self, rep_id: str, now: datetime) -> list[ItemFulfillment]:
        """match() over every shop assigned to the rep (directly or by route)."""
        return self.match(rep_id, self._assignments.assigned_shop_ids(rep_id), now)
