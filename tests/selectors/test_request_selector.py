"""Tests for pending-demand and shop-assignment queries."""

from datetime import date
from uuid import uuid4

from stock_kernel.models.request import Request, RequestItem, RequestStatus
from stock_kernel.selectors.request_selector import RequestSelector, ShopAssignmentSelector
from tests.conftest import (
    ITEM_1,
    ITEM_7,
    NOW,
    OTHER_REP_ID,
    REP_ID,
    ROUTE_ID,
    SHOP_A,
    SHOP_B,
    SHOP_C,
)


def _request(session, shop_id, lines, status=RequestStatus.PENDING):
    request = Request(
        id=uuid4(),
        shop_id=shop_id,
        salesman_id="sales1",
        status=status.value,
        request_date=date(2024, 3, 15),
        created_at=NOW,
    )
    request.items = [
        RequestItem(line_no=n, item_id=item_id, requested_qty=req, delivered_qty=dlv)
        for n, (item_id, req, dlv) in enumerate(lines, start=1)
    ]
    session.add(request)
    session.flush()
    return request


class TestPendingLines:

    def test_lines_of_pending_requests(self, session):
        a = _request(session, SHOP_A, [(ITEM_1, 10, 0), (ITEM_7, 3, 3)])
        b = _request(session, SHOP_B, [(ITEM_1, 5, 2)])

        lines = RequestSelector(session).pending_lines([SHOP_A, SHOP_B])
        assert sorted((l.shop_id, l.item_id, l.pending_qty) for l in lines) == [
            (SHOP_A, ITEM_1, 10),
            (SHOP_A, ITEM_7, 0),
            (SHOP_B, ITEM_1, 3),
        ]
        assert {l.request_id for l in lines} == {str(a.id), str(b.id)}

    def test_non_pending_requests_ignored(self, session):
        _request(session, SHOP_A, [(ITEM_1, 10, 10)], status=RequestStatus.FULFILLED)
        _request(session, SHOP_A, [(ITEM_1, 4, 0)], status=RequestStatus.CANCELLED)
        assert RequestSelector(session).pending_lines([SHOP_A]) == []

    def test_other_shops_ignored(self, session):
        _request(session, SHOP_C, [(ITEM_1, 4, 0)])
        assert RequestSelector(session).pending_lines([SHOP_A]) == []

    def test_no_shops(self, session):
        selector = RequestSelector(session)
        assert selector.pending_lines([]) == []
        assert selector.pending_request_ids([]) == {}

    def test_pending_request_ids(self, session):
        a = _request(session, SHOP_A, [(ITEM_1, 1, 0)])
        assert RequestSelector(session).pending_request_ids([SHOP_A, SHOP_B]) == {str(a.id): SHOP_A}


class TestItemNames:

    def test_known_names_only(self, session, catalog):
        names = RequestSelector(session).item_names([ITEM_1, "missing"])
        assert names == {ITEM_1: "Ceylon Tea 100g"}

    def test_empty(self, session):
        assert RequestSelector(session).item_names([]) == {}


class TestShopAssignment:

    def test_direct_and_route_assignments(self, session, shop_assignments):
        selector = ShopAssignmentSelector(session)
        assert selector.route_ids(REP_ID) == [ROUTE_ID]
        assert selector.assigned_shop_ids(REP_ID) == [SHOP_A, SHOP_B]

    def test_rep_without_routes(self, session, shop_assignments):
        assert ShopAssignmentSelector(session).assigned_shop_ids(OTHER_REP_ID) == [SHOP_C]

    def test_unassigned_rep(self, session, shop_assignments):
        assert ShopAssignmentSelector(session).assigned_shop_ids("rep-new") == []
