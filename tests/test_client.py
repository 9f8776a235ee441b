import asyncio

import httpx
import pytest

from shelfsafe.client import AggregationError, ShelfSafeClient, load_dashboard

BASE = "http://shelfsafe.test"


def make_transport(routes, seen=None):
    """routes: path -> (status, json body)"""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append((request.url.path, dict(request.url.params)))
        status, body = routes.get(request.url.path, (404, {"detail": "Not Found"}))
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


def healthy_routes(products=None, lots=None, attachments=None):
    return {
        "/api/health": (200, {"ok": True, "message": "API is healthy + DB connected"}),
        "/api/products": (200, products or []),
        "/api/inventoryLots": (200, lots or []),
        "/api/attachments": (200, attachments or []),
    }


def run(coro_fn, routes, seen=None):
    async def go():
        async with ShelfSafeClient(BASE, transport=make_transport(routes, seen)) as client:
            return await coro_fn(client)
    return asyncio.run(go())


def test_fetch_cycle_collects_all_three(sample_collections):
    seen = []
    routes = healthy_routes(
        sample_collections["products"], sample_collections["inventoryLots"], sample_collections["attachments"],
    )
    data = run(lambda c: c.fetch_cycle(), routes, seen)
    assert data.products == sample_collections["products"]
    assert data.lots == sample_collections["inventoryLots"]
    assert data.attachments == sample_collections["attachments"]
    assert seen[0][0] == "/api/health"
    assert ("/api/attachments", {"entityType": "inventoryLots"}) in seen


def test_failed_health_stops_the_cycle():
    seen = []
    routes = healthy_routes()
    routes["/api/health"] = (503, {"ok": False, "message": "MongoDB unreachable"})
    with pytest.raises(AggregationError, match="Health check failed"):
        run(lambda c: c.fetch_cycle(), routes, seen)
    assert [p for p, _ in seen] == ["/api/health"]


def test_any_failed_listing_fails_the_cycle():
    routes = healthy_routes(products=[{"_id": "p1"}])
    routes["/api/inventoryLots"] = (503, {"detail": "down"})
    with pytest.raises(AggregationError, match="inventory lots"):
        run(lambda c: c.fetch_cycle(), routes)


def test_non_array_body_fails_the_cycle():
    routes = healthy_routes()
    routes["/api/products"] = (200, {"items": []})
    with pytest.raises(AggregationError, match="products"):
        run(lambda c: c.fetch_cycle(), routes)


def test_transport_error_is_an_aggregation_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def go():
        async with ShelfSafeClient(BASE, transport=httpx.MockTransport(handler)) as client:
            await client.fetch_cycle()

    with pytest.raises(AggregationError, match="Is backend running"):
        asyncio.run(go())


def test_list_attachments_query_params():
    seen = []
    run(lambda c: c.list_attachments(entity_type="inventoryLots", entity_id="l1"), healthy_routes(), seen)
    assert seen == [("/api/attachments", {"entityType": "inventoryLots", "entityId": "l1"})]


def test_load_dashboard_resolves_images():
    routes = healthy_routes(
        products=[{"id": "p1", "name": "Milk"}],
        lots=[{"id": "l1", "productId": "p1"}],
        attachments=[
            {"entityType": "inventoryLots", "entityId": "l1", "url": "img.png", "isDeleted": False},
            {"entityType": "inventoryLots", "entityId": {"$oid": "l1"}, "url": "img2.png", "isDeleted": False},
        ],
    )
    snapshot = run(load_dashboard, routes)
    assert snapshot.products[0].image_url == "img.png"
    assert snapshot.lots[0].image_url == "img.png"
    assert snapshot.summary.attachments == 2
