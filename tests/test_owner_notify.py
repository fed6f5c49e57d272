import json

import httpx
import pytest

from app.services import workflow
from app.services.email_gateway import EmailGateway
from worker.owner_notify import deliver_owner_notification, render_owner_email
from worker.tasks import retry_countdown

from fixtures_seed import listing_payload


def _gateway(handler) -> EmailGateway:
    return EmailGateway(
        url="https://mail.test/send",
        api_key="k_test",
        sender="noreply@test",
        timeout_seconds=2,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_gateway_sends_json_body_and_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["request_id"] = request.headers.get("X-Request-Id")
        seen["body"] = json.loads(request.content)
        return httpx.Response(202, json={"id": "msg_1"})

    gateway = _gateway(handler)
    try:
        result = await gateway.send(
            to="seller@test.com", subject="Hi", html="<p>x</p>", tags={"event": "e"}, request_id="r1"
        )
    finally:
        await gateway.aclose()

    assert result.ok is True
    assert result.status_code == 202
    assert result.detail == {"id": "msg_1"}
    assert seen["auth"] == "Bearer k_test"
    assert seen["request_id"] == "r1"
    assert seen["body"] == {
        "from": "noreply@test",
        "to": "seller@test.com",
        "subject": "Hi",
        "html": "<p>x</p>",
        "tags": {"event": "e"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("status,retryable", [(503, True), (429, True), (400, False), (401, False)])
async def test_gateway_classifies_http_failures(status, retryable):
    gateway = _gateway(lambda request: httpx.Response(status, text="nope"))
    try:
        result = await gateway.send(to="a@test", subject="s", html="h")
    finally:
        await gateway.aclose()

    assert result.ok is False
    assert result.status_code == status
    assert result.error_code == f"HTTP_{status}"
    assert result.retryable is retryable
    assert result.detail == {"raw": "nope"}


@pytest.mark.asyncio
async def test_gateway_network_errors_are_retryable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = _gateway(handler)
    try:
        result = await gateway.send(to="a@test", subject="s", html="h")
    finally:
        await gateway.aclose()

    assert result.ok is False
    assert result.status_code is None
    assert result.error_code == "REQUEST_ERROR"
    assert result.retryable is True


def test_render_escapes_user_text():
    subject, body = render_owner_email(
        "property_rejected",
        seller_name="<b>Asha</b>",
        title="Flat & Garden",
        metadata={"reason": "<script>x</script>"},
    )

    assert subject == 'Your listing "Flat & Garden" was not approved'
    assert "&lt;b&gt;Asha&lt;/b&gt;" in body
    assert "Flat &amp; Garden" in body
    assert "&lt;script&gt;" in body


def test_render_unknown_event():
    with pytest.raises(KeyError):
        render_owner_email("property_exploded", seller_name="a", title="b", metadata={})


@pytest.mark.asyncio
async def test_deliver_rejection_uses_stored_reason(db_session, seller):
    listing = await workflow.create_listing(
        db_session, seller_id=seller["seller_id"], payload=listing_payload(), created_by=seller["user_id"]
    )
    listing.rejection_reason = "floor plan missing"
    await db_session.flush()

    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={})

    gateway = _gateway(handler)
    try:
        result = await deliver_owner_notification(
            db_session, gateway, listing_id=listing.id, seller_id=seller["seller_id"], event="property_rejected"
        )
    finally:
        await gateway.aclose()

    assert result.ok is True
    assert sent[0]["to"] == "seller@test.com"
    assert sent[0]["tags"] == {"event": "property_rejected", "listing_id": listing.id}
    assert "floor plan missing" in sent[0]["html"]


@pytest.mark.asyncio
async def test_deliver_skips_without_email_or_listing(db_session, make_seller):
    no_email = await make_seller(email=None)

    def handler(request):
        raise AssertionError("no email should be sent")

    gateway = _gateway(handler)
    try:
        assert await deliver_owner_notification(
            db_session, gateway, listing_id="lst_x", seller_id=no_email["seller_id"], event="property_approved"
        ) is None

        with_email = await make_seller()
        assert await deliver_owner_notification(
            db_session, gateway, listing_id="lst_gone", seller_id=with_email["seller_id"], event="property_approved"
        ) is None
    finally:
        await gateway.aclose()


def test_retry_countdown_grows_and_caps():
    assert 15 <= retry_countdown(0) <= 15 + 3
    assert 30 <= retry_countdown(1) <= 30 + 7
    assert 600 <= retry_countdown(20) <= 620
