"""Unit tests for invitation email rendering and delivery."""

import json

import httpx
import pytest

from infrastructure.notify.email_notifier import (
    HttpEmailNotifier,
    LogOnlyNotifier,
    render_invitation,
)
from infrastructure.notify.provider import DeliveryStatus


@pytest.fixture
def message():
    return render_invitation(
        inviter_name="Olive <script>",
        resource_name="Q3 <Roadmap>",
        resource_kind="project",
        permission="full_edit",
        accept_url="http://localhost:3000/dashboard/projects/1?invite=tok&x=1",
        ttl_days=7,
    )


class TestRenderInvitation:
    def test_escapes_user_supplied_text_in_html(self, message) -> None:
        assert "<script>" not in message.html
        assert "Q3 &lt;Roadmap&gt;" in message.html
        assert "invite=tok&amp;x=1" in message.html

    def test_plain_text_keeps_raw_link(self, message) -> None:
        assert "invite=tok&x=1" in message.text
        assert "full edit" in message.text
        assert "7 days" in message.text

    def test_subject_names_resource(self, message) -> None:
        assert "Q3 <Roadmap>" in message.subject


class TestHttpEmailNotifier:
    @pytest.mark.asyncio
    async def test_posts_message(self, message) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "email_1"})

        notifier = HttpEmailNotifier(
            api_key="key-123",
            api_url="https://mail.test/emails",
            sender="Gatehouse <noreply@example.com>",
            transport=httpx.MockTransport(handler),
        )

        status = await notifier.notify("alice@example.com", message)

        assert status == DeliveryStatus.DELIVERED
        assert seen[0].headers["authorization"] == "Bearer key-123"
        payload = json.loads(seen[0].content)
        assert payload["to"] == ["alice@example.com"]
        assert payload["subject"] == message.subject

    @pytest.mark.asyncio
    async def test_server_error_reports_failure(self, message) -> None:
        notifier = HttpEmailNotifier(
            api_key="key-123",
            api_url="https://mail.test/emails",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        assert await notifier.notify("alice@example.com", message) == DeliveryStatus.FAILED

    @pytest.mark.asyncio
    async def test_network_error_reports_failure(self, message) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        notifier = HttpEmailNotifier(
            api_key="key-123",
            api_url="https://mail.test/emails",
            transport=httpx.MockTransport(handler),
        )

        assert await notifier.notify("alice@example.com", message) == DeliveryStatus.FAILED


class TestLogOnlyNotifier:
    @pytest.mark.asyncio
    async def test_skips_delivery(self, message) -> None:
        assert await LogOnlyNotifier().notify("a@example.com", message) == DeliveryStatus.SKIPPED
