"""Tests for GraphMailClient: token resolution, request shape, status handling."""

import json
import sys
import threading
import time
import unittest
from pathlib import Path

import httpx

# Allow importing graph_mailer when running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from graph_mailer.errors import DispatchFailed, NoTextPartFound, TokenUnavailable
from graph_mailer.mail_provider.graph_client import GraphMailClient
from graph_mailer.mail_provider.protocol import MailDispatch
from graph_mailer.models.email import Address, Email, MultipartNode, TextNode

BASE_URL = "https://graph.test/v1.0"


class FakeTokenRepo:
    """Token repository returning a fixed token and recording requests."""

    def __init__(self, token="tok-123"):
        self.token = token
        self.calls = []

    def get_access_token(self, key, ttl):
        self.calls.append((key, ttl))
        if self.token is None:
            return None
        return {"access_token": self.token}


def _email(**kwargs) -> Email:
    defaults = dict(
        body=TextNode(media_subtype="plain", content=b"Hi"),
        from_=(Address(address="me@example.com"),),
        to=(Address(address="you@example.com", name="You"),),
        subject="Hello",
    )
    defaults.update(kwargs)
    return Email(**defaults)


class TestGraphMailClient(unittest.TestCase):
    """Tests for the sendMail dispatcher."""

    def setUp(self):
        self.requests = []
        self.status = 202
        self.errors = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(self.status)

        self.http_client = httpx.Client(transport=httpx.MockTransport(handler))
        self.addCleanup(self.http_client.close)

    def _client(self, config=None, **options) -> GraphMailClient:
        options.setdefault("error_log", self.errors.append)
        options.setdefault("http_client", self.http_client)
        options.setdefault("base_url", BASE_URL)
        return GraphMailClient("primary", config or {}, options)

    def test_send_posts_graph_payload(self):
        """POST /me/sendMail with bearer token and {message, saveToSentItems}."""
        repo = FakeTokenRepo()
        client = self._client(token_repo=repo)

        client.send_email(_email(), save_to_sent_items=True)

        self.assertEqual(len(self.requests), 1)
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), f"{BASE_URL}/me/sendMail")
        self.assertEqual(request.headers["Authorization"], "Bearer tok-123")
        body = json.loads(request.content)
        self.assertTrue(body["saveToSentItems"])
        self.assertEqual(body["message"]["subject"], "Hello")
        self.assertEqual(body["message"]["body"], {"contentType": "text", "content": "Hi"})
        self.assertEqual(
            body["message"]["toRecipients"],
            [{"emailAddress": {"name": "You", "address": "you@example.com"}}],
        )
        self.assertEqual(repo.calls, [("primary", 120)])
        self.assertEqual(self.errors, [])

    def test_save_to_sent_items_defaults_false(self):
        self._client(token_repo=FakeTokenRepo()).send_email(_email())
        self.assertFalse(json.loads(self.requests[0].content)["saveToSentItems"])

    def test_config_defaults_and_overrides(self):
        """token_key defaults to the endpoint name; explicit options win."""
        repo = FakeTokenRepo()
        client = self._client(
            {"token_key": "mailbox@example.com", "token_ttl": 300, "text_subtype": "plain", "timeout": 7},
            token_repo=repo,
        )
        body = MultipartNode(
            subtype="alternative",
            children=(
                TextNode(media_subtype="html", content=b"<p>Hi</p>"),
                TextNode(media_subtype="plain", content=b"Hi"),
            ),
        )
        client.send_email(_email(body=body))
        self.assertEqual(repo.calls, [("mailbox@example.com", 300)])
        sent = json.loads(self.requests[0].content)["message"]
        self.assertEqual(sent["body"]["contentType"], "text")
        self.assertEqual(self.requests[0].extensions["timeout"]["read"], 7)

    def test_non_202_raises_dispatch_failed_and_logs_once(self):
        """HTTP 500 raises DispatchFailed(status=500) after exactly one log entry."""
        self.status = 500
        client = self._client(token_repo=FakeTokenRepo())
        with self.assertRaises(DispatchFailed) as ctx:
            client.send_email(_email())
        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(len(self.errors), 1)
        self.assertIn("status=500", self.errors[0])
        self.assertEqual(len(self.requests), 1)

    def test_200_is_not_success(self):
        self.status = 200
        with self.assertRaises(DispatchFailed):
            self._client(token_repo=FakeTokenRepo()).send_email(_email())

    def test_transport_error_raises_dispatch_failed(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as http_client:
            client = self._client(token_repo=FakeTokenRepo(), http_client=http_client)
            with self.assertRaises(DispatchFailed) as ctx:
                client.send_email(_email())
        self.assertIsNone(ctx.exception.status)
        self.assertEqual(len(self.errors), 1)

    def test_no_token_repository(self):
        """Without a repository or factory the send fails with TokenUnavailable, logged once."""
        client = self._client()
        with self.assertRaises(TokenUnavailable):
            client.send_email(_email())
        self.assertEqual(len(self.errors), 1)
        self.assertIn("no token repository", self.errors[0])
        self.assertEqual(self.requests, [])

    def test_resolver_exception_becomes_token_unavailable(self):
        def resolver(key):
            raise LookupError(key)

        client = self._client(token_repo=resolver)
        with self.assertRaises(TokenUnavailable):
            client.send_email(_email())
        self.assertEqual(len(self.errors), 1)

    def test_missing_access_token(self):
        client = self._client(token_repo=FakeTokenRepo(token=None))
        with self.assertRaises(TokenUnavailable):
            client.send_email(_email())
        self.assertEqual(len(self.errors), 1)
        self.assertEqual(self.requests, [])

    def test_token_acquisition_error_becomes_token_unavailable(self):
        """A repository that raises (e.g. network failure on refresh) is logged once and not sent."""

        class FailingRepo(FakeTokenRepo):
            def get_access_token(self, key, ttl):
                raise ConnectionError("token endpoint unreachable")

        client = self._client(token_repo=FailingRepo())
        with self.assertRaises(TokenUnavailable) as ctx:
            client.send_email(_email())
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)
        self.assertEqual(len(self.errors), 1)
        self.assertIn("primary", self.errors[0])
        self.assertEqual(self.requests, [])

    def test_client_is_a_mail_dispatch(self):
        self.assertIsInstance(self._client(token_repo=FakeTokenRepo()), MailDispatch)

    def test_token_repo_factory_from_config(self):
        """The config factory is called with the token key and its repository is cached."""
        repo = FakeTokenRepo()
        keys = []

        def factory(key):
            keys.append(key)
            return repo

        client = self._client({"token_repo_factory": factory})
        client.send_email(_email())
        client.send_email(_email())
        self.assertEqual(keys, ["primary"])
        self.assertEqual(len(self.requests), 2)

    def test_concurrent_resolution_happens_once(self):
        repo = FakeTokenRepo()
        calls = []

        def resolver(key):
            calls.append(key)
            time.sleep(0.05)
            return repo

        client = self._client(token_repo=resolver)
        resolved = []
        threads = [
            threading.Thread(target=lambda: resolved.append(client.get_token_repository()))
            for _ in range(5)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(calls), 1)
        self.assertTrue(all(r is repo for r in resolved))

    def test_translation_error_is_logged_and_not_sent(self):
        body = MultipartNode(subtype="related", children=(TextNode(media_subtype="html", content=b"x"),))
        client = self._client(token_repo=FakeTokenRepo())
        with self.assertRaises(NoTextPartFound):
            client.send_email(_email(body=body))
        self.assertEqual(len(self.errors), 1)
        self.assertEqual(self.requests, [])

    def test_context_manager_leaves_injected_client_open(self):
        with self._client(token_repo=FakeTokenRepo()) as client:
            client.send_email(_email())
        self.assertFalse(self.http_client.is_closed)


if __name__ == "__main__":
    unittest.main()
