"""Tests for the translate, send and validate-config CLI commands."""

import json
import sys
import tempfile
import unittest
from email.message import EmailMessage
from pathlib import Path
from unittest.mock import patch

import httpx
from typer.testing import CliRunner

# Allow importing graph_mailer when running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from graph_mailer.cli import app
from graph_mailer.mail_provider import GraphMailManager

runner = CliRunner()


class StaticTokenRepo:
    def get_access_token(self, key, ttl):
        return {"access_token": f"token-for-{key}"}


class TestCli(unittest.TestCase):
    """CLI commands that need no network or sign-in."""

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)

    def _write_eml(self) -> Path:
        msg = EmailMessage()
        msg["From"] = "jane@example.com"
        msg["To"] = "bob@example.com"
        msg["Subject"] = "Hi"
        msg.set_content("plain body")
        msg.add_alternative("<p>html body</p>", subtype="html")
        path = self.tmp / "message.eml"
        path.write_bytes(msg.as_bytes())
        return path

    def test_translate_prints_graph_json(self):
        result = runner.invoke(app, ["translate", str(self._write_eml()), "--text-subtype", "plain"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"contentType": "text"', result.output)
        self.assertIn("bob@example.com", result.output)

    def test_translate_missing_file(self):
        result = runner.invoke(app, ["translate", str(self.tmp / "missing.eml")])
        self.assertEqual(result.exit_code, 1)

    def test_validate_config(self):
        path = self.tmp / "endpoints.yaml"
        path.write_text("endpoints:\n  ops:\n    timeout: 5\n  alerts: ops\n", encoding="utf-8")
        result = runner.invoke(app, ["validate-config", "--config", str(path)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Config valid. 2 endpoints.", result.output)

    def test_validate_config_rejects_bad_option(self):
        path = self.tmp / "endpoints.yaml"
        path.write_text("endpoints:\n  ops:\n    token_ttl: -1\n", encoding="utf-8")
        result = runner.invoke(app, ["validate-config", "--config", str(path)])
        self.assertEqual(result.exit_code, 1)

    def _manager(self, status: int) -> GraphMailManager:
        self.requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status)

        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        self.addCleanup(http_client.close)
        return GraphMailManager.from_endpoints(
            {"ops": {"token_key": "ops@example.com"}},
            options={
                "token_repo": StaticTokenRepo(),
                "http_client": http_client,
                "base_url": "https://graph.test/v1.0",
                "error_log": lambda msg: None,
            },
        )

    def test_send_posts_message(self):
        with patch("graph_mailer.cli.send_mode.get_manager", return_value=self._manager(202)):
            result = runner.invoke(app, ["send", str(self._write_eml()), "--endpoint", "ops", "--save"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Sent via ops.", result.output)
        [request] = self.requests
        self.assertEqual(request.url.path, "/v1.0/me/sendMail")
        self.assertEqual(request.headers["Authorization"], "Bearer token-for-ops@example.com")
        body = json.loads(request.content)
        self.assertTrue(body["saveToSentItems"])
        self.assertEqual(body["message"]["subject"], "Hi")

    def test_send_failure_exits_nonzero(self):
        with patch("graph_mailer.cli.send_mode.get_manager", return_value=self._manager(500)):
            result = runner.invoke(app, ["send", str(self._write_eml())])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("DispatchFailed", result.output)

    def test_send_unknown_endpoint(self):
        with patch("graph_mailer.cli.send_mode.get_manager", return_value=self._manager(202)):
            result = runner.invoke(app, ["send", str(self._write_eml()), "--endpoint", "missing"])
        self.assertEqual(result.exit_code, 1)
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
