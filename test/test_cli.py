"""Tests for the click command-line interface."""

import sys
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx
from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from DnsdbFlex.cli.ui import cli

CONFIG = "server:\n  conf_files: []\n"

STREAM = (
    b'{"cond":"begin"}\n'
    b'{"obj":{"rrname":"a.example.com","rrtype":"A"}}\n'
    b'{"obj":{"rrname":"b.example.com","rrtype":"A"}}\n'
    b'{"obj":{"rrname":"c.example.com","rrtype":"A"}}\n'
    b'{"cond":"succeeded"}\n'
)


class TestCliUsage(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def _invoke(self, *args: str, env: dict | None = None):
        with self.runner.isolated_filesystem():
            Path("config.yml").write_text(CONFIG, encoding="utf-8")
            return self.runner.invoke(cli, ["--config", "config.yml", "search", *args], env=env)

    def test_version(self) -> None:
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("1.0.5", result.output)

    def test_expression_required(self) -> None:
        result = self._invoke()
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Need to provide a --regex or --glob option", result.output)

    def test_regex_and_glob_exclusive(self) -> None:
        result = self._invoke("--regex", "^a", "--glob", "a.*")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("more than once", result.output)

    def test_force_requires_glob(self) -> None:
        result = self._invoke("--regex", "^a", "--force")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--force only makes sense with a glob query", result.output)

    def test_bad_glob_ending(self) -> None:
        result = self._invoke("--glob", "example.com")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("should end", result.output)

    def test_bad_timestamp(self) -> None:
        result = self._invoke("--glob", "example.*", "-A", "tomorrow")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("bad -A timestamp", result.output)

    def test_complete_needs_bound(self) -> None:
        result = self._invoke("--glob", "example.*", "-c")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("makes no sense", result.output)

    def test_output_limit_positive(self) -> None:
        result = self._invoke("--glob", "example.*", "-L", "0")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("-L must be positive", result.output)

    def test_single_output_format(self) -> None:
        result = self._invoke("--glob", "example.*", "-j", "-F")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("only one of -j, -F and -T", result.output)

    def test_search_target_values(self) -> None:
        result = self._invoke("--glob", "example.*", "-s", "names")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Illegal what to search", result.output)


class TestCliSearch(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def _invoke(self, *args: str, env: dict):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, content=STREAM)

        with self.runner.isolated_filesystem(), patch.object(
            httpx, "AsyncHTTPTransport", return_value=httpx.MockTransport(handler)
        ) as transport_cls:
            Path("config.yml").write_text(CONFIG, encoding="utf-8")
            result = self.runner.invoke(cli, ["--config", "config.yml", "search", *args], env=env)
        return result, requests, transport_cls

    def test_search_with_output_cap(self) -> None:
        result, requests, _ = self._invoke(
            "--glob", "example.*", "-L", "2", "-q", env={"DNSDB_API_KEY": "secret"}
        )
        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.stdout.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn("a.example.com", lines[0])
        self.assertIn("b.example.com", lines[1])
        self.assertEqual(requests[0].headers["X-Api-Key"], "secret")

    def test_batch_output_and_insecure(self) -> None:
        result, requests, transport_cls = self._invoke(
            "--glob", "example.*", "-F", "-U", "-q", env={"DNSDB_API_KEY": "secret"}
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.stdout.splitlines(),
            [
                "rrset/name/a.example.com/A",
                "rrset/name/b.example.com/A",
                "rrset/name/c.example.com/A",
            ],
        )
        self.assertEqual(len(requests), 1)
        transport_cls.assert_called_once_with(verify=False, local_address=None)

    def test_missing_api_key_aborts(self) -> None:
        result, requests, transport_cls = self._invoke(
            "--glob", "example.*", env={"DNSDB_API_KEY": None, "DNSDBQ_SYSTEM": None}
        )
        self.assertEqual(result.exit_code, 1)
        self.assertEqual(requests, [])
        transport_cls.assert_not_called()

    def test_ipv4_pins_local_address(self) -> None:
        result, _, transport_cls = self._invoke(
            "--glob", "example.*", "-4", "-q", env={"DNSDB_API_KEY": "secret"}
        )
        self.assertEqual(result.exit_code, 0, result.output)
        transport_cls.assert_called_once_with(verify=True, local_address="0.0.0.0")


if __name__ == "__main__":
    unittest.main()
