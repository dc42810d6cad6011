"""Tests for the client-side output cap."""

import sys
import unittest
from pathlib import Path
from unittest.mock import Mock

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from DnsdbFlex.core.models import ProtocolState
from DnsdbFlex.core.query import QueryDescriptor, SearchMethod
from DnsdbFlex.protocol import OutputGovernor
from DnsdbFlex.transport.lifecycle import Query, Writer


def _query(limit: int) -> Query:
    return Query(QueryDescriptor(method=SearchMethod.REGEX, value="^a"), "p", Writer(limit))


class TestOutputGovernor(unittest.TestCase):
    def test_unlimited_always_admits(self) -> None:
        governor = OutputGovernor()
        query = _query(-1)
        for _ in range(1000):
            self.assertTrue(governor.admit(query))
            governor.produced(query)
        self.assertEqual(query.writer.count, 1000)

    def test_cap_is_reached(self) -> None:
        governor = OutputGovernor()
        query = _query(2)
        governor.produced(query)
        self.assertTrue(governor.admit(query))
        governor.produced(query)
        self.assertFalse(governor.admit(query))

    def test_stop_marks_self_limited_and_aborts_fetch(self) -> None:
        query = _query(1)
        query.fetch = Mock()
        OutputGovernor().stop(query)
        self.assertEqual(query.state, ProtocolState.SELF_LIMITED)
        query.fetch.abort.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
