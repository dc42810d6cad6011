"""Tests for record decoding and the completion state machine."""

import io
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from DnsdbFlex.core.errors import ProtocolError
from DnsdbFlex.core.models import ProtocolState, Record
from DnsdbFlex.core.query import QueryDescriptor, SearchMethod
from DnsdbFlex.protocol import ProtocolDecoder, decode_record, transition
from DnsdbFlex.renderers import JsonPresenter
from DnsdbFlex.transport.lifecycle import Query, Writer

DATA = b'{"obj":{"rrname":"a.example.com","rrtype":"A","count":1,"time_first":1,"time_last":2}}'


def _query(output_limit: int = -1) -> Query:
    descriptor = QueryDescriptor(method=SearchMethod.GLOB, value="example.*")
    return Query(descriptor, "glob/rrnames/example.%2A", Writer(output_limit))


class TestTransition(unittest.TestCase):
    def test_begin_only_from_init(self) -> None:
        begin = Record(cond="begin")
        self.assertEqual(transition(ProtocolState.INIT, begin).state, ProtocolState.BEGIN)
        self.assertEqual(transition(ProtocolState.ONGOING, begin).state, ProtocolState.ONGOING)
        self.assertFalse(transition(ProtocolState.INIT, begin).forward)

    def test_ongoing_forwards_payload(self) -> None:
        record = Record(cond="ongoing", obj={"rrname": "x."})
        step = transition(ProtocolState.BEGIN, record)
        self.assertEqual(step.state, ProtocolState.ONGOING)
        self.assertTrue(step.forward)

    def test_ongoing_does_not_leave_terminal_state(self) -> None:
        step = transition(ProtocolState.SUCCEEDED, Record(cond="ongoing"))
        self.assertEqual(step.state, ProtocolState.SUCCEEDED)

    def test_terminal_conds_consume_record(self) -> None:
        for cond, state in (
            ("succeeded", ProtocolState.SUCCEEDED),
            ("limited", ProtocolState.LIMITED),
            ("failed", ProtocolState.FAILED),
        ):
            with self.subTest(cond=cond):
                step = transition(ProtocolState.ONGOING, Record(cond=cond, obj={"rrname": "x."}))
                self.assertEqual(step.state, state)
                self.assertFalse(step.forward)

    def test_unknown_cond_is_missing(self) -> None:
        step = transition(ProtocolState.BEGIN, Record(cond="bogus", obj={"rrname": "x."}))
        self.assertEqual(step, step.__class__(ProtocolState.MISSING, False))

    def test_data_without_cond_keeps_state(self) -> None:
        step = transition(ProtocolState.BEGIN, Record(obj={"rrname": "x."}))
        self.assertEqual(step.state, ProtocolState.BEGIN)
        self.assertTrue(step.forward)


class TestDecodeRecord(unittest.TestCase):
    def test_typed_payload(self) -> None:
        record = decode_record(DATA)
        self.assertIsNone(record.cond)
        self.assertEqual(record.data.rrname, "a.example.com")
        self.assertEqual(record.data.time_last, 2)

    def test_wrong_types_rejected(self) -> None:
        for raw in (
            b'{"cond": 1}',
            b'{"obj": []}',
            b'{"obj": {"count": "1"}}',
            b'{"obj": {"count": true}}',
            b"[1, 2]",
            b"not json",
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(ProtocolError):
                    decode_record(raw)


class TestProtocolDecoder(unittest.TestCase):
    def setUp(self) -> None:
        self.out = io.StringIO()
        self.decoder = ProtocolDecoder(JsonPresenter(self.out))

    def test_begin_is_not_forwarded_or_counted(self) -> None:
        query = _query()
        self.assertTrue(self.decoder.feed(query, b'{"cond":"begin"}'))
        self.assertEqual(query.state, ProtocolState.BEGIN)
        self.assertEqual(query.writer.count, 0)
        self.assertEqual(self.out.getvalue(), "")

    def test_data_record_forwarded_once(self) -> None:
        query = _query()
        self.decoder.feed(query, b'{"cond":"begin"}')
        self.assertTrue(self.decoder.feed(query, DATA))
        self.assertEqual(query.writer.count, 1)
        self.assertEqual(
            self.out.getvalue(),
            '{"rrname":"a.example.com","rrtype":"A","count":1,"time_first":1,"time_last":2}\n',
        )

    def test_malformed_record_is_skipped(self) -> None:
        query = _query()
        with self.assertLogs("DnsdbFlex", level="WARNING"):
            self.assertTrue(self.decoder.feed(query, b"{oops"))
        self.assertEqual(query.writer.count, 0)

    def test_deeply_nested_record_is_skipped(self) -> None:
        with self.assertRaises(ProtocolError):
            decode_record(b"[" * 200000)

        query = _query()
        with self.assertLogs("DnsdbFlex", level="WARNING") as logs:
            self.assertTrue(self.decoder.feed(query, b"[" * 200000))
        self.assertIn("nesting too deep", logs.output[0])
        self.assertTrue(self.decoder.feed(query, DATA))
        self.assertEqual(query.writer.count, 1)

    def test_unknown_cond_is_logged_and_not_forwarded(self) -> None:
        query = _query()
        self.decoder.feed(query, b'{"cond":"begin"}')
        with self.assertLogs("DnsdbFlex", level="WARNING") as logs:
            self.assertTrue(
                self.decoder.feed(query, b'{"cond":"bogus","obj":{"rrname":"a.example.com"}}')
            )
        self.assertIn('Unknown value for "cond": bogus', logs.output[0])
        self.assertEqual(query.state, ProtocolState.MISSING)
        self.assertEqual(query.writer.count, 0)
        self.assertEqual(self.out.getvalue(), "")

    def test_blank_line_is_ignored(self) -> None:
        query = _query()
        self.assertTrue(self.decoder.feed(query, b"  "))
        self.assertEqual(query.state, ProtocolState.INIT)

    def test_msg_is_remembered(self) -> None:
        query = _query()
        self.decoder.feed(query, b'{"cond":"limited","msg":"Result limit reached"}')
        self.assertEqual(query.state, ProtocolState.LIMITED)
        self.assertEqual(query.saf_msg, "Result limit reached")

    def test_cap_stops_before_forwarding(self) -> None:
        query = _query(output_limit=1)
        self.assertTrue(self.decoder.feed(query, DATA))
        self.assertFalse(self.decoder.feed(query, DATA))
        self.assertEqual(query.state, ProtocolState.SELF_LIMITED)
        self.assertEqual(query.writer.count, 1)
        self.assertEqual(self.out.getvalue().count("\n"), 1)


if __name__ == "__main__":
    unittest.main()
