"""Tests for console, JSON file and Kafka sinks."""

import json
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock, patch

import pytest

from promptpay_gateway.config import KafkaConfig
from promptpay_gateway.exceptions import SinkError
from promptpay_gateway.models import Transaction
from promptpay_gateway.sinks.console import ConsoleSink
from promptpay_gateway.sinks.json_file import JsonFileSink
from promptpay_gateway.sinks.kafka import KafkaSink, ProducerStats


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_init_default(self) -> None:
        sink = ConsoleSink()

        assert sink.pretty is True
        assert sink.max_records is None
        assert sink._counts == {}

    def test_write(self, capsys: pytest.CaptureFixture, make_transaction: Callable[..., Transaction]) -> None:
        sink = ConsoleSink(pretty=False)
        sink.write("transactions", make_transaction(reference_id="TX-CONSOLE"))
        captured = capsys.readouterr()

        assert captured.out.startswith("[transactions] ")
        assert "TX-CONSOLE" in captured.out
        assert sink._counts["transactions"] == 1

    def test_write_batch_with_limit(self, capsys: pytest.CaptureFixture) -> None:
        sink = ConsoleSink(pretty=False, max_records=2)
        sink.write_batch("test_entity", [{"id": i} for i in range(5)])
        captured = capsys.readouterr()

        assert "5 records" in captured.out
        assert "... and 3 more records" in captured.out
        assert sink._counts["test_entity"] == 5

    def test_close(self, capsys: pytest.CaptureFixture) -> None:
        sink = ConsoleSink()
        sink.write_batch("audit_log", [{"id": 1}])
        sink.close()
        captured = capsys.readouterr()

        assert "Console Sink Summary" in captured.out
        assert "audit_log: 1 records" in captured.out


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        output_dir = tmp_path / "nested" / "output"
        JsonFileSink(output_dir)
        assert output_dir.is_dir()

    def test_write_appends_lines(self, tmp_path: Path, make_transaction: Callable[..., Transaction]) -> None:
        sink = JsonFileSink(tmp_path)
        sink.write("transactions", make_transaction(reference_id="TX-ONE"))
        sink.write("transactions", make_transaction(reference_id="TX-TWO"))

        lines = sink.path_for("transactions").read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["reference_id"] for line in lines] == ["TX-ONE", "TX-TWO"]

    def test_write_batch_pretty(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path, pretty=True)
        sink.write_batch("audit_log", [{"message": "a"}, {"message": "b"}])

        data = json.loads((tmp_path / "audit_log.json").read_text(encoding="utf-8"))
        assert data == [{"message": "a"}, {"message": "b"}]
        assert len(sink.path_for("audit_log").read_text(encoding="utf-8").splitlines()) == 2

    def test_close(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        sink = JsonFileSink(tmp_path)
        sink.write_batch("transactions", [{"id": 1}, {"id": 2}])
        sink.close()

        assert "transactions: 2 records" in capsys.readouterr().out

    def test_write_failure(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(SinkError, match="denied"):
                sink.write("transactions", {"id": 1})


class TestProducerStats:
    """Tests for ProducerStats."""

    def test_success_rate_empty(self) -> None:
        assert ProducerStats().success_rate == 0.0

    def test_success_rate(self) -> None:
        assert ProducerStats(sent=4, delivered=3, failed=1).success_rate == 0.75


class TestKafkaSink:
    """Tests for KafkaSink with a mocked producer."""

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_init_with_string(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink("kafka:9092")

        assert sink.config.bootstrap_servers == "kafka:9092"
        assert mock_producer.call_args.args[0]["bootstrap.servers"] == "kafka:9092"

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_topic_for(self, mock_producer: MagicMock) -> None:
        assert KafkaSink(KafkaConfig()).topic_for("audit_log") == "dev.promptpay.audit-log"
        assert KafkaSink(KafkaConfig(topic_prefix="")).topic_for("transactions") == "transactions"

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_write_keys_by_reference_id(
        self,
        mock_producer: MagicMock,
        make_transaction: Callable[..., Transaction],
    ) -> None:
        sink = KafkaSink(KafkaConfig())
        sink.write("transactions", make_transaction(reference_id="TX-KAFKA"))

        kwargs = mock_producer.return_value.produce.call_args.kwargs
        assert kwargs["topic"] == "dev.promptpay.transactions"
        assert kwargs["key"] == b"TX-KAFKA"
        assert json.loads(kwargs["value"])["reference_id"] == "TX-KAFKA"
        assert sink.stats.sent == 1

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_write_unkeyed_entity(self, mock_producer: MagicMock) -> None:
        KafkaSink(KafkaConfig()).write("quotes", {"rate": "34.6986"})
        assert mock_producer.return_value.produce.call_args.kwargs["key"] is None

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_write_batch_flushes(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink(KafkaConfig())
        sink.write_batch("audit_log", [{"fingerprint": "0002b606"}, {"fingerprint": "00001505"}])

        assert mock_producer.return_value.produce.call_count == 2
        mock_producer.return_value.flush.assert_called_once_with(30.0)

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_delivery_callback(self, mock_producer: MagicMock) -> None:
        sink = KafkaSink(KafkaConfig())
        msg = MagicMock()
        msg.topic.return_value = "dev.promptpay.transactions"
        msg.partition.return_value = 0
        msg.offset.return_value = 7

        sink._delivery_callback(None, msg)
        sink._delivery_callback("broker down", None)

        assert sink.stats.delivered == 1
        assert sink.stats.failed == 1

    @patch("promptpay_gateway.sinks.kafka.Producer")
    def test_close_flushes(self, mock_producer: MagicMock) -> None:
        KafkaSink(KafkaConfig()).close()
        mock_producer.return_value.flush.assert_called_once()
