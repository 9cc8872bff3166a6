"""JSON file sink for exporting transactions and audit entries."""

import json
from pathlib import Path
from typing import Any

from promptpay_gateway.exceptions import SinkError
from promptpay_gateway.sinks.serialization import to_dict


class JsonFileSink:
    """Append records to one JSON Lines file per entity type."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write ``<entity_type>.jsonl`` files.
        pretty : bool
            Also write a pretty-printed ``<entity_type>.json`` array on batch writes.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def path_for(self, entity_type: str) -> Path:
        return self.output_dir / f"{entity_type.replace('.', '_')}.jsonl"

    def write(self, entity_type: str, record: Any) -> None:
        """Append a single record as one JSON line."""
        self._append(entity_type, [record])

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Append a batch of records; with ``pretty`` also dump them as a JSON array."""
        self._append(entity_type, records)
        if self.pretty:
            file_path = self.output_dir / f"{entity_type.replace('.', '_')}.json"
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump([to_dict(r) for r in records], f, indent=2, ensure_ascii=False, default=str)

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")

    def _append(self, entity_type: str, records: list[Any]) -> None:
        try:
            with open(self.path_for(entity_type), "a", encoding="utf-8") as f:
                for record in records:
                    f.write(json.dumps(to_dict(record), ensure_ascii=False, default=str) + "\n")
        except OSError as exc:
            raise SinkError(f"Failed to write {entity_type} to {self.output_dir}: {exc}") from exc
        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)
