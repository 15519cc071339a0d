"""Lock-guarded JSON and JSONL persistence used by the order store and audit log."""

import json
import os
import tempfile
from typing import Any, Callable

from filelock import FileLock


class FileStore:

    @staticmethod
    def _lock(file_path: str) -> FileLock:
        return FileLock(f"{file_path}.lock")

    @staticmethod
    def _load(file_path: str, default: Any) -> Any:
        if not os.path.exists(file_path):
            return default
        with open(file_path, "r") as f:
            return json.load(f)

    @staticmethod
    def _dump_atomic(file_path: str, data: Any) -> None:
        directory = os.path.dirname(file_path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp, file_path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    @staticmethod
    def read_json(file_path: str, default: Any = None) -> Any:
        with FileStore._lock(file_path):
            return FileStore._load(file_path, {} if default is None else default)

    @staticmethod
    def update_json(file_path: str, mutate: Callable[[dict], Any], default: dict | None = None) -> Any:
        """Read, mutate and write back a JSON document under a single lock.

        ``mutate`` receives the loaded document, changes it in place and may
        return a value, which is passed back to the caller.
        """
        with FileStore._lock(file_path):
            data = FileStore._load(file_path, {} if default is None else default)
            result = mutate(data)
            FileStore._dump_atomic(file_path, data)
            return result

    @staticmethod
    def append_jsonl(file_path: str, record: dict) -> None:
        with FileStore._lock(file_path):
            os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
            with open(file_path, "a") as f:
                f.write(json.dumps(record, default=str) + "\n")

    @staticmethod
    def read_jsonl(file_path: str) -> list[dict]:
        with FileStore._lock(file_path):
            if not os.path.exists(file_path):
                return []
            with open(file_path, "r") as f:
                return [json.loads(line) for line in f if line.strip()]
