"""
로컬 대체 저장소: 이름 있는 컬렉션을 디렉터리 아래 JSON 파일로 보관.

컬렉션 하나 = 파일 하나 (<dir>/<name>.json). 쓰기는 전체 교체이며
read-modify-write 조합은 호출하는 쪽 책임.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, name: str) -> Path:
        return self.base_dir / f"{name}.json"

    def _read(self, name: str) -> Any:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("로컬 컬렉션 파싱 실패 → 비어 있는 것으로 처리 name=%s", name)
            return None

    def _write(self, name: str, data: Any) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, path)

    def read_collection(self, name: str) -> list[dict[str, Any]]:
        data = self._read(name)
        if not isinstance(data, list):
            if data is not None:
                logger.warning("로컬 컬렉션 형식 오류(list 아님) name=%s", name)
            return []
        return [r for r in data if isinstance(r, dict)]

    def write_collection(self, name: str, records: list[dict[str, Any]]) -> None:
        self._write(name, list(records))

    def remove_collection(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)

    def get_value(self, key: str) -> str | None:
        """단일 스칼라 값 (예: deviceId)."""
        data = self._read(key)
        return data if isinstance(data, str) else None

    def set_value(self, key: str, value: str) -> None:
        self._write(key, value)
