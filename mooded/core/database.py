#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mooded - Key-Value Storage
Хранение именованных JSON-блобов с атомарной записью

Каждый ключ хранится в отдельном файле <data_dir>/<key>.json.
Отсутствующий или повреждённый блоб считается пустым: повреждённый
файл переносится в каталог резервных копий.
"""

import os
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Ключи хранилища
MOODS_KEY = "SavedMoods"
HABITS_KEY = "SavedHabits"
COMPLETIONS_KEY = "HabitCompletions"
NOTIFICATION_SETTINGS_KEY = "notificationSettingsData"

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass

class PersistenceError(DatabaseError):
    """Не удалось сохранить данные; состояние осталось только в памяти"""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Cannot persist '{key}': {reason}")
        self.key = key
        self.reason = reason

# ===== RESULT =====

@dataclass(frozen=True)
class SaveResult:
    """Результат сохранения: сохранено на диск или только в памяти"""
    saved: bool
    error: Optional[PersistenceError] = None

    @classmethod
    def ok(cls) -> "SaveResult":
        return cls(saved=True)

    @classmethod
    def failed(cls, error: PersistenceError) -> "SaveResult":
        return cls(saved=False, error=error)

    def __bool__(self) -> bool:
        return self.saved

# ===== STORAGE =====

class KeyValueStorage:
    """Файловое key-value хранилище для небольших коллекций"""

    def __init__(self, data_dir: Path, backup_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir)
        self.backup_dir = Path(backup_dir) if backup_dir else self.data_dir / "backups"
        self.save_count = 0
        self.load_count = 0
        self.error_count = 0

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        """Загрузить значение по ключу; None если блоб отсутствует или повреждён"""
        path = self._path(key)
        self.load_count += 1

        if not path.exists():
            logger.debug(f"📂 Blob '{key}' not found, starting empty")
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            self.error_count += 1
            logger.error(f"❌ Cannot read blob '{key}': {e}")
            return None

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            self.error_count += 1
            logger.error(f"❌ Blob '{key}' is corrupted: {e}")
            self._backup_corrupted(key, path)
            return None

    def save(self, key: str, value: Any) -> SaveResult:
        """Атомарно сохранить значение: запись во временный файл и os.replace"""
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")

        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            self.error_count += 1
            logger.error(f"❌ Cannot encode '{key}': {e}")
            return SaveResult.failed(PersistenceError(key, str(e)))

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            self.error_count += 1
            logger.error(f"❌ Cannot write '{key}' to {path}: {e}")
            return SaveResult.failed(PersistenceError(key, str(e)))

        self.save_count += 1
        logger.debug(f"💾 Saved '{key}'")
        return SaveResult.ok()

    def remove(self, key: str) -> bool:
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def _backup_corrupted(self, key: str, path: Path) -> None:
        """Перенос повреждённого файла в каталог бэкапов"""
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            backup_name = f"corrupted_{key}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
            backup_path = self.backup_dir / backup_name
            path.replace(backup_path)
            logger.warning(f"🔄 Corrupted blob moved to {backup_path}")
        except OSError as e:
            logger.error(f"❌ Cannot back up corrupted blob '{key}': {e}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "save_count": self.save_count,
            "load_count": self.load_count,
            "error_count": self.error_count,
        }
