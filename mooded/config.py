#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mooded - Configuration
Централизованная конфигурация из переменных окружения с валидацией
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Каталоги хранения"""
    data_dir: Path
    export_dir: Path
    backup_dir: Path

@dataclass
class NotificationConfig:
    """Конфигурация напоминаний"""
    enabled: bool = True
    mood_title: str = "Mood Check"
    mood_body: str = "How are you feeling right now?"
    habit_title: str = "Habit Reminder"

def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == 'true'

class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""
        environment = os.getenv('ENVIRONMENT', 'development')
        try:
            self.environment = Environment(environment)
        except ValueError:
            raise ValueError(f"Unknown ENVIRONMENT: {environment}")

        self.storage = StorageConfig(
            data_dir=Path(os.getenv('DATA_DIR', 'data')),
            export_dir=Path(os.getenv('EXPORT_DIR', 'exports')),
            backup_dir=Path(os.getenv('BACKUP_DIR', 'backups')),
        )
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        self.notifications = NotificationConfig(
            enabled=_env_flag('NOTIFICATIONS_ENABLED', 'true'),
            mood_title=os.getenv('MOOD_REMINDER_TITLE', 'Mood Check'),
            mood_body=os.getenv('MOOD_REMINDER_BODY', 'How are you feeling right now?'),
            habit_title=os.getenv('HABIT_REMINDER_TITLE', 'Habit Reminder'),
        )

        self.timezone_name = os.getenv('TIMEZONE', 'UTC')

        # Логирование
        self.log_level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_to_file = _env_flag('LOG_TO_FILE', 'true')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        try:
            self.log_level = LogLevel(self.log_level_name)
        except ValueError:
            errors.append(f"LOG_LEVEL must be one of {[level.value for level in LogLevel]}")

        try:
            self.timezone = pytz.timezone(self.timezone_name)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Unknown TIMEZONE: {self.timezone_name}")

        if not self.notifications.mood_title.strip():
            errors.append("MOOD_REMINDER_TITLE must not be empty")

        if not self.notifications.habit_title.strip():
            errors.append("HABIT_REMINDER_TITLE must not be empty")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [
            self.storage.data_dir,
            self.storage.export_dir,
            self.storage.backup_dir,
        ]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования для logging.config.dictConfig"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"mooded_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'data_dir': str(self.storage.data_dir),
            'export_dir': str(self.storage.export_dir),
            'backup_dir': str(self.storage.backup_dir),
            'timezone': self.timezone_name,
            'notifications_enabled': self.notifications.enabled,
            'log_level': self.log_level.value,
            'log_to_file': self.log_to_file
        }

__all__ = [
    'AppConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'NotificationConfig'
]
