# services/data_export.py

import csv
import io
import logging
from pathlib import Path
from typing import Iterable

from mooded.core.models import MoodEntry
from mooded.utils.datetime_utils import to_local

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "Time", "Rating"]
CSV_FILENAME = "MoodHistory.csv"


def export_moods_csv(moods: Iterable[MoodEntry], timezone=None) -> str:
    """
    Date,Time,Rating - по строке на запись в переданном порядке.
    Без кавычек и без перевода строки в конце.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_NONE)
    writer.writerow(CSV_HEADER)
    for mood in moods:
        local = to_local(mood.timestamp, timezone)
        writer.writerow([local.strftime("%Y-%m-%d"), local.strftime("%H:%M:%S"), mood.rating])
    return buffer.getvalue().rstrip("\n")


def export_to_csv(moods: Iterable[MoodEntry], export_dir: Path, timezone=None) -> Path:
    export_dir = Path(export_dir)
    export_dir.mkdir(parents=True, exist_ok=True)
    filename = export_dir / CSV_FILENAME
    filename.write_text(export_moods_csv(moods, timezone), encoding="utf-8")
    logger.info(f"📤 Mood history exported to {filename}")
    return filename
