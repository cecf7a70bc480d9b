"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: models/palette.py – модель сохранённой палитры.

Назначение модуля:
- Описание ORM-модели Palette для хранения палитр.
- Хранение уникального названия, списка HEX-цветов и даты создания.
"""

from datetime import datetime
from extensions import db


class Palette(db.Model):
    """Класс `Palette` описывает сохранённую палитру."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, default="Моя палитра")
    colors = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "colors": list(self.colors),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
