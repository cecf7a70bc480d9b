"""
Модуль: `utils/__init__.py`.
Назначение: Вспомогательные модули: обработка изображений, кластеризация, цвета, экспорт.
"""
