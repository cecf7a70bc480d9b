"""
Модуль: `routes/__init__.py`.
Назначение: Пакет HTTP-маршрутов приложения.
"""
