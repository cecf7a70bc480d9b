"""
Название: «Swatchbook»
Язык: Python (Flask)
Краткое описание: веб-сервис для извлечения доминирующих цветов из изображений,
преобразования цветов и экспорта палитр
"""

import os

from flask import Flask, jsonify

from config import Config
from extensions import db, cors
import models  # noqa: F401 - регистрирует модели для db.create_all()
from routes.api import register_routes as register_api_routes
from utils.rate_limit import InMemoryRateLimiter


def create_app(config_overrides: dict | None = None) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Инициализация расширений
    db.init_app(app)

    if app.config["CORS_ENABLED"]:
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        )

    app.extensions["rate_limiter"] = InMemoryRateLimiter()

    os.makedirs(app.instance_path, exist_ok=True)

    register_api_routes(app)

    with app.app_context():
        # Создаем отсутствующие таблицы (без изменения существующих колонок)
        db.create_all()

    @app.errorhandler(413)
    def request_too_large(_error):
        """Слишком большой файл в запросе."""
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return (
            jsonify({"success": False, "error": f"Файл слишком большой. Максимальный размер: {limit_mb} МБ"}),
            413,
        )

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"success": False, "error": "Ресурс не найден"}), 404

    @app.errorhandler(500)
    def internal_error(_error):
        return jsonify({"success": False, "error": "Внутренняя ошибка сервера"}), 500

    @app.after_request
    def apply_security_headers(response):
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "camera=(), microphone=(), geolocation=()")
        return response

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    return app


if __name__ == "__main__":
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    create_app().run(debug=not is_production)
