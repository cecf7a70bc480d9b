"""
Программа: «Swatchbook» – веб-сервис для извлечения и экспорта цветовых палитр.
Модуль: utils/kmeans.py – кластеризация цветов методом k-средних.

Назначение модуля:
- Выбор начальных центроидов из выборки пикселей (с добором случайными цветами).
- Итеративное уточнение центроидов до сходимости или лимита итераций.
- Возврат ровно k RGB-цветов, округлённых до целых.
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 20
# Сдвиг центроида (в единицах RGB 0–255), ниже которого считаем, что он стабилен
CONVERGENCE_THRESHOLD = 1.0


class InsufficientDataError(ValueError):
    """Выборка пуста – кластеризовать нечего."""


@dataclass(frozen=True)
class KMeansResult:
    """Итог кластеризации: центроиды и диагностика цикла."""

    centroids: list[tuple[int, int, int]]
    iterations: int
    converged: bool


def color_distance(c1, c2) -> float:
    """Евклидово расстояние между двумя цветами в пространстве RGB."""
    diff = np.asarray(c1, dtype=np.float64) - np.asarray(c2, dtype=np.float64)
    return float(np.sqrt(np.sum(diff * diff)))


def _as_points(points) -> np.ndarray:
    array = np.asarray(points, dtype=np.float64)
    if array.size == 0:
        raise InsufficientDataError("Нет пикселей для кластеризации")
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"Ожидалась последовательность RGB-троек, получено {array.shape}")
    return array


def seed_centroids(points: np.ndarray, k: int, rng) -> np.ndarray:
    """Выбирает k начальных центроидов.

    Индексы тянутся равновероятно без повторов; если различных индексов
    меньше k, оставшиеся места заполняются случайными цветами.
    """
    total = len(points)
    centroids = []
    used_indices: set[int] = set()

    while len(centroids) < k and len(used_indices) < total:
        idx = int(rng.integers(total))
        if idx not in used_indices:
            used_indices.add(idx)
            centroids.append(points[idx].copy())

    while len(centroids) < k:
        centroids.append(np.asarray(rng.uniform(0, 255, size=3), dtype=np.float64))

    return np.vstack(centroids)


def assign_points(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Номер ближайшего центроида для каждой точки (при равенстве – меньший)."""
    distances = np.linalg.norm(points[:, np.newaxis, :] - centroids[np.newaxis, :, :], axis=2)
    # argmin возвращает первый минимум, что совпадает с обходом через строгое «<»
    return np.argmin(distances, axis=1)


def update_centroids(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Новый набор центроидов; пустые кластеры сохраняют прежнее значение."""
    new_centroids = centroids.copy()
    for i in range(len(centroids)):
        members = points[labels == i]
        if len(members):
            new_centroids[i] = members.mean(axis=0)
    return new_centroids


def has_converged(old: np.ndarray, new: np.ndarray, threshold: float = CONVERGENCE_THRESHOLD) -> bool:
    shifts = np.linalg.norm(new - old, axis=1)
    return bool(np.all(shifts < threshold))


def _round_centroids(centroids: np.ndarray) -> list[tuple[int, int, int]]:
    rounded = np.floor(centroids + 0.5).astype(int)
    return [(int(r), int(g), int(b)) for r, g, b in rounded]


def run_kmeans(points, k: int, max_iterations: int = DEFAULT_MAX_ITERATIONS, rng=None) -> KMeansResult:
    """Кластеризует RGB-точки в k центроидов и возвращает результат с диагностикой."""
    if k < 1:
        raise ValueError(f"Количество кластеров должно быть >= 1, получено {k}")

    data = _as_points(points)
    if rng is None:
        rng = np.random.default_rng()

    centroids = seed_centroids(data, k, rng)
    logger.debug("k-means: %s точек, k=%s, лимит итераций %s", len(data), k, max_iterations)

    iterations = 0
    converged = False
    while iterations < max_iterations:
        iterations += 1
        labels = assign_points(data, centroids)
        new_centroids = update_centroids(data, labels, centroids)
        converged = has_converged(centroids, new_centroids)
        centroids = new_centroids
        if converged:
            break

    logger.debug("k-means завершён за %s итераций (сходимость: %s)", iterations, converged)
    return KMeansResult(
        centroids=_round_centroids(centroids),
        iterations=iterations,
        converged=converged,
    )


def cluster_colors(points, k: int, max_iterations: int = DEFAULT_MAX_ITERATIONS, rng=None) -> list[tuple[int, int, int]]:
    """Возвращает ровно k доминирующих RGB-цветов выборки."""
    return run_kmeans(points, k, max_iterations=max_iterations, rng=rng).centroids
