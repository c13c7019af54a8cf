"""
Rate limit en memoria por (identificador, ruta) con ventana deslizante.

Uso: en `/login`, allow((ip, "/login"), limit=settings.login_rate_per_min).
Las claves sin intentos dentro de la ventana se descartan para no crecer sin límite.
"""
from time import time
from typing import Dict, Tuple

BUCKET: Dict[Tuple[str, str], list[float]] = {}


def _sweep(now: float, window_seconds: int) -> None:
    stale = [k for k, q in BUCKET.items() if not q or now - q[-1] >= window_seconds]
    for k in stale:
        del BUCKET[k]


def allow(key: Tuple[str, str], limit: int = 5, window_seconds: int = 60) -> bool:
    """True si el intento entra en el cupo de la ventana; en ese caso lo registra."""
    now = time()
    _sweep(now, window_seconds)
    q = [t for t in BUCKET.get(key, []) if now - t < window_seconds]
    if len(q) >= limit:
        BUCKET[key] = q
        return False
    q.append(now)
    BUCKET[key] = q
    return True


def reset() -> None:
    """Limpia el bucket (útil en tests o reinicios)."""
    BUCKET.clear()
