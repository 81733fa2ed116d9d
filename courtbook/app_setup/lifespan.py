"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Démarre le balayage périodique des réservations en attente (TTL) et l'arrête proprement.
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
  - RESERVATION_SWEEP_INTERVAL_SECONDS=0: désactive le balayage périodique
"""
import asyncio
import contextlib
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from courtbook import config
from courtbook.reservations.service import run_expiry_sweep

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except Exception:
    FakeRedis = None

logger = logging.getLogger("uvicorn.error")

async def _init_rate_limiter(app: FastAPI) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        use_fake = os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1"
        if use_fake:
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

async def sweep_forever(interval_seconds: float) -> None:
    """Expire périodiquement les réservations pending au-delà du TTL; une erreur n'arrête pas la boucle."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            expired = await asyncio.to_thread(run_expiry_sweep)
            if expired:
                logger.info("Reservation sweep expired=%s", expired)
        except Exception:
            logger.exception("Reservation sweep failed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    await _init_rate_limiter(app)

    sweep_task = None
    interval = config.RESERVATION_SWEEP_INTERVAL_SECONDS
    if interval > 0:
        sweep_task = asyncio.create_task(sweep_forever(interval))
        logger.info("Reservation sweep enabled every %ss (ttl=%smin)", interval, config.RESERVATION_TTL_MINUTES)
    else:
        logger.info("Reservation sweep disabled")
    app.state.sweep_task = sweep_task

    try:
        yield
    finally:
        if sweep_task is not None:
            sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweep_task
