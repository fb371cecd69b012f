"""cagewatch — live status and gift card countdown API."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from cagewatch import config
from cagewatch.gate import StatusGate
from cagewatch.log_redact import install_log_redaction
from cagewatch.models import StatusView
from cagewatch.ratelimit import RateLimiter
from cagewatch.services import build_checker

# --- Logging ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("cagewatch.api")

settings = config.load_settings()
gate = StatusGate(settings, build_checker(settings))
limiter = RateLimiter(config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_SECONDS)


def _log_startup_env_warnings() -> None:
    for name in settings.missing_settings():
        logger.warning("%s is not set; live checks will report failures until it is.", name)
    if settings.schedule_enabled:
        logger.info("Checks limited to the on-air schedule in %s", settings.timezone)


@asynccontextmanager
async def _lifespan(_: FastAPI):
    install_log_redaction((settings.gift_card_code, settings.twitch_client_secret))
    _log_startup_env_warnings()
    logger.info("Checking %s live status via %s", settings.streaming_url or "<unset>", gate.checker.name)
    yield


# --- App ---
app = FastAPI(
    title="cagewatch",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=_lifespan,
)

if config.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET"],
    )


def _enforce_rate_limit(request: Request) -> None:
    limiter.enforce(request)


@app.get("/check", response_class=PlainTextResponse)
async def check(_: None = Depends(_enforce_rate_limit)):
    return await gate.handle()


@app.get("/api/status", response_model=StatusView)
async def get_status(_: None = Depends(_enforce_rate_limit)):
    return gate.view()


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    uvicorn.run("cagewatch.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
