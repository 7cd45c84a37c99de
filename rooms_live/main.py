# rooms_live/main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rooms_live import config
from rooms_live.coordinator import FetchCoordinator
from rooms_live.fallback import FallbackLoader
from rooms_live.models import Snapshot
from rooms_live.scrape import BrowserSession

logger = logging.getLogger(__name__)

session = BrowserSession()
coordinator = FetchCoordinator(session, FallbackLoader())


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("GET http://localhost:%d/ serves %s", config.PORT, config.WIIMMFI_URL)
    try:
        yield
    finally:
        logger.info("Shutting down...")
        session.close()


app = FastAPI(title="Rooms Live API", version="1.0.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"], allow_headers=["*"])


def _snapshot_response(snapshot: Snapshot) -> Response:
    return Response(content=snapshot.body, media_type="application/json")


@app.get("/")
def rooms(background_tasks: BackgroundTasks):
    snapshot = coordinator.current()
    if snapshot is not None:
        # answer from cache, refresh after the response is sent
        background_tasks.add_task(coordinator.refresh)
        return _snapshot_response(snapshot)

    snapshot = coordinator.refresh()
    if snapshot is None:
        return JSONResponse(status_code=503, content={"error": config.WARMING_UP_MESSAGE})
    return _snapshot_response(snapshot)


@app.get("/health")
def health():
    snapshot = coordinator.current()
    return {
        "ok": True,
        "fetching": coordinator.state.fetching,
        "snapshot": snapshot.summary() if snapshot is not None else None,
    }


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
