# ecobites/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ecobites.core.config import settings
from ecobites.core.errors import install_error_handlers
from ecobites.deps import get_geocoder, get_repo
from ecobites.routers import auth, donor, geo

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)
    repo = get_repo()
    if hasattr(repo, "ensure_indexes"):
        await repo.ensure_indexes()
        logger.info("Connected to MongoDB database %r", settings.mongo_db)
    else:
        logger.info("Using in-memory repository (USE_MONGO is off)")
    yield
    await get_geocoder().aclose()
    if settings.use_mongo:
        from ecobites.core.db import get_client
        get_client().close()


app = FastAPI(lifespan=lifespan, title="Ecobites API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origin.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
install_error_handlers(app)

app.include_router(auth.router)     # /api/auth
app.include_router(donor.router)    # /api/donor
app.include_router(geo.router)      # /api/geo

app.mount("/uploads", StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")


@app.get("/health")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ecobites.main:app", host="0.0.0.0", port=settings.port)
