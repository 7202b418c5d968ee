import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.database import engine, Base, verify_schema
from app.dependencies import get_generation_job
from app.messaging.redis_connection import RedisConnectionManager
from app.routers import shift_generation_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Shift Generation Service",
    description="Materialização automática de turnos a partir dos modelos de turno dos contratos",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(shift_generation_router)


@app.on_event("startup")
def startup():
    if config.AUTO_CREATE_SCHEMA:
        Base.metadata.create_all(bind=engine)
    else:
        verify_schema()

    if config.SCHEDULER_ENABLED:
        get_generation_job().start()
    else:
        logger.info("Geração automática desligada (SCHEDULER_ENABLED=false)")


@app.on_event("shutdown")
def shutdown():
    get_generation_job().stop()
    RedisConnectionManager().close()


@app.get("/")
def root():
    return {
        "message": "Shift Generation Service API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
