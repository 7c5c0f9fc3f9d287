# ultra_eval/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ultra_eval.core.config import settings
from ultra_eval.core.logging import setup_logging
from ultra_eval.db.session import init_db
from ultra_eval.api.v1.endpoints import admin, auth, health, leaderboard, students, submissions, uploads
from ultra_eval.services.evaluation_service import Evaluator, build_openai_client, storage_hosts_for
from ultra_eval.services.notification_service import build_notifier
from ultra_eval.services.storage_service import AttachmentStorage, build_s3_client
from ultra_eval import models  # noqa

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    setup_logging()
    init_db()

    app.state.evaluator = Evaluator(
        build_openai_client(settings),
        model=settings.OPENAI_MODEL,
        storage_hosts=storage_hosts_for(settings),
    )
    app.state.notifier = build_notifier(settings)
    app.state.storage = AttachmentStorage(
        build_s3_client(settings), settings.S3_BUCKET_NAME, settings.AWS_REGION
    )
    logger.info(f"{settings.PROJECT_NAME} started")


API_PREFIX = "/api/v1"

app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(submissions.router, prefix=API_PREFIX)
app.include_router(students.router, prefix=API_PREFIX)
app.include_router(leaderboard.router, prefix=API_PREFIX)
app.include_router(admin.router, prefix=API_PREFIX)
app.include_router(uploads.router, prefix=API_PREFIX)
app.include_router(health.router, prefix=API_PREFIX)
