import logging

from fastapi import FastAPI

from .db import Base, SessionLocal, engine, ensure_schema
from .metrics import get_weight_table
from .settings import settings
from .routers import health
from .routers import auth
from .routers import admin
from .routers import drafts
from .routers import metrics
from .routers import screenshots
from .routers import submissions

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront_lab")

app = FastAPI(title="Storefront A/B Lab API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(submissions.router)
app.include_router(drafts.router)
app.include_router(metrics.router)
app.include_router(screenshots.router)


@app.get("/info")
def root():
	return {
		"status": "ok",
		"report_generation_configured": bool(settings.anthropic_api_key),
		"screenshots_configured": bool(settings.screenshot_service_url),
		"weight_entries": len(get_weight_table()),
	}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	ensure_schema()
	# Fail fast on a broken weights file
	table = get_weight_table()
	logger.info("Loaded %d scoring weight entries", len(table))
	if settings.seed_admin_username and settings.seed_admin_password:
		db = SessionLocal()
		try:
			auth.ensure_admin_user(db, settings.seed_admin_username, settings.seed_admin_password)
		finally:
			db.close()
