import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config import get_settings
from app.routes import rivers, alerts, report

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="River Watch API",
    description="Near-real-time water level, flow and temperature readings for Bavarian rivers and lakes. "
                "Data scraped from the Hochwassernachrichtendienst (HND) and Gewässerkundlicher Dienst (GKD) Bayern.",
    version="1.0.0",
    contact={
        "name": "Hochwassernachrichtendienst Bayern",
        "url": "https://www.hnd.bayern.de",
    },
    license_info={
        "name": "MIT",
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rivers.router, prefix="/rivers", tags=["Rivers"])
app.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
app.include_router(report.router, prefix="/report", tags=["Report"])


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "service": "river-watch-api",
        "water_bodies": len(get_settings().water_bodies),
    }
