from pathlib import Path

from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from wizard.api.routes import router as api_router
from wizard.api.pages import router as pages_router
from wizard.flow.loader import REPO_ROOT, ConfigLoadError, load_flow_config, resolve_config_path
from wizard.observability.logging import log
from wizard.settings import settings

app = FastAPI(title="AdSpend Doctor")

# Same-origin by default; list extra origins in CORS_ORIGINS (comma-separated)
origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)

_static_dir = Path(settings.STATIC_DIR)
if not _static_dir.is_absolute():
    _static_dir = REPO_ROOT / _static_dir
app.mount("/static", StaticFiles(directory=str(_static_dir), check_dir=False), name="static")


@app.get("/health")
def health():
    return {"status": "ok"}


# Registered last: its catch-all GET renders the flow for any other path
app.include_router(pages_router)


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    log(event="unhandled_exception", path=request.url.path, errorType=type(exc).__name__, error=str(exc)[:500])
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


# Boot snapshot (stdout); a broken flow document is reported, not fatal
try:
    _flow = load_flow_config()
    log(event="boot", mockServices=settings.MOCK_SERVICES, app=_flow.app.name,
        steps=len(_flow.flow.steps), configPath=str(resolve_config_path()))
except ConfigLoadError as e:
    log(event="boot_config_invalid", error=str(e)[:500])
