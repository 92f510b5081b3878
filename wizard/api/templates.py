"""
Template rendering for the server-rendered flow pages
"""
from pathlib import Path

from fastapi.templating import Jinja2Templates

from wizard.flow.loader import REPO_ROOT
from wizard.settings import settings

TEMPLATES_DIR = Path(settings.TEMPLATES_DIR)
if not TEMPLATES_DIR.is_absolute():
    TEMPLATES_DIR = REPO_ROOT / TEMPLATES_DIR

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
