import os
from typing import Any, Dict

from fastapi import Request
from fastapi.templating import Jinja2Templates

from cinenova.constants import placeholder_poster


def app_context(request: Request) -> Dict[str, Any]:
    return {"app_name": request.app.state.settings.app_name}


templates_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
templates = Jinja2Templates(directory=templates_dir, context_processors=[app_context])
templates.env.globals["placeholder_poster"] = placeholder_poster
