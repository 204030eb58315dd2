"""API package: provides FastAPI dependencies, error handlers and route definitions."""

from .dependencies import get_import_processor, get_import_service, get_stats_service  # noqa: F401
from .errors import register_exception_handlers  # noqa: F401
from .routes import router  # noqa: F401
