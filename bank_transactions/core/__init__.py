"""Core package: provides models, database tables, settings, errors and shared utilities."""

from .exceptions import BankTransactionsError, ErrorKind  # noqa: F401
from .models import ImportJob, ImportStatus, YearMonth  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
from .utils import get_logger  # noqa: F401
