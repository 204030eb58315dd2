"""Workers package: background processing of import jobs."""

from .import_processor import ImportProcessor  # noqa: F401
