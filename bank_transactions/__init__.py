"""Bank transactions importer: monthly CSV ingestion jobs and materialized statistics."""
