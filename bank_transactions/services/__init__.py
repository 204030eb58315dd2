"""Services package: job, transaction and statistics stores plus the services built on them."""

from .import_service import ImportService  # noqa: F401
from .job_store import JobStore  # noqa: F401
from .record_factory import TransactionRecordFactory  # noqa: F401
from .stats_materializer import TransactionStatsMaterializer  # noqa: F401
from .stats_service import TransactionStatsService  # noqa: F401
from .stats_store import StatsStore  # noqa: F401
from .transaction_store import TransactionBatchWriter, TransactionStore  # noqa: F401
