"""Creation of persistable transaction records from validated drafts."""

from bank_transactions.core.models import TransactionDraft, TransactionRecord, YearMonth


class TransactionRecordFactory:
    """Builds ``TransactionRecord`` objects; the store assigns their ids on write."""

    def create(self, tx: TransactionDraft, job_id: str, year_month: YearMonth) -> TransactionRecord:
        """Tag a validated draft with its import job and canonical ``yyyy-MM`` month."""
        return TransactionRecord(
            import_job_id=job_id,
            iban=tx.iban,
            transaction_date=tx.transaction_date,
            currency=tx.currency,
            category=tx.category,
            amount=tx.amount,
            year_month=str(year_month),
        )
