"""CSV reading for monthly transaction uploads.

The reader turns the raw bytes of an upload into a lazy, restartable sequence of column-keyed rows.
The header is resolved once per file: every logical field has an ordered list of accepted
spellings, and the first spelling present in the header wins. A field with no match is left
unresolved and every row then fails mapping for it. Rows are read with pandas in chunks so a
large upload is never materialized as a single data frame.
"""

import io
from collections.abc import Iterator

import pandas as pd

from bank_transactions.core.exceptions import ImportFileReadError
from bank_transactions.core.utils import get_logger

IBAN = "IBAN"
DATE = "date"
CURRENCY = "currency"
CATEGORY = "category"
AMOUNT = "amount"
REQUIRED_COLUMNS = (IBAN, DATE, CURRENCY, CATEGORY, AMOUNT)

DEFAULT_CHUNK_SIZE = 1000
CSV_ENCODING = "utf-8-sig"

logger = get_logger("bank-transactions.reader")


def accepted_spellings(name: str) -> tuple[str, ...]:
    """Header spellings accepted for a column, in lookup order: exact, lower-case, upper-case."""
    spellings: list[str] = []
    for candidate in (name, name.lower(), name.upper()):
        if candidate not in spellings:
            spellings.append(candidate)
    return tuple(spellings)


def resolve_columns(header: list[str], required: tuple[str, ...] = REQUIRED_COLUMNS) -> dict[str, int]:
    """Map each required field to its column position; fields with no accepted spelling are left out."""
    positions: dict[str, int] = {}
    for field in required:
        for spelling in accepted_spellings(field):
            if spelling in header:
                positions[field] = header.index(spelling)
                break
    return positions


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        # pandas fills cells absent from a short row with NaN
        return None
    return value.strip()


class CsvRows:
    """Rows of one uploaded CSV file. Iterating again restarts from the first data row."""

    def __init__(self, file_bytes: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Read and resolve the header of ``file_bytes``."""
        self._data = file_bytes
        self._chunk_size = chunk_size
        self.header = self._read_header()
        self.columns = resolve_columns(self.header) if self.header is not None else {}
        self.missing = [field for field in REQUIRED_COLUMNS if self.header is not None and field not in self.columns]
        if self.missing:
            # Rows still flow; the mapper rejects each one for the absent field.
            logger.warning(f"CSV header lacks required columns: {', '.join(self.missing)}")

    def __iter__(self) -> Iterator[dict[str, str | None]]:
        """Yield one field-name to value mapping per data row, in file order."""
        if self.header is None:
            return
        names = self._row_keys()
        try:
            reader = pd.read_csv(
                io.BytesIO(self._data),
                dtype=str,
                keep_default_na=False,
                encoding=CSV_ENCODING,
                index_col=False,
                chunksize=self._chunk_size,
            )
            with reader:
                for chunk in reader:
                    for values in chunk.itertuples(index=False, name=None):
                        yield {name: _clean(value) for name, value in zip(names, values, strict=False)}
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            msg = f"Cannot read CSV file: {exc}"
            raise ImportFileReadError(msg) from exc

    def _read_header(self) -> list[str] | None:
        try:
            frame = pd.read_csv(io.BytesIO(self._data), dtype=str, encoding=CSV_ENCODING, nrows=0)
        except pd.errors.EmptyDataError:
            logger.info("CSV file is empty, no rows to read")
            return None
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            msg = f"Cannot read CSV file: {exc}"
            raise ImportFileReadError(msg) from exc
        return [str(column).strip() for column in frame.columns]

    def _row_keys(self) -> list[str]:
        """Key for each column position: canonical field name when resolved, header text otherwise."""
        keys = list(self.header)
        for field, position in self.columns.items():
            keys[position] = field
        return keys


class CsvTransactionReader:
    """Opens uploaded CSV bytes as a stream of rows."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize the reader with the number of rows pandas reads per chunk."""
        self.chunk_size = chunk_size

    def open(self, file_bytes: bytes | None) -> CsvRows:
        """Open ``file_bytes`` as CSV rows, raising ``ImportFileReadError`` if they cannot be read."""
        if file_bytes is None:
            msg = "Cannot read CSV file: no content"
            raise ImportFileReadError(msg)
        return CsvRows(bytes(file_bytes), self.chunk_size)
