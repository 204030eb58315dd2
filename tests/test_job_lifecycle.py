"""Integration tests for the import lifecycle: upload, status polling and statistics."""

from decimal import Decimal

from fastapi.testclient import TestClient

from bank_transactions.core.settings import Settings, get_settings
from conftest import IBAN, make_csv
from main import app

HTTP_200_OK = 200
HTTP_202_ACCEPTED = 202
HTTP_409_CONFLICT = 409
HTTP_413_TOO_LARGE = 413

JANUARY_CSV = make_csv(
    f"{IBAN},2026-01-02,PLN,Salary,12500.00",
    f"{IBAN},2026-01-03,PLN,Rent,-3200.00",
    f"{IBAN},2026-01-04,PLN,Groceries,-186.47",
    f"{IBAN},2026-01-05,PLN,Groceries,-92.13",
)


def upload_csv(client: TestClient, year_month: str, content: bytes, filename: str = "test.csv") -> dict:
    """Upload a CSV and return the created job snapshot."""
    files = {"file": (filename, content, "text/csv")}
    response = client.post("/api/v1/imports", files=files, data={"yearMonth": year_month})
    if response.status_code != HTTP_202_ACCEPTED:
        msg = f"Expected status {HTTP_202_ACCEPTED}, got {response.status_code}: {response.text}"
        raise AssertionError(msg)
    return response.json()


def poll_until_finished(client: TestClient, job_id: str) -> dict:
    """Poll the job until it reaches a terminal state."""
    for _ in range(20):
        response = client.get(f"/api/v1/imports/{job_id}")
        if response.status_code != HTTP_200_OK:
            msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
            raise AssertionError(msg)
        job = response.json()
        if job["status"] in ("COMPLETED", "FAILED"):
            return job
    msg = f"Job {job_id} did not finish, last status {job['status']}"
    raise AssertionError(msg)


def get_stats(client: TestClient, year_month: str, group_by: str, **params: object) -> list[dict]:
    """Fetch grouped statistics for a month."""
    response = client.get("/api/v1/stats", params={"yearMonth": year_month, "groupBy": group_by, **params})
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    return response.json()


def test_import_csv_and_generate_stats(client: TestClient) -> None:
    """Test the full lifecycle: upload, completion and category/IBAN/month statistics."""
    created = upload_csv(client, "2026-01", JANUARY_CSV)
    if created["status"] != "RECEIVED" or created["yearMonth"] != "2026-01" or not created["id"]:
        msg = f"Expected a RECEIVED job for 2026-01, got {created}"
        raise AssertionError(msg)
    if created["fileName"] != "test.csv":
        msg = f"Expected fileName test.csv, got {created['fileName']}"
        raise AssertionError(msg)

    completed = poll_until_finished(client, created["id"])
    counters = (completed["status"], completed["totalRows"], completed["importedRows"], completed["invalidRows"])
    if counters != ("COMPLETED", 4, 4, 0):
        msg = f"Expected COMPLETED with 4/4/0 rows, got {counters}"
        raise AssertionError(msg)
    if not completed["startedAt"] or not completed["finishedAt"] or completed["errorMessage"] is not None:
        msg = f"Expected start/finish timestamps and no error, got {completed}"
        raise AssertionError(msg)

    category_stats = {row["key"]: row for row in get_stats(client, "2026-01", "CATEGORY")}
    if set(category_stats) != {"Salary", "Rent", "Groceries"}:
        msg = f"Expected three categories, got {sorted(category_stats)}"
        raise AssertionError(msg)
    groceries = category_stats["Groceries"]
    if groceries["count"] != 2 or Decimal(groceries["totalAmount"]) != Decimal("-278.60"):
        msg = f"Expected Groceries count=2 total=-278.60, got {groceries}"
        raise AssertionError(msg)

    iban_stats = get_stats(client, "2026-01", "IBAN")
    if len(iban_stats) != 1 or iban_stats[0]["key"] != IBAN or iban_stats[0]["count"] != 4:
        msg = f"Expected a single IBAN row with 4 transactions, got {iban_stats}"
        raise AssertionError(msg)

    month_stats = get_stats(client, "2026-01", "MONTH")
    expected_total = Decimal("12500.00") - Decimal("3200.00") - Decimal("186.47") - Decimal("92.13")
    if len(month_stats) != 1 or month_stats[0]["key"] != "TOTAL" or month_stats[0]["currency"] != "PLN":
        msg = f"Expected one TOTAL row in PLN, got {month_stats}"
        raise AssertionError(msg)
    if Decimal(month_stats[0]["totalAmount"]) != expected_total:
        msg = f"Expected month total {expected_total}, got {month_stats[0]['totalAmount']}"
        raise AssertionError(msg)


def test_stats_sorting_and_limit(client: TestClient) -> None:
    """Test that ascending puts the most negative total first and descending the largest."""
    poll_until_finished(client, upload_csv(client, "2026-01", JANUARY_CSV)["id"])

    descending = get_stats(client, "2026-01", "CATEGORY", sort="TOTAL_DESC")
    ascending = get_stats(client, "2026-01", "CATEGORY", sort="TOTAL_ASC")
    if [row["key"] for row in descending] != ["Salary", "Groceries", "Rent"]:
        msg = f"Unexpected descending order: {descending}"
        raise AssertionError(msg)
    if [row["key"] for row in ascending] != ["Rent", "Groceries", "Salary"]:
        msg = f"Unexpected ascending order: {ascending}"
        raise AssertionError(msg)

    limited = get_stats(client, "2026-01", "CATEGORY", limit=1)
    if [row["key"] for row in limited] != ["Salary"]:
        msg = f"Expected only the top row, got {limited}"
        raise AssertionError(msg)


def test_partial_import_with_invalid_rows(client: TestClient) -> None:
    """Test that invalid rows are counted and skipped without failing the job."""
    csv = make_csv(
        f"{IBAN},2026-01-02,PLN,Salary,12500.00",
        "INVALID_IBAN,2026-01-03,PLN,Food,-50.00",
        f"{IBAN},2026-02-15,PLN,Food,-30.00",
        f"{IBAN},2026-01-05,PLN,Groceries,-100.00",
    )
    completed = poll_until_finished(client, upload_csv(client, "2026-01", csv, "partial.csv")["id"])
    counters = (completed["status"], completed["totalRows"], completed["importedRows"], completed["invalidRows"])
    if counters != ("COMPLETED", 4, 2, 2):
        msg = f"Expected COMPLETED with 4/2/2 rows, got {counters}"
        raise AssertionError(msg)

    categories = {row["key"] for row in get_stats(client, "2026-01", "CATEGORY")}
    if categories != {"Salary", "Groceries"}:
        msg = f"Expected only valid rows in stats, got {categories}"
        raise AssertionError(msg)


def test_rejects_duplicate_import_for_same_month(client: TestClient) -> None:
    """Test that a second upload for a month with an existing job is a conflict."""
    csv = make_csv(f"{IBAN},2026-01-02,PLN,Salary,5000.00")
    upload_csv(client, "2026-01", csv, "first.csv")

    files = {"file": ("second.csv", csv, "text/csv")}
    response = client.post("/api/v1/imports", files=files, data={"yearMonth": "2026-01"})
    if response.status_code != HTTP_409_CONFLICT:
        msg = f"Expected status {HTTP_409_CONFLICT}, got {response.status_code}"
        raise AssertionError(msg)
    if response.json()["code"] != "IMPORT_ALREADY_EXISTS":
        msg = f"Expected code IMPORT_ALREADY_EXISTS, got {response.json()}"
        raise AssertionError(msg)

    other_month = upload_csv(client, "2026-02", make_csv(f"{IBAN},2026-02-02,PLN,Salary,5000.00"))
    if other_month["status"] != "RECEIVED":
        msg = f"Expected a new job for an unused month, got {other_month}"
        raise AssertionError(msg)


def test_empty_files_complete_without_rows(client: TestClient) -> None:
    """Test that header-only and fully empty files complete with zero rows and no stats."""
    for year_month, content in (("2026-01", make_csv()), ("2026-02", b"")):
        completed = poll_until_finished(client, upload_csv(client, year_month, content)["id"])
        counters = (completed["status"], completed["totalRows"], completed["importedRows"], completed["invalidRows"])
        if counters != ("COMPLETED", 0, 0, 0):
            msg = f"Expected COMPLETED with 0/0/0 rows for {year_month}, got {counters}"
            raise AssertionError(msg)
        if get_stats(client, year_month, "MONTH") != []:
            msg = f"Expected no stats for {year_month}"
            raise AssertionError(msg)


def test_malformed_file_fails_job(client: TestClient) -> None:
    """Test that a structurally broken CSV ends the job in FAILED with an error message."""
    csv = make_csv(f'"{IBAN},2026-01-02,PLN,Salary,12500.00')
    failed = poll_until_finished(client, upload_csv(client, "2026-01", csv)["id"])
    if failed["status"] != "FAILED" or not failed["errorMessage"] or not failed["finishedAt"]:
        msg = f"Expected FAILED with an error message, got {failed}"
        raise AssertionError(msg)
    if len(failed["errorMessage"]) > 300:
        msg = f"Expected the error message to be truncated, got {len(failed['errorMessage'])} characters"
        raise AssertionError(msg)


def test_monthly_stats_range(client: TestClient) -> None:
    """Test month totals across a range, oldest month first."""
    poll_until_finished(client, upload_csv(client, "2026-02", make_csv(f"{IBAN},2026-02-10,PLN,Rent,-3200.00"))["id"])
    poll_until_finished(client, upload_csv(client, "2026-01", JANUARY_CSV)["id"])
    poll_until_finished(client, upload_csv(client, "2026-04", make_csv(f"{IBAN},2026-04-10,EUR,Rent,-700.00"))["id"])

    response = client.get("/api/v1/stats/monthly", params={"from": "2026-01", "to": "2026-03"})
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    rows = response.json()
    summary = [(row["yearMonth"], row["currency"], row["count"]) for row in rows]
    if summary != [("2026-01", "PLN", 4), ("2026-02", "PLN", 1)]:
        msg = f"Unexpected monthly rows: {rows}"
        raise AssertionError(msg)
    if Decimal(rows[1]["totalAmount"]) != Decimal("-3200.00"):
        msg = f"Expected February total -3200.00, got {rows[1]['totalAmount']}"
        raise AssertionError(msg)


def test_rejects_too_large_upload(client: TestClient) -> None:
    """Test that uploads over the configured limit are rejected before a job is created."""
    app.dependency_overrides[get_settings] = lambda: Settings(max_upload_size_bytes=10)
    files = {"file": ("big.csv", JANUARY_CSV, "text/csv")}
    response = client.post("/api/v1/imports", files=files, data={"yearMonth": "2026-01"})
    if response.status_code != HTTP_413_TOO_LARGE:
        msg = f"Expected status {HTTP_413_TOO_LARGE}, got {response.status_code}"
        raise AssertionError(msg)
    if response.json()["code"] != "FILE_TOO_LARGE":
        msg = f"Expected code FILE_TOO_LARGE, got {response.json()}"
        raise AssertionError(msg)
