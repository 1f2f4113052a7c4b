import csv
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generic, Iterable, Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.config import settings
from app.models.engagement import Feedback, NewsletterSubscription
from app.models.listing import Listing
from app.models.user import Pharmacist, User

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class CsvTable(Generic[RecordT]):
    """A flat CSV file holding rows of a single record model.

    Reads always load the whole file. Writes either append one row or rewrite
    the full table; the rewrite goes through a temp file in the same directory
    followed by ``os.replace`` so readers never observe a half-written table.
    """

    def __init__(self, path: Path, model: Type[RecordT]):
        self.path = Path(path)
        self.model = model
        self.fieldnames = list(model.model_fields)
        self._lock = threading.RLock()

    def create(self) -> None:
        with self._lock:
            if self.path.exists():
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", newline="", encoding="utf-8") as handle:
                csv.DictWriter(handle, fieldnames=self.fieldnames).writeheader()
            logger.info("Created %s with headers", self.path.name)

    def _read(self) -> tuple[list[RecordT], list[dict]]:
        """Return parsed records plus the raw rows the model rejected."""
        if not self.path.exists():
            return [], []
        records, unparsed = [], []
        with self.path.open("r", newline="", encoding="utf-8") as handle:
            for line_no, row in enumerate(csv.DictReader(handle), start=2):
                values = {
                    key: value
                    for key, value in row.items()
                    if key is not None and value is not None
                }
                try:
                    records.append(self.model(**values))
                except ValidationError:
                    logger.warning("Unreadable row %s in %s kept as-is", line_no, self.path.name)
                    unparsed.append(values)
        return records, unparsed

    def load(self) -> list[RecordT]:
        with self._lock:
            return self._read()[0]

    def rewrite(self, records: list[RecordT], unparsed: Iterable[dict] = ()) -> None:
        """Persist the full table; ``unparsed`` rows follow the records verbatim."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", newline="", encoding="utf-8") as handle:
                    writer = csv.DictWriter(handle, fieldnames=self.fieldnames, extrasaction="ignore")
                    writer.writeheader()
                    for record in records:
                        writer.writerow(record.model_dump(mode="json"))
                    for row in unparsed:
                        writer.writerow(row)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def append(self, record: RecordT) -> None:
        with self._lock:
            self.create()
            with self.path.open("a", newline="", encoding="utf-8") as handle:
                csv.DictWriter(handle, fieldnames=self.fieldnames).writerow(
                    record.model_dump(mode="json")
                )

    @contextmanager
    def transaction(self) -> Iterator[list[RecordT]]:
        """Hold the table lock across load -> mutate -> rewrite.

        The rewrite only happens when the block exits cleanly and the records
        changed, so raising inside the block leaves the file untouched. Rows
        the model cannot read are carried through the rewrite unchanged.
        """
        with self._lock:
            records, unparsed = self._read()
            snapshot = list(records)
            yield records
            if records != snapshot:
                self.rewrite(records, unparsed)


class Database:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.users: CsvTable[User] = CsvTable(self.data_dir / "users.csv", User)
        self.pharmacists: CsvTable[Pharmacist] = CsvTable(self.data_dir / "pharmacists.csv", Pharmacist)
        self.listings: CsvTable[Listing] = CsvTable(self.data_dir / "listings.csv", Listing)
        self.feedback: CsvTable[Feedback] = CsvTable(self.data_dir / "feedback.csv", Feedback)
        self.newsletter: CsvTable[NewsletterSubscription] = CsvTable(
            self.data_dir / "newsletter.csv", NewsletterSubscription
        )

    @property
    def tables(self) -> tuple[CsvTable, ...]:
        return (self.users, self.pharmacists, self.listings, self.feedback, self.newsletter)

    def create_all(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for table in self.tables:
            table.create()


database = Database(settings.DATA_DIR)


def get_db() -> Database:
    return database
