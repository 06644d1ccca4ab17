"""Core business logic package for the smart expense tracker."""

from .exceptions import ExportError, PersistenceError, RecordNotFoundError, ValidationError
from .exporters import ExcelReportWriter, ExportResult, PDFReportWriter
from .ids import CounterIdGenerator, MonotonicIdGenerator
from .models import Adding, Editing, ExpenseRecord, FilterCriteria, IncomeRecord
from .storage import FileStorage, MemoryStorage
from .store import RecordStore
from .tracker import Ledger

__all__ = [
    "Adding",
    "Editing",
    "ExpenseRecord",
    "IncomeRecord",
    "FilterCriteria",
    "Ledger",
    "RecordStore",
    "FileStorage",
    "MemoryStorage",
    "MonotonicIdGenerator",
    "CounterIdGenerator",
    "PDFReportWriter",
    "ExcelReportWriter",
    "ExportResult",
    "ExportError",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
