"""
CSV export of transaction reports.
"""
import csv
import io
from datetime import date
from decimal import Decimal
from typing import List, Optional

import structlog

from ..models.financial import TransactionResponse, TransactionType
from ..utils.constants import CSV_DATE_FORMAT, CSV_FILENAME_TEMPLATE

logger = structlog.get_logger()

CSV_FIELDNAMES = ["Concept", "Amount", "Type", "Date", "User", "Created At"]

TYPE_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
}


def _plain_amount(amount: Decimal) -> str:
    return format(amount.normalize(), "f")


def transactions_to_csv(transactions: List[TransactionResponse]) -> str:
    """Render transactions as CSV with every field quoted."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDNAMES, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writeheader()
    
    for txn in transactions:
        writer.writerow({
            "Concept": txn.concept,
            "Amount": _plain_amount(txn.amount),
            "Type": TYPE_LABELS[txn.type],
            "Date": txn.date.strftime(CSV_DATE_FORMAT),
            "User": txn.user.name if txn.user else "",
            "Created At": txn.created_at.strftime(CSV_DATE_FORMAT),
        })
    
    csv_content = output.getvalue()
    output.close()
    
    logger.info("Transactions exported", format="csv", rows=len(transactions))
    return csv_content


def export_filename(today: Optional[date] = None) -> str:
    """``transactions_report_<YYYY-MM-DD>.csv``"""
    return CSV_FILENAME_TEMPLATE.format(date=(today or date.today()).isoformat())
