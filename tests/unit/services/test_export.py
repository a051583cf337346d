"""
Unit tests for CSV export.
"""
import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fintrack.models.financial import TransactionResponse
from fintrack.services.export import CSV_FIELDNAMES, export_filename, transactions_to_csv

from factories.financial_factory import ExpenseFactory, IncomeFactory
from factories.user_factory import UserFactory


@pytest.mark.unit
class TestCsvExport:
    
    def test_rows_and_quoting(self):
        owner = UserFactory(name="Ana María")
        income = IncomeFactory(
            concept='Freelance, "urgent"',
            amount=Decimal("1500000.00"),
            date=datetime(2024, 3, 5, tzinfo=timezone.utc),
            created_at=datetime(2024, 3, 6, tzinfo=timezone.utc),
            user_id=owner.id
        )
        expense = ExpenseFactory(
            concept="Rent",
            amount=Decimal("800.5"),
            date=datetime(2024, 12, 31, tzinfo=timezone.utc),
            user_id="gone"
        )
        
        content = transactions_to_csv([
            TransactionResponse.from_transaction(income, owner),
            TransactionResponse.from_transaction(expense),
        ])
        
        lines = content.splitlines()
        assert lines[0] == '"Concept","Amount","Type","Date","User","Created At"'
        assert lines[1] == '"Freelance, ""urgent""","1500000","Income","05/03/2024","Ana María","06/03/2024"'
        
        rows = list(csv.DictReader(io.StringIO(content)))
        assert rows[1]["Type"] == "Expense"
        assert rows[1]["Amount"] == "800.5"
        assert rows[1]["Date"] == "31/12/2024"
        assert rows[1]["User"] == ""
    
    def test_empty_export_has_header_only(self):
        content = transactions_to_csv([])
        
        assert list(csv.reader(io.StringIO(content))) == [CSV_FIELDNAMES]
    
    def test_export_filename(self):
        assert export_filename(date(2024, 3, 15)) == "transactions_report_2024-03-15.csv"
