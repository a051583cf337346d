"""
Unit tests for financial aggregation.
"""
import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fintrack.models.financial import TransactionType
from fintrack.services.aggregator import (
    FinancialAggregator,
    concept_breakdown,
    format_amount,
    monthly_breakdown,
    summarize,
)
from fintrack.services.authorization import AccessScope, Scope
from fintrack.utils.exceptions import StorageDegradedError

from factories.financial_factory import ExpenseFactory, IncomeFactory


def _scenario_a():
    return [
        IncomeFactory(amount=Decimal("1000")),
        ExpenseFactory(amount=Decimal("300")),
        IncomeFactory(amount=Decimal("500")),
        ExpenseFactory(amount=Decimal("200")),
    ]


@pytest.mark.unit
class TestSummarize:
    
    def test_mixed_transactions(self):
        summary = summarize(_scenario_a())
        
        assert summary.income == Decimal("1500")
        assert summary.expenses == Decimal("500")
        assert summary.balance == Decimal("1000")
    
    def test_empty_list(self):
        summary = summarize([])
        
        assert summary.income == 0
        assert summary.expenses == 0
        assert summary.balance == 0
    
    def test_order_independent(self):
        transactions = _scenario_a()
        expected = summarize(transactions)
        
        for permutation in itertools.permutations(transactions):
            assert summarize(permutation) == expected
    
    def test_balance_may_be_negative(self):
        summary = summarize([IncomeFactory(amount=Decimal("100")), ExpenseFactory(amount=Decimal("250.50"))])
        assert summary.balance == Decimal("-150.50")
    
    def test_decimal_sums_are_exact(self):
        summary = summarize([IncomeFactory(amount=Decimal("0.1")) for _ in range(3)])
        assert summary.income == Decimal("0.3")


@pytest.mark.unit
class TestFormatAmount:
    
    @pytest.mark.parametrize("value, expected", [
        (0, "$ 0"),
        (1500000, "$ 1.500.000"),
        (Decimal("999.99"), "$ 1.000"),
        (Decimal("1234.5"), "$ 1.235"),
        (Decimal("1234.49"), "$ 1.234"),
        (-250000, "-$ 250.000"),
        (Decimal("1000000000"), "$ 1.000.000.000"),
    ])
    def test_format(self, value, expected):
        assert format_amount(value) == expected


@pytest.mark.unit
class TestBreakdowns:
    
    def test_monthly_breakdown_is_chronological(self):
        transactions = [
            IncomeFactory(amount=Decimal("100"), date=datetime(2024, 2, 10, tzinfo=timezone.utc)),
            ExpenseFactory(amount=Decimal("40"), date=datetime(2024, 2, 20, tzinfo=timezone.utc)),
            IncomeFactory(amount=Decimal("70"), date=datetime(2023, 12, 5, tzinfo=timezone.utc)),
        ]
        
        months = monthly_breakdown(transactions)
        
        assert [m.month for m in months] == ["12/2023", "2/2024"]
        assert months[1].income == Decimal("100")
        assert months[1].expenses == Decimal("40")
    
    def test_monthly_breakdown_keeps_last_n(self):
        transactions = [
            IncomeFactory(date=datetime(2024, month, 1, tzinfo=timezone.utc))
            for month in range(1, 9)
        ]
        
        months = monthly_breakdown(transactions, months=3)
        
        assert [m.month for m in months] == ["6/2024", "7/2024", "8/2024"]
    
    def test_concept_breakdown_groups_by_type_and_concept(self):
        transactions = [
            ExpenseFactory(concept="Rent", amount=Decimal("800")),
            ExpenseFactory(concept="Rent", amount=Decimal("800")),
            IncomeFactory(concept="Salary", amount=Decimal("3000")),
            ExpenseFactory(concept="Food", amount=Decimal("250")),
            IncomeFactory(concept="Food", amount=Decimal("10")),
        ]
        
        concepts = concept_breakdown(transactions, limit=3)
        
        assert [(c.name, c.value) for c in concepts] == [
            ("Income: Salary", Decimal("3000")),
            ("Expense: Rent", Decimal("1600")),
            ("Expense: Food", Decimal("250")),
        ]
        assert concepts[1].type == TransactionType.EXPENSE


@pytest.mark.unit
class TestFinancialAggregator:
    
    @pytest.fixture
    def aggregator(self, transaction_store, user_store) -> FinancialAggregator:
        return FinancialAggregator(transaction_store, user_store)
    
    @pytest.fixture
    def seeded(self, make_user, transaction_store):
        async def _seed():
            admin = await make_user(admin=True)
            alice = await make_user()
            bob = await make_user()
            for txn in [
                IncomeFactory(user_id=alice.id, amount=Decimal("1000")),
                ExpenseFactory(user_id=alice.id, amount=Decimal("300")),
                IncomeFactory(user_id=bob.id, amount=Decimal("500")),
                ExpenseFactory(user_id=bob.id, amount=Decimal("200")),
            ]:
                await transaction_store.create(txn)
            return admin, alice, bob
        return _seed
    
    @pytest.mark.asyncio
    async def test_admin_summary_covers_everyone(self, aggregator, seeded):
        admin, alice, bob = await seeded()
        
        summary = await aggregator.summary(AccessScope(Scope.ALL, admin.id, None))
        
        assert summary.income == Decimal("1500")
        assert summary.expenses == Decimal("500")
        assert summary.balance == Decimal("1000")
        assert summary.total_users == 3
        assert summary.transaction_count == 4
        assert summary.formatted.balance == "$ 1.000"
    
    @pytest.mark.asyncio
    async def test_user_summary_is_own_only(self, aggregator, seeded):
        admin, alice, bob = await seeded()
        
        summary = await aggregator.summary(AccessScope(Scope.OWN, bob.id, bob.id))
        
        assert summary.income == Decimal("500")
        assert summary.expenses == Decimal("200")
        assert summary.balance == Decimal("300")
        assert summary.total_users == 1
    
    @pytest.mark.asyncio
    async def test_user_without_transactions(self, aggregator, make_user):
        carol = await make_user()
        
        summary = await aggregator.summary(AccessScope(Scope.OWN, carol.id, carol.id))
        
        assert summary.balance == 0
        assert summary.transaction_count == 0
        assert summary.formatted.income == "$ 0"
    
    @pytest.mark.asyncio
    async def test_fetch_failure_is_not_a_zero_summary(self, aggregator, firestore):
        firestore.unavailable = True
        with pytest.raises(StorageDegradedError):
            await aggregator.summary(AccessScope(Scope.ALL, "admin", None))
