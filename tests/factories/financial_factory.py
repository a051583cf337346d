"""
Factory for Financial model testing.
"""

from datetime import timedelta
from decimal import Decimal

import factory
from faker import Faker

from fintrack.models.base import utcnow
from fintrack.models.financial import Transaction, TransactionType

fake = Faker()


class TransactionFactory(factory.Factory):
    """Factory for Transaction model."""
    
    class Meta:
        model = Transaction
    
    id = factory.Sequence(lambda n: f"txn_{n:06d}")
    concept = factory.Faker("word")
    amount = factory.LazyFunction(lambda: Decimal(fake.random_int(min=1000, max=500000)))
    type = factory.Iterator([TransactionType.INCOME, TransactionType.EXPENSE])
    date = factory.LazyFunction(lambda: utcnow() - timedelta(days=fake.random_int(min=0, max=30)))
    user_id = factory.Sequence(lambda n: f"user_{n:04d}")


class IncomeFactory(TransactionFactory):
    type = TransactionType.INCOME


class ExpenseFactory(TransactionFactory):
    type = TransactionType.EXPENSE
