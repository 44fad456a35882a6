from decimal import Decimal

import pytest

from tests.fixtures.factories import CustomerFactory, OrderFactory, UserFactory


@pytest.fixture
def user(db):
    return UserFactory(username='auditor')


@pytest.fixture
def customer(db):
    return CustomerFactory(name='Alice Smith', email='alice@example.com')


@pytest.fixture
def order(customer):
    return OrderFactory(customer=customer, reference='ORD-1', total=Decimal('10.00'))
