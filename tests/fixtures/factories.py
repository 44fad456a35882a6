from decimal import Decimal

import factory
from django.contrib.auth.models import User
from factory.django import DjangoModelFactory

from tests.testapp.models import Customer, Note, Order, Profile


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ('username',)

    username = factory.Sequence(lambda n: f'user{n}')
    email = factory.LazyAttribute(lambda o: f'{o.username}@example.com')
    password = factory.django.Password('password')


class CustomerFactory(DjangoModelFactory):
    class Meta:
        model = Customer

    name = factory.Sequence(lambda n: f'Customer {n}')
    email = factory.LazyAttribute(lambda o: f"{o.name.lower().replace(' ', '.')}@example.com")


class ProfileFactory(DjangoModelFactory):
    class Meta:
        model = Profile

    customer = factory.SubFactory(CustomerFactory)
    display_name = factory.LazyAttribute(lambda o: f'{o.customer.name} (profile)')
    city = 'Almaty'


class OrderFactory(DjangoModelFactory):
    class Meta:
        model = Order

    customer = factory.SubFactory(CustomerFactory)
    reference = factory.Sequence(lambda n: f'ORD-{n:05d}')
    status = 'new'
    total = Decimal('100.00')


class NoteFactory(DjangoModelFactory):
    class Meta:
        model = Note

    title = factory.Sequence(lambda n: f'Note {n}')
    body = 'Body'
