import json
from decimal import Decimal

import pytest
from django.db import DatabaseError

from auditable.apps.audit.context import acting_as, audit_disabled
from auditable.apps.audit.exceptions import PersistenceError
from auditable.apps.audit.models import AuditableLog
from tests.fixtures.factories import CustomerFactory, NoteFactory, OrderFactory
from tests.testapp.models import Order


def payload(raw):
    return json.loads(raw) if raw is not None else None


def columns(raw):
    return [pair['column'] for pair in payload(raw)]


@pytest.mark.django_db
class TestCreated:
    def test_one_created_row(self, customer):
        order = OrderFactory(customer=customer, reference='ORD-9', total=Decimal('5.00'))

        logs = list(order.audits)
        assert len(logs) == 1
        log = logs[0]
        assert log.key == 'created'
        assert log.auditable_type == 'testapp.order'
        assert log.auditable_id == order.pk
        assert log.old_value is None
        assert columns(log.new_value) == ['id', 'reference', 'status', 'total', 'contact_email', 'customer_id']

    def test_instance_key_override(self, customer):
        order = Order(customer=customer, reference='ORD-10')
        order.audit_key = 'imported'
        order.save()

        assert [log.key for log in order.audits] == ['imported']

    def test_created_without_tracked_values_is_still_recorded(self, customer):
        order = Order(customer=customer, reference='ORD-11')
        order.set_audit_columns(['notes', 'placed_on'])
        order.save()

        log = order.audits.get()
        assert log.key == 'created'
        assert payload(log.new_value) == []

    def test_created_row_without_acting_user(self, order):
        assert order.audits.get().user_id is None

    def test_created_row_with_acting_user(self, customer, user):
        with acting_as(user):
            order = OrderFactory(customer=customer)
        assert order.audits.get().user == user


@pytest.mark.django_db
class TestUpdated:
    def test_no_change_writes_nothing(self, order):
        order.save()
        order.save()
        assert order.audits.count() == 1

    def test_change_of_untracked_column_writes_nothing(self):
        note = NoteFactory(title='First', body='one')
        note.body = 'two'
        note.save()
        assert note.audits.count() == 1

    def test_k_changes_write_one_row_with_k_pairs(self, order):
        order.status = 'paid'
        order.total = Decimal('11.00')
        order.notes = 'gift wrap'
        order.save()

        log = order.audits.get(key='updated')
        old, new = payload(log.old_value), payload(log.new_value)
        assert len(old) == len(new) == 3
        assert [pair['column'] for pair in old] == [pair['column'] for pair in new] == ['status', 'total', 'notes']
        assert old == [
            {'column': 'status', 'value': 'new'},
            {'column': 'total', 'value': '10.00'},
            {'column': 'notes', 'value': None},
        ]
        assert new[0] == {'column': 'status', 'value': 'paid'}
        assert new[2] == {'column': 'notes', 'value': 'gift wrap'}

    def test_successive_updates_do_not_leak(self, order):
        order.status = 'paid'
        order.save()
        order.notes = 'shipped'
        order.save()

        first, second = order.audits.filter(key='updated').order_by('id')
        assert columns(first.new_value) == ['status']
        assert columns(second.new_value) == ['notes']

    def test_update_fields_limits_the_diff(self, order):
        order.status = 'paid'
        order.notes = 'not saved yet'
        order.save(update_fields=['status'])

        log = order.audits.get(key='updated')
        assert columns(log.new_value) == ['status']

        order.save(update_fields=['notes'])
        assert columns(order.audits.filter(key='updated').latest('id').new_value) == ['notes']

    def test_refresh_from_db_resets_originals(self, order):
        order.status = 'paid'
        order.refresh_from_db()
        order.save()
        assert order.audits.filter(key='updated').count() == 0

    def test_loaded_instance_tracks_changes(self, order):
        loaded = Order.objects.get(pk=order.pk)
        loaded.customer = CustomerFactory(name='Bob')
        loaded.save()

        log = loaded.audits.get(key='updated')
        assert payload(log.old_value) == [{'column': 'customer_id', 'value': order.customer_id}]
        assert payload(log.new_value) == [{'column': 'customer_id', 'value': loaded.customer_id}]

    def test_key_override(self, order):
        order.audit_key = 'status-changed'
        order.status = 'paid'
        order.save()
        assert order.audits.filter(key='status-changed').count() == 1


@pytest.mark.django_db
class TestDeleted:
    def test_deleted_row_holds_final_values(self, order):
        order_id = order.pk
        order.delete()

        log = AuditableLog.objects.get(auditable_type='testapp.order', auditable_id=order_id, key='deleted')
        assert log.new_value is None
        old = payload(log.old_value)
        assert [pair['column'] for pair in old] == [
            'id', 'reference', 'status', 'total', 'contact_email', 'notes', 'placed_on', 'customer_id',
        ]
        assert old[0] == {'column': 'id', 'value': order_id}

    def test_cascade_deletes_are_recorded(self, order):
        customer_id, order_id = order.customer_id, order.pk
        order.customer.delete()

        assert AuditableLog.objects.filter(
            auditable_type='testapp.customer', auditable_id=customer_id, key='deleted'
        ).count() == 1
        assert AuditableLog.objects.filter(
            auditable_type='testapp.order', auditable_id=order_id, key='deleted'
        ).count() == 1

    def test_queryset_delete_is_recorded_per_row(self, customer):
        OrderFactory.create_batch(3, customer=customer)
        Order.objects.filter(customer=customer).delete()
        assert AuditableLog.objects.filter(auditable_type='testapp.order', key='deleted').count() == 3


@pytest.mark.django_db
class TestSwitches:
    def test_raw_saves_are_not_recorded(self, order):
        order.status = 'paid'
        order.save_base(raw=True)
        assert order.audits.count() == 1

    def test_disabled_by_setting(self, customer, settings):
        settings.AUDITABLE_ENABLED = False
        order = OrderFactory(customer=customer)
        order.status = 'paid'
        order.save()
        order_id = order.pk
        order.delete()
        assert not AuditableLog.objects.filter(auditable_type='testapp.order', auditable_id=order_id).exists()

    def test_disabled_for_a_block(self, order):
        with audit_disabled():
            order.status = 'paid'
            order.save()
        order.notes = 'after'
        order.save()

        assert columns(order.audits.get(key='updated').new_value) == ['notes']


@pytest.mark.django_db
class TestFailures:
    def test_persistence_failure_surfaces_from_save(self, order, mocker):
        mocker.patch.object(AuditableLog, 'save', side_effect=DatabaseError('audit store down'))
        order.status = 'paid'

        with pytest.raises(PersistenceError) as excinfo:
            order.save()
        assert isinstance(excinfo.value.__cause__, DatabaseError)

    def test_persistence_failure_surfaces_from_delete(self, order, mocker):
        mocker.patch.object(AuditableLog, 'save', side_effect=DatabaseError('audit store down'))
        with pytest.raises(PersistenceError):
            order.delete()


@pytest.mark.django_db
class TestDeferredFields:
    def test_partial_refresh_keeps_pending_changes(self, order):
        order.status = 'paid'
        order.refresh_from_db(fields=['notes'])
        order.save()

        log = order.audits.get(key='updated')
        assert payload(log.old_value) == [{'column': 'status', 'value': 'new'}]
        assert payload(log.new_value) == [{'column': 'status', 'value': 'paid'}]

    def test_update_after_reading_a_deferred_field(self, order):
        loaded = Order.objects.only('id', 'status').get(pk=order.pk)
        loaded.status = 'paid'
        assert loaded.notes is None
        loaded.save()

        log = loaded.audits.get(key='updated')
        assert payload(log.new_value) == [{'column': 'status', 'value': 'paid'}]

    def test_assignment_to_a_deferred_field(self, order):
        loaded = Order.objects.only('id', 'status').get(pk=order.pk)
        loaded.notes = 'gift wrap'
        loaded.save()

        log = loaded.audits.get(key='updated')
        assert payload(log.old_value) == [{'column': 'notes', 'value': None}]
        assert payload(log.new_value) == [{'column': 'notes', 'value': 'gift wrap'}]
        assert Order.objects.get(pk=order.pk).notes == 'gift wrap'

    def test_unchanged_deferred_load_writes_nothing(self, order):
        loaded = Order.objects.defer('reference', 'total').get(pk=order.pk)
        loaded.save()
        assert order.audits.count() == 1

    def test_delete_of_a_deferred_load_holds_final_values(self, order):
        order_id = order.pk
        Order.objects.only('id', 'status').get(pk=order_id).delete()

        log = AuditableLog.objects.get(auditable_type='testapp.order', auditable_id=order_id, key='deleted')
        values = {pair['column']: pair['value'] for pair in payload(log.old_value)}
        assert values['reference'] == 'ORD-1'
        assert values['total'] == '10.00'
        assert values['customer_id'] == order.customer_id
        assert values['status'] == 'new'
