import datetime
from decimal import Decimal

import pytest

from auditable.apps.audit.capture import capture_create, capture_delete, capture_update
from auditable.apps.audit.schema import list_columns
from tests.fixtures.factories import NoteFactory
from tests.testapp.models import Order

ORDER_TRACKED = [
    'id', 'reference', 'status', 'total', 'contact_email', 'notes', 'placed_on', 'customer_id',
]


def columns(pairs):
    return [pair['column'] for pair in pairs]


@pytest.mark.django_db
class TestColumnPolicy:
    def test_wildcard_uses_table_columns_minus_avoided(self, order):
        assert order.get_audit_columns() == ORDER_TRACKED

    @pytest.mark.parametrize('avoid', [
        [],
        ['id'],
        ['notes', 'placed_on'],
        ['customer_id', 'updated_at', 'total'],
        ['id', 'reference', 'status', 'total', 'contact_email', 'notes', 'placed_on', 'updated_at', 'customer_id'],
    ])
    def test_wildcard_with_any_deny_list(self, order, avoid):
        order.set_audit_columns_to_avoid(avoid)

        expected = [column for column in list_columns('testapp_order') if column not in avoid]
        assert order.get_audit_columns() == expected

    def test_explicit_allow_list(self):
        note = NoteFactory()
        assert note.get_audit_columns() == ['title']

    def test_allow_list_minus_deny_list(self, order):
        order.set_audit_columns(['status', 'total', 'notes']).set_audit_columns_to_avoid(['total'])
        assert order.get_audit_columns() == ['status', 'notes']

    def test_setters_do_not_touch_other_instances(self, order):
        other = Order.objects.get(pk=order.pk)
        order.set_audit_columns(['status'])
        assert other.get_audit_columns() == ORDER_TRACKED


@pytest.mark.django_db
class TestCaptureCreate:
    def test_new_side_holds_non_null_tracked_columns(self, order):
        diff = capture_create(order)

        assert diff.old is None
        assert columns(diff.new) == ['id', 'reference', 'status', 'total', 'contact_email', 'customer_id']
        values = {pair['column']: pair['value'] for pair in diff.new}
        assert values['reference'] == 'ORD-1'
        assert values['customer_id'] == order.customer_id

    def test_nothing_tracked_still_yields_a_diff(self, order):
        order.set_audit_columns(['notes'])
        diff = capture_create(order)
        assert diff.old is None
        assert diff.new == []


@pytest.mark.django_db
class TestCaptureUpdate:
    def test_unchanged_instance_needs_no_audit(self, order):
        assert capture_update(order) is None

    def test_only_changed_columns_on_both_sides(self, order):
        order.status = 'paid'
        order.total = Decimal('12.50')

        diff = capture_update(order)

        assert columns(diff.old) == ['status', 'total']
        assert columns(diff.new) == ['status', 'total']
        assert [pair['value'] for pair in diff.old] == ['new', Decimal('10.00')]
        assert [pair['value'] for pair in diff.new] == ['paid', Decimal('12.50')]

    def test_avoided_columns_are_ignored(self, order):
        order.updated_at = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
        assert capture_update(order) is None

    def test_restricted_to_given_columns(self, order):
        order.status = 'paid'
        order.notes = 'leave at the door'

        diff = capture_update(order, only={'notes'})

        assert columns(diff.new) == ['notes']

    def test_does_not_modify_instance(self, order):
        order.status = 'paid'
        before = dict(order.__dict__)

        capture_update(order)

        assert order.status == 'paid'
        assert order.get_dirty() == {'status': 'paid'}
        assert {k: v for k, v in order.__dict__.items() if k != '_state'} == \
            {k: v for k, v in before.items() if k != '_state'}


@pytest.mark.django_db
class TestCaptureDelete:
    def test_old_side_holds_every_tracked_column(self, order):
        diff = capture_delete(order)

        assert diff.new is None
        assert columns(diff.old) == ORDER_TRACKED
        values = {pair['column']: pair['value'] for pair in diff.old}
        assert values['notes'] is None
        assert values['status'] == 'new'

    def test_uses_persisted_values(self, order):
        order.status = 'unsaved change'
        values = {pair['column']: pair['value'] for pair in capture_delete(order).old}
        assert values['status'] == 'new'
