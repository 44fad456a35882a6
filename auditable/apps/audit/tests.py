import json

from django.contrib.auth.models import User
from django.core.exceptions import PermissionDenied
from django.test import TestCase

from auditable.apps.audit.context import acting_as
from auditable.apps.audit.models import AuditableLog
from auditable.apps.audit.recorder import record_simple
from tests.testapp.models import Customer, Order


class AuditableLogModelTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='testuser', password='password')
        cls.customer = Customer.objects.create(name='Test Customer', email='test@example.com')

    def test_create_writes_audit_log(self):
        """
        Test that saving a new tracked instance writes one 'created' entry.
        """
        with acting_as(self.user):
            order = Order.objects.create(customer=self.customer, reference='A-1')

        log_entry = AuditableLog.objects.for_instance(order).get()
        self.assertEqual(log_entry.key, 'created')
        self.assertEqual(log_entry.user, self.user)
        self.assertEqual(log_entry.auditable_type, 'testapp.order')
        self.assertEqual(log_entry.auditable_id, order.id)
        self.assertEqual(log_entry.auditable, order)
        self.assertIsNone(log_entry.old_value)
        self.assertIn({'column': 'reference', 'value': 'A-1'}, json.loads(log_entry.new_value))

    def test_update_writes_only_changed_columns(self):
        order = Order.objects.create(customer=self.customer, reference='A-2')
        order.reference = 'A-2b'
        order.save()

        log_entry = AuditableLog.objects.for_instance(order).get(key='updated')
        self.assertEqual(json.loads(log_entry.old_value), [{'column': 'reference', 'value': 'A-2'}])
        self.assertEqual(json.loads(log_entry.new_value), [{'column': 'reference', 'value': 'A-2b'}])

    def test_customer_is_tracked_without_timestamps(self):
        log_entry = AuditableLog.objects.for_instance(self.customer).get()
        columns = [pair['column'] for pair in json.loads(log_entry.new_value)]
        self.assertEqual(columns, ['id', 'name', 'email', 'is_vip'])

    def test_simple_log_entry(self):
        log_entry = record_simple('export', new={'rows': 10}, user=self.user)

        self.assertEqual(AuditableLog.objects.simple_logs().count(), 1)
        self.assertIsNone(log_entry.auditable)
        self.assertEqual(log_entry.get_new_value(), {'rows': 10})
        self.assertEqual(str(log_entry).split(' at ')[0], 'export - simple log by testuser')

    def test_log_entries_are_immutable(self):
        log_entry = AuditableLog.objects.for_instance(self.customer).get()
        with self.assertRaises(PermissionDenied):
            log_entry.save()
        with self.assertRaises(PermissionDenied):
            log_entry.delete()

    def test_unresolvable_changes_fall_back_to_stored_values(self):
        order = Order.objects.create(customer=self.customer, reference='A-3')
        order.status = 'paid'
        order.save()

        log_entry = AuditableLog.objects.for_instance(order).get(key='updated')
        self.assertEqual(
            log_entry.changes(resolve=False),
            [{'column': 'status', 'label': 'status', 'old': 'new', 'new': 'paid'}],
        )
