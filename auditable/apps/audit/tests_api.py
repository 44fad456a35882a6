import datetime

from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.test import APITestCase

from auditable.apps.audit.models import AuditableLog
from auditable.apps.audit.recorder import record_simple
from tests.testapp.models import Customer, Order


class AuditableLogAPITest(APITestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user1 = User.objects.create_user(username='testuser1', password='password')
        cls.user2 = User.objects.create_user(username='testuser2', password='password')

        cls.customer = Customer.objects.create(name='Test Customer')
        cls.order = Order.objects.create(customer=cls.customer, reference='R-1')
        record_simple('import', new={'rows': 5}, user=cls.user2)

        cls.ts1 = timezone.make_aware(datetime.datetime(2025, 1, 1, 12, 0, 0))
        cls.ts2 = timezone.make_aware(datetime.datetime(2025, 1, 2, 12, 0, 0))
        cls.ts3 = timezone.make_aware(datetime.datetime(2025, 1, 3, 12, 0, 0))
        AuditableLog.objects.filter(auditable_type='testapp.customer').update(created_at=cls.ts1)
        AuditableLog.objects.filter(auditable_type='testapp.order').update(created_at=cls.ts2)
        AuditableLog.objects.filter(key='import').update(created_at=cls.ts3)

    def setUp(self):
        self.client.force_authenticate(user=self.user1)

    def test_list_audit_logs(self):
        response = self.client.get('/api/audit/logs/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 3)

    def test_default_sorting_is_created_at_descending(self):
        response = self.client.get('/api/audit/logs/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['results'][0]['key'], 'import')
        self.assertEqual(response.data['results'][2]['auditable_type'], 'testapp.customer')

    def test_sorting_by_created_at_ascending(self):
        response = self.client.get('/api/audit/logs/?ordering=created_at')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['results'][0]['auditable_type'], 'testapp.customer')

    def test_filter_by_user(self):
        response = self.client.get(f'/api/audit/logs/?user={self.user2.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['user'], 'testuser2')

    def test_filter_by_owner(self):
        response = self.client.get(
            f'/api/audit/logs/?auditable_type=testapp.order&auditable_id={self.order.id}'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['key'], 'created')

    def test_filter_simple_logs(self):
        response = self.client.get('/api/audit/logs/?auditable_type__isnull=true')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['new_value'], {'rows': 5})

    def test_filter_by_created_at_gte(self):
        response = self.client.get('/api/audit/logs/?created_at__gte=2025-01-02T00:00:00Z')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 2)

    def test_changes_are_listed_with_labels(self):
        response = self.client.get('/api/audit/logs/?auditable_type=testapp.customer')
        changes = {change['column']: change for change in response.data['results'][0]['changes']}
        self.assertEqual(changes['name'], {'column': 'name', 'label': 'name', 'old': None, 'new': 'Test Customer'})

    def test_unresolvable_changes_show_stored_values(self):
        # status points at a profile that does not exist
        response = self.client.get('/api/audit/logs/?auditable_type=testapp.order')
        self.assertEqual(response.status_code, 200)
        changes = {change['column']: change for change in response.data['results'][0]['changes']}
        self.assertEqual(changes['total']['label'], 'Order total')
        self.assertEqual(changes['status']['new'], 'new')
        self.assertEqual(changes['customer_id']['new'], self.customer.id)

    def test_latest_audits(self):
        response = self.client.get('/api/audit/logs/latest/?limit=1')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['auditable_type'], 'testapp.order')

    def test_latest_simple_logs(self):
        response = self.client.get('/api/audit/logs/simple/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([entry['key'] for entry in response.data], ['import'])

    def test_invalid_limit(self):
        for limit in ('abc', '0', '-3'):
            response = self.client.get(f'/api/audit/logs/latest/?limit={limit}')
            self.assertEqual(response.status_code, 400)
            self.assertIn('limit', response.data)

    def test_logs_are_read_only(self):
        response = self.client.post('/api/audit/logs/', {'key': 'forged'}, format='json')
        self.assertEqual(response.status_code, 405)

    def test_authentication_required(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/audit/logs/')
        self.assertIn(response.status_code, (401, 403))
