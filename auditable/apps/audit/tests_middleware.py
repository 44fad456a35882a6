from django.contrib.auth.models import User
from rest_framework.test import APITestCase

from auditable.apps.audit.models import AuditableLog
from tests.testapp.models import Customer, Order


class CurrentUserMiddlewareTest(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpassword')
        self.client.force_authenticate(user=self.user)
        self.customer = Customer.objects.create(name='Test Customer')
        self.order = Order.objects.create(customer=self.customer, reference='M-1')

    def test_create_action_is_attributed(self):
        data = {'customer': self.customer.id, 'reference': 'M-2', 'status': 'new', 'total': '9.99'}

        response = self.client.post('/api/shop/orders/', data, format='json')
        self.assertEqual(response.status_code, 201)

        log_entry = AuditableLog.objects.filter(auditable_type='testapp.order').latest('id')
        self.assertEqual(log_entry.key, 'created')
        self.assertEqual(log_entry.user, self.user)
        self.assertEqual(log_entry.auditable_id, response.data['id'])

    def test_update_action_is_logged_with_diff(self):
        data = {'customer': self.customer.id, 'reference': 'M-1b', 'status': 'new', 'total': '0.00'}

        response = self.client.put(f'/api/shop/orders/{self.order.id}/', data, format='json')
        self.assertEqual(response.status_code, 200)

        log_entry = AuditableLog.objects.for_instance(self.order).get(key='updated')
        self.assertEqual(log_entry.user, self.user)
        self.assertEqual(log_entry.get_column_name('reference'), 'reference')
        self.assertEqual(log_entry.changes(), [
            {'column': 'reference', 'label': 'reference', 'old': 'M-1', 'new': 'M-1b'},
        ])

    def test_delete_action_is_logged(self):
        order_id = self.order.id

        response = self.client.delete(f'/api/shop/orders/{order_id}/')
        self.assertEqual(response.status_code, 204)

        log_entry = AuditableLog.objects.get(auditable_type='testapp.order', auditable_id=order_id, key='deleted')
        self.assertEqual(log_entry.user, self.user)
        self.assertIsNone(log_entry.new_value)

    def test_get_request_is_not_logged(self):
        before = AuditableLog.objects.count()
        self.client.get('/api/shop/orders/')
        self.assertEqual(AuditableLog.objects.count(), before)

    def test_rows_written_outside_requests_have_no_user(self):
        self.assertIsNone(AuditableLog.objects.for_instance(self.order).get().user)
