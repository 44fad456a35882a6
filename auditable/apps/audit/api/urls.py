from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AuditableLogViewSet

router = DefaultRouter()
router.register(r'logs', AuditableLogViewSet, basename='auditable-log')

urlpatterns = [
    path('', include(router.urls)),
]
