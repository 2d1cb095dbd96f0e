"""
Tests for payments app.

This package contains test modules for:
- test_models.py: PaymentRecord state machine
- test_gateway.py: PhonePe request signing, callback verification, status API
- test_normalization.py: Gateway response code mapping
- test_services.py: PaymentReconciler, reporting and credential services
- test_callbacks.py: Callback reconciliation and the callback endpoint
- test_concurrency.py: Racing callbacks on one record
- test_tasks.py: Pending payment reconciliation task
- test_views.py: API endpoint tests
- test_integration.py: Purchase-to-result journeys

Usage:
    pytest payments/tests/
    pytest payments/tests/test_services.py
"""
