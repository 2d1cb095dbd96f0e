"""
Payments app: the payment ledger and the gateway reconciler.

This app handles:
- PaymentRecord: one ledger row per order, pending until the gateway answers
- PaymentReconciler: order creation and idempotent callback handling
- PhonePe gateway client (signed pay, callback verification, status poll)
- Versioned gateway credentials with an explicit active pointer

Related apps:
    - catalog: prices, course durations and category members
    - entitlements: grants created when a payment succeeds

Usage:
    from payments.services import PaymentReconciler

    result = PaymentReconciler.create_order(user, "course", course.id)
    if result.success:
        redirect_to(result.data.pay_url)
"""
