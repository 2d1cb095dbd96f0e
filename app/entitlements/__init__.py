"""
Entitlements app: what each user may access.

This app owns:
- Entitlement: one row per grant of a course window or a single test
- EntitlementService: grant, link and repair operations (called by the
  payment reconciler and the scoring engine)
- AccessQueryService: "may user U open course C" and "what has user U bought"

Related apps:
    - payments: creates entitlements when a payment succeeds
    - assessments: links scored attempts back to test entitlements
    - catalog: courses, tests and categories being granted
"""
