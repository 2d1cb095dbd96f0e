"""
Assessments app: mock test attempt scoring.

This app owns:
- TestAttemptResult: immutable record of one scored attempt
- scoring: pure positional scoring of submitted answers
- ScoringService: submit an attempt, persist it, link it to a purchase
- Attempt statistics for the learner dashboard

Related apps:
    - catalog: tests and their ordered active questions
    - entitlements: completed attempts are linked to test entitlements
"""
