"""
Catalog app: courses, mock tests, questions and test categories.

The catalog is a read-only lookup for the purchase and scoring flows:
- prices and durations for order creation and course access windows
- category membership for bundle purchases
- the ordered active question bank for scoring

Usage:
    from catalog.services import CatalogService

    course = CatalogService.get_course(course_id)
    questions = CatalogService.active_questions(test)
"""
