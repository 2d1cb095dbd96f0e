"""
URL configuration for the catalog app.

All routes are prefixed with /api/v1/catalog/ when included in the main URLconf.
"""

from rest_framework.routers import DefaultRouter

from catalog.views import CourseViewSet, MockTestViewSet, TestCategoryViewSet

app_name = "catalog"

router = DefaultRouter()
router.register(r"courses", CourseViewSet, basename="course")
router.register(r"tests", MockTestViewSet, basename="test")
router.register(r"categories", TestCategoryViewSet, basename="category")

urlpatterns = router.urls
