"""
Catalog admin configuration.

Courses, tests, questions and categories are maintained here; the API
exposes them read-only.
"""

from django.contrib import admin

from catalog.models import Course, MockTest, Question, TestCategory


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "price", "discounted_price", "duration_months", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name"]


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    fields = ["position", "text", "options", "correct_option_index", "is_active"]
    ordering = ["position", "id"]


@admin.register(MockTest)
class MockTestAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "price", "is_paid", "is_active", "created_at"]
    list_filter = ["is_paid", "is_active"]
    search_fields = ["title"]
    inlines = [QuestionInline]


@admin.register(TestCategory)
class TestCategoryAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "price", "category_type", "is_active"]
    list_filter = ["is_active", "category_type"]
    search_fields = ["name"]
    filter_horizontal = ["tests"]
