"""
Authentication application.

This app provides the email-based user model and JWT token endpoints.

Key components:
    - User model: Custom email-based user authentication
    - UserManager: create_user / create_superuser helpers
    - CurrentUserView: The authenticated user's own record

Usage:
    from authentication.models import User
"""
