"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and included in the
project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/login/                 → LoginView
    POST   /auth/logout/                → LogoutView

Current Actor ("Me")
    GET    /me/                         → MeView
"""

from django.urls import path

from .views import LoginView, LogoutView, MeView

app_name = "accounts"

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),

    # ── Current Actor (Me) ──────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),
]
