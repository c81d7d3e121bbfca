"""
Django settings for backend project.

Every deployment-specific value is read from the environment with a
development default.  There is no database: evidence and access requests
live in the external evidence API, actors come from ``EVIDENCE_ACTORS``
and sessions are signed tokens.

For more information on this file, see
https://docs.djangoproject.com/en/stable/topics/settings/
"""

import json
import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ── Core ─────────────────────────────────────────────────────────────

SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "django-insecure-evidence-access-dev-key-change-me",
)

DEBUG = _env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',

    # Third-party
    'rest_framework',
    'rest_framework_simplejwt',
    'drf_spectacular',

    # Local
    'core',
    'accounts',
    'evidence',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'backend.urls'

WSGI_APPLICATION = 'backend.wsgi.application'

# No local persistence.
DATABASES = {}

# Token revocation lives in the default cache.  LocMemCache is per process,
# so a logged-out token stays valid on other workers; multi-worker
# deployments must point this at a shared backend, e.g.
# DJANGO_CACHE_BACKEND=django.core.cache.backends.redis.RedisCache
# DJANGO_CACHE_LOCATION=redis://127.0.0.1:6379/1
CACHES = {
    'default': {
        'BACKEND': os.getenv(
            'DJANGO_CACHE_BACKEND', 'django.core.cache.backends.locmem.LocMemCache',
        ),
        'LOCATION': os.getenv('DJANGO_CACHE_LOCATION', 'evidence-access'),
    },
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ── Django REST Framework ────────────────────────────────────────────

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'accounts.authentication.ActorJWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'rest_framework.renderers.JSONRenderer',
    ),
    'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'UNAUTHENTICATED_USER': None,
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(
        hours=float(os.environ.get("EVIDENCE_SESSION_HOURS", "8")),
    ),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_CLAIM': 'actor_id',
    'SIGNING_KEY': SECRET_KEY,
    'UPDATE_LAST_LOGIN': False,
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'Evidence Access API',
    'DESCRIPTION': (
        'Role-based access-request lifecycle in front of the evidence API: '
        'browse and submit evidence, request access, approve or deny.'
    ),
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
}


# ── Evidence API ─────────────────────────────────────────────────────

EVIDENCE_API_BASE = os.environ.get("EVIDENCE_API_BASE", "http://localhost:4001")

EVIDENCE_API_TIMEOUT = float(os.environ.get("EVIDENCE_API_TIMEOUT", "10"))


# ── Actor directory ──────────────────────────────────────────────────
# ``password`` may be a Django password hash or a raw password.

_DEMO_PASSWORD = os.environ.get("EVIDENCE_DEMO_PASSWORD", "demo123")

_DEMO_ACTORS = [
    {"username": "admin", "id": "admin-001", "role": "admin",
     "display_name": "System Administrator", "password": _DEMO_PASSWORD},
    {"username": "investigator1", "id": "investigator1-001", "role": "investigator",
     "display_name": "Lead Investigator", "password": _DEMO_PASSWORD},
    {"username": "analyst1", "id": "analyst1-001", "role": "analyst",
     "display_name": "Forensic Analyst", "password": _DEMO_PASSWORD},
    {"username": "prosecutor1", "id": "prosecutor1-001", "role": "prosecutor",
     "display_name": "District Prosecutor", "password": _DEMO_PASSWORD},
    {"username": "judge1", "id": "judge1-001", "role": "judge",
     "display_name": "Presiding Judge", "password": _DEMO_PASSWORD},
]

EVIDENCE_ACTORS = (
    json.loads(os.environ["EVIDENCE_ACTORS_JSON"])
    if os.environ.get("EVIDENCE_ACTORS_JSON")
    else _DEMO_ACTORS
)


# ── Logging ──────────────────────────────────────────────────────────

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'accounts': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
        'evidence': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
        'core': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
    },
}
