"""
Django settings for Rewardman tests.

Includes the admin so model registrations are exercised.
"""

import os
import tempfile

SECRET_KEY = "test-secret-key-for-rewardman-tests"

DEBUG = True

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.sessions",
    "django.contrib.messages",
    "rewardman",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        # File-backed so threads in the concurrency tests share one database
        "TEST": {"NAME": os.path.join(tempfile.gettempdir(), "rewardman_test.sqlite3")},
    }
}

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

ROOT_URLCONF = "rewardman.urls"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "America/New_York"

REWARDMAN = {
    "SPIN_TIMEZONE": "UTC",
    "SWEEP_SECRET": "test-sweep-secret",
}
