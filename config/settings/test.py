"""Test settings.

SQLite database, eager Celery and fixed Paystack credentials so the
test suite never talks to a broker or the real gateway.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PAYSTACK_SECRET_KEY = 'sk_test_0123456789abcdef'
PAYSTACK_WEBHOOK_SECRET = ''
PAYSTACK_BASE_URL = 'https://paystack.test'
PAYSTACK_TIMEOUT_SECONDS = 5.0
PAYSTACK_ALLOW_UNSIGNED_WEBHOOKS = False
PAYMENT_REFERENCE_PREFIX = 'TEST'
PAYMENT_PENDING_SWEEP_MINUTES = 30
