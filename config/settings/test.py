"""Test settings.

SQLite in memory, eager Celery and an in-memory mail outbox. Set
``DB_ENGINE=postgresql`` (with ``DB_USER``, ``DB_PASSWORD``, ``DB_HOST``)
to run the concurrent locking tests against a real server; SQLite has no
row locks, so they are skipped there.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

if DATABASES['default']['ENGINE'].endswith('postgresql'):
    DATABASES['default']['NAME'] = os.environ.get('DB_NAME', 'ensemble_test')
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

LOGGING['root']['level'] = 'CRITICAL'
LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['shared']['level'] = 'WARNING'
