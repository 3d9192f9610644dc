from datetime import timedelta
from pathlib import Path

from decouple import config, Csv
from kombu import Queue
import dj_database_url

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Quick-start development settings - unsuitable for production
SECRET_KEY = config('SECRET_KEY', default='django-insecure-cpmate-dev-only')

DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='', cast=Csv())

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Local
    'cpstats',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'cpmate_project.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'cpmate_project.wsgi.application'

# Database
# Uses DATABASE_URL from .env
DATABASES = {
    'default': dj_database_url.config(
        default=config('DATABASE_URL', default='sqlite:///db.sqlite3')
    )
}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = 'static/'

# Session/CSRF security
SESSION_COOKIE_HTTPONLY = True
if not DEBUG:
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

# Auth redirects
LOGIN_URL = '/admin/login/'

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Logging
LOG_LEVEL = config('LOG_LEVEL', default='INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'cpstats': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}

# Celery Configuration
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_DEFAULT_QUEUE = 'celery'
CELERY_TASK_QUEUES = (
    Queue('celery'),
    Queue('sync_stats'),
)
CELERY_TASK_ROUTES = {
    'cpstats.tasks.fetch_user_stats': {'queue': 'sync_stats'},
}

STATS_SYNC_INTERVAL_MINUTES = config('STATS_SYNC_INTERVAL_MINUTES', default=60, cast=int)
STATS_SYNC_LOCK_SECONDS = config('STATS_SYNC_LOCK_SECONDS', default=600, cast=int)

CELERY_BEAT_SCHEDULE = {
    'sync-user-stats': {
        'task': 'cpstats.tasks.sync_all_users',
        'schedule': timedelta(minutes=STATS_SYNC_INTERVAL_MINUTES),
    },
}

# Upstream platforms
LEETCODE_GRAPHQL_URL = config('LEETCODE_GRAPHQL_URL', default='https://leetcode.com/graphql')
CODEFORCES_API_URL = config('CODEFORCES_API_URL', default='https://codeforces.com/api')
UPSTREAM_TIMEOUT_SECONDS = config('UPSTREAM_TIMEOUT_SECONDS', default=10, cast=int)
CF_SUBMISSIONS_COUNT = config('CF_SUBMISSIONS_COUNT', default=1000, cast=int)
LEETCODE_RECENT_SUBMISSIONS_LIMIT = config('LEETCODE_RECENT_SUBMISSIONS_LIMIT', default=50, cast=int)

# Fallback LeetCode calendar (UTC, HH:MM)
LEETCODE_WEEKLY_CONTEST_TIME = config('LEETCODE_WEEKLY_CONTEST_TIME', default='02:30')
LEETCODE_BIWEEKLY_CONTEST_TIME = config('LEETCODE_BIWEEKLY_CONTEST_TIME', default='14:30')

DASHBOARD_RECENT_DAYS = config('DASHBOARD_RECENT_DAYS', default=7, cast=int)
