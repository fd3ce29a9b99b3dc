"""
Django settings for cratesdocs.

Everything deployment-specific is read from CRATESDOCS_* environment
variables. Without any, the builder works under ./cratesdocs-prefix and
stores metadata in a local sqlite database.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('CRATESDOCS_SECRET_KEY', 'cratesdocs-insecure-development-key')
DEBUG = os.environ.get('CRATESDOCS_DEBUG', '0') == '1'
ALLOWED_HOSTS = os.environ.get('CRATESDOCS_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'crates',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'cratesdocs.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# Database
if os.environ.get('CRATESDOCS_DB_ENGINE', 'sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('CRATESDOCS_DB_NAME', 'cratesfyi'),
            'USER': os.environ.get('CRATESDOCS_DB_USER', 'cratesfyi'),
            'PASSWORD': os.environ.get('CRATESDOCS_DB_PASSWORD', ''),
            'HOST': os.environ.get('CRATESDOCS_DB_HOST', 'localhost'),
            'PORT': os.environ.get('CRATESDOCS_DB_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('CRATESDOCS_DB_NAME', str(BASE_DIR / 'cratesdocs.sqlite3')),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

# Builder
CRATESDOCS_PREFIX = Path(os.environ.get('CRATESDOCS_PREFIX', BASE_DIR / 'cratesdocs-prefix'))
CRATESDOCS_INDEX_PATH = Path(os.environ.get('CRATESDOCS_INDEX_PATH',
                                            CRATESDOCS_PREFIX / 'crates.io-index'))
CRATESDOCS_SOURCES_PATH = Path(os.environ.get('CRATESDOCS_SOURCES_PATH',
                                              CRATESDOCS_PREFIX / 'sources'))
CRATESDOCS_LOGS_PATH = Path(os.environ.get('CRATESDOCS_LOGS_PATH',
                                           CRATESDOCS_PREFIX / 'logs'))
CRATESDOCS_DESTINATION = Path(os.environ.get('CRATESDOCS_DESTINATION',
                                             CRATESDOCS_PREFIX / 'public_html' / 'crates'))
CRATESDOCS_BUILD_DIR = Path(os.environ.get('CRATESDOCS_BUILD_DIR',
                                           CRATESDOCS_PREFIX / 'build'))
CRATESDOCS_ARTIFACT_HOST = os.environ.get('CRATESDOCS_ARTIFACT_HOST',
                                          'https://crates-io.s3-us-west-1.amazonaws.com/crates')
CRATESDOCS_REGISTRY_API = os.environ.get('CRATESDOCS_REGISTRY_API', 'https://crates.io/api/v1')

# Logging
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
        'crates': {
            'handlers': ['console'],
            'level': os.environ.get('CRATESDOCS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'cratesdocs': {
            'handlers': ['console'],
            'level': os.environ.get('CRATESDOCS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
