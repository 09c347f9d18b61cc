"""
Django settings for claim_navigator project.
"""

import os
from pathlib import Path
import environ

# Initialize environment variables
env = environ.Env(
    DEBUG=(bool, True),
    ALLOWED_HOSTS=(list, ['localhost', '127.0.0.1', '0.0.0.0', 'testserver']),
)

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Read .env file if it exists
environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

# SECURITY WARNING: keep the secret key used in production secret!
# SECRET_KEY MUST be set via environment variable in ALL non-local environments
import warnings

SECRET_KEY = env('SECRET_KEY', default='')

# Only allow empty/insecure SECRET_KEY in local DEBUG mode
if not SECRET_KEY or SECRET_KEY.startswith('django-insecure'):
    if env.bool('DEBUG', default=True) and not env.bool('STAGING', default=False):
        # Local development only - generate a random key for this session
        import secrets
        SECRET_KEY = secrets.token_urlsafe(50)
        warnings.warn(
            "SECRET_KEY not set - using random key for this session. "
            "Set SECRET_KEY in .env for persistent sessions."
        )
    else:
        # Staging and production MUST have SECRET_KEY set
        raise ValueError(
            "SECRET_KEY environment variable is required in staging/production! "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(50))\""
        )

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env('DEBUG')

# ALLOWED_HOSTS - MUST be explicitly set in staging/production
# Never use '*' in any deployed environment
ALLOWED_HOSTS = env.list('ALLOWED_HOSTS')

# Validate ALLOWED_HOSTS in non-debug mode
if not DEBUG:
    if not ALLOWED_HOSTS or '*' in ALLOWED_HOSTS:
        raise ValueError(
            "ALLOWED_HOSTS must be explicitly set in staging/production! "
            "Example: ALLOWED_HOSTS=claims.example.org"
        )

# Application definition
INSTALLED_APPS = [
    # Django apps
    'django.contrib.contenttypes',
    'django.contrib.auth',

    # Third-party apps
    'rest_framework',  # Django REST Framework
    'corsheaders',  # CORS support for web and mobile clients

    # Our apps
    'ratings.apps.RatingsConfig',
    'api.apps.ApiConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',  # CORS - must be before CommonMiddleware
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'claim_navigator.urls'

WSGI_APPLICATION = 'claim_navigator.wsgi.application'

# Database
# The engine keeps no state; Django still expects a default connection.
# Handle empty DATABASE_URL (env.db() doesn't handle empty strings well)
_database_url = env('DATABASE_URL', default='')
if _database_url:
    DATABASES = {'default': env.db('DATABASE_URL')}
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'America/New_York'
USE_I18N = True
USE_TZ = True

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ==============================================================================
# SECURITY SETTINGS
# ==============================================================================
SECURE_CONTENT_TYPE_NOSNIFF = True  # Prevent MIME type sniffing
X_FRAME_OPTIONS = 'DENY'  # Prevent clickjacking
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'

# Production-only settings (skip SSL redirect in staging - the platform handles SSL at edge)
if not DEBUG:
    STAGING = env.bool('STAGING', default=False)
    SECURE_SSL_REDIRECT = not STAGING
    SECURE_HSTS_SECONDS = 31536000 if not STAGING else 0  # 1 year in prod
    SECURE_HSTS_INCLUDE_SUBDOMAINS = not STAGING
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# ==============================================================================
# LOGGING CONFIGURATION
# ==============================================================================
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'simple'
        },
        'file': {
            'level': 'INFO',
            'class': 'logging.FileHandler',
            'filename': BASE_DIR / 'logs' / 'django.log',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
            'propagate': False,
        },
        'ratings': {
            'handlers': ['console', 'file'],
            'level': env('RATINGS_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        'api': {
            'handlers': ['console', 'file'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}

# Create logs directory if it doesn't exist
(BASE_DIR / 'logs').mkdir(exist_ok=True)

# ==============================================================================
# SENTRY CONFIGURATION (Error Tracking)
# ==============================================================================
SENTRY_DSN = env('SENTRY_DSN', default='')
if SENTRY_DSN and not DEBUG:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[
            DjangoIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Condition data is health information
    )

# ==============================================================================
# RATING ENGINE SETTINGS
# ==============================================================================
# Compensation rate year used when a request does not name one.
# Unknown years fall back to the latest published table.
VA_RATE_YEAR = env.int('VA_RATE_YEAR', default=2026)

# Site settings
SITE_NAME = 'VA Claim Navigator'
SITE_DESCRIPTION = 'Combined rating, compensation, TDIU and SMC estimates for VA disability claims'

# ==============================================================================
# REST FRAMEWORK
# ==============================================================================
REST_FRAMEWORK = {
    # Anonymous calculator API - no accounts, nothing stored
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': env('API_ANON_THROTTLE', default='1000/minute'),
    },
    'UNAUTHENTICATED_USER': None,
}

# ==============================================================================
# CORS CONFIGURATION
# ==============================================================================
# Allow the web front end and development environments to access the API
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[
    'http://localhost:3000',
    'http://localhost:5173',  # Vite dev server
    'http://127.0.0.1:3000',
    'http://127.0.0.1:5173',
])

CORS_ALLOW_HEADERS = [
    'accept',
    'accept-encoding',
    'content-type',
    'dnt',
    'origin',
    'user-agent',
    'x-requested-with',
]

# In DEBUG mode, allow all origins for easier development
if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True
