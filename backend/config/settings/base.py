"""
Base Django settings for the voice-agent gateway.

Shared configuration for all environments.
"""

from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-based configuration using pydantic-settings."""

    SECRET_KEY: str = "django-insecure-change-me-in-production"
    DEBUG: bool = False
    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    # Database
    DB_NAME: str = "gateway"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432

    # Logging
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    # Gateway policy
    EV_ALLOWED_ORIGINS: str = "http://localhost:3000"
    EV_DEFAULT_ORG_SLUG: str = "eburon-demo"
    EV_DEFAULT_ORG_NAME: str = "Eburon Demo"
    EV_DEFAULT_USER_EMAIL: str = "owner@eburon.local"
    EV_RATE_LIMIT_USER_PER_MINUTE: PositiveInt = 60
    EV_RATE_LIMIT_ORG_PER_MINUTE: PositiveInt = 300
    EV_RATE_LIMIT_FAILED_PER_10_MIN: PositiveInt = 30
    EV_AUDIT_ANONYMOUS_REJECTIONS: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = settings.SECRET_KEY

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = settings.DEBUG

ALLOWED_HOSTS = [h.strip() for h in settings.ALLOWED_HOSTS.split(",") if h.strip()]

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "apps.core",
    "apps.organizations",
    "apps.accounts",
    "apps.gateway",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "apps.core.middleware.RequestContextMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Database
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": settings.DB_NAME,
        "USER": settings.DB_USER,
        "PASSWORD": settings.DB_PASSWORD,
        "HOST": settings.DB_HOST,
        "PORT": str(settings.DB_PORT),
    }
}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Structured logging (applied by apps.core on startup)
LOG_JSON = settings.LOG_JSON
LOG_LEVEL = settings.LOG_LEVEL

# Gateway policy, turned into apps.gateway.config.GatewayConfig per request
EV_GATEWAY = {
    "ALLOWED_ORIGINS": settings.EV_ALLOWED_ORIGINS,
    "DEFAULT_ORG_SLUG": settings.EV_DEFAULT_ORG_SLUG,
    "DEFAULT_ORG_NAME": settings.EV_DEFAULT_ORG_NAME,
    "DEFAULT_USER_EMAIL": settings.EV_DEFAULT_USER_EMAIL,
    "RATE_LIMIT_USER_PER_MINUTE": settings.EV_RATE_LIMIT_USER_PER_MINUTE,
    "RATE_LIMIT_ORG_PER_MINUTE": settings.EV_RATE_LIMIT_ORG_PER_MINUTE,
    "RATE_LIMIT_FAILED_PER_10_MIN": settings.EV_RATE_LIMIT_FAILED_PER_10_MIN,
    "AUDIT_ANONYMOUS_REJECTIONS": settings.EV_AUDIT_ANONYMOUS_REJECTIONS,
}
