import os
import sys
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# apps are imported by their short name (``from vendors.models import Vendor``)
APPS_DIR = BASE_DIR / "apps"
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> list:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-secret-key")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "core",
    "accounts",
    "locations",
    "vendors",
    "catalog",
    "delivery",
    "events.apps.EventsConfig",
    "integrations",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
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

WSGI_APPLICATION = "config.wsgi.application"

if os.getenv("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB"),
            "USER": os.getenv("POSTGRES_USER", ""),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "serviceability",
    }
}

AUTH_USER_MODEL = "accounts.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "EXCEPTION_HANDLER": "core.exceptions.api_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=int(os.getenv("JWT_ACCESS_HOURS", "12"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=int(os.getenv("JWT_REFRESH_DAYS", "30"))),
}

# Roles that may moderate vendor coverage.
COVERAGE_ADMIN_ROLES = _env_list("COVERAGE_ADMIN_ROLES", "ADMIN,SUPER_ADMIN,CITY_MANAGER,OPERATIONS")

# Location search / serviceability tuning
LOCATION_SEARCH_LIMIT = int(os.getenv("LOCATION_SEARCH_LIMIT", "8"))
LOCATION_EXTERNAL_MIN_LOCAL = int(os.getenv("LOCATION_EXTERNAL_MIN_LOCAL", "3"))
LOCATION_EXTERNAL_MAX = int(os.getenv("LOCATION_EXTERNAL_MAX", "3"))
LOCATION_SUGGEST_TIMEOUT = float(os.getenv("LOCATION_SUGGEST_TIMEOUT", "3"))
SERVICEABILITY_NEAREST_AREA_KM = float(os.getenv("SERVICEABILITY_NEAREST_AREA_KM", "15"))
COVERAGE_PREVIEW_DEFAULT_RADIUS_KM = float(os.getenv("COVERAGE_PREVIEW_DEFAULT_RADIUS_KM", "8"))

# Mappls (MapmyIndia) place suggestions
MAPPLS_CLIENT_ID = os.getenv("MAPPLS_CLIENT_ID", "")
MAPPLS_CLIENT_SECRET = os.getenv("MAPPLS_CLIENT_SECRET", "")
MAPPLS_REGION = os.getenv("MAPPLS_REGION", "ind")
MAPPLS_TOKEN_URL = os.getenv("MAPPLS_TOKEN_URL", "https://outpost.mapmyindia.com/api/security/oauth/token")
MAPPLS_SEARCH_URL = os.getenv("MAPPLS_SEARCH_URL", "https://atlas.mapmyindia.com/api/places/search/json")

# Nominatim (OpenStreetMap) pincode geocoding
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "gifting-serviceability/1.0")
NOMINATIM_TIMEOUT = float(os.getenv("NOMINATIM_TIMEOUT", "5"))
NOMINATIM_COUNTRY = os.getenv("NOMINATIM_COUNTRY", "India")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
    },
}
