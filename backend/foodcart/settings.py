import os
import sys
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Try root project .env (one directory up from BASE_DIR) first, then local
root_env = (BASE_DIR.parent / '.env')
local_env = (BASE_DIR / '.env')
if root_env.exists():
    load_dotenv(root_env)
elif local_env.exists():
    load_dotenv(local_env)

# The engine never serves requests, but Django still wants a key to boot.
SECRET_KEY = os.getenv('DJANGO_SECRET_KEY') or os.getenv('SECRET_KEY') or 'foodcart-client-key'
DEBUG = os.getenv('DEBUG', 'True') == 'True'

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'apps.common',
    'apps.catalog',
    'apps.guest',
    'apps.carts',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# ---------------------------------------------------------------------------
# REMOTE API
# FOODCART_API_BASE_URL is the root of the cart and dish endpoints.
# FOODCART_BACKEND_ORIGIN prefixes relative image paths coming from either.
# ---------------------------------------------------------------------------
FOODCART_BACKEND_ORIGIN = os.getenv('FOODCART_BACKEND_ORIGIN', 'http://localhost:8080').rstrip('/')
FOODCART_API_BASE_URL = os.getenv('FOODCART_API_BASE_URL', f'{FOODCART_BACKEND_ORIGIN}/api').rstrip('/')
FOODCART_HTTP_TIMEOUT = float(os.getenv('FOODCART_HTTP_TIMEOUT', '20'))
FOODCART_MAX_WORKERS = int(os.getenv('FOODCART_MAX_WORKERS', '8'))

# Cart behaviour
FOODCART_DEBOUNCE_MS = int(os.getenv('FOODCART_DEBOUNCE_MS', '500'))
FOODCART_MAX_QUANTITY = int(os.getenv('FOODCART_MAX_QUANTITY', '999'))
FOODCART_CACHE_TTL_HOURS = int(os.getenv('FOODCART_CACHE_TTL_HOURS', '24'))
FOODCART_GUEST_CART_KEY = os.getenv('FOODCART_GUEST_CART_KEY', 'GUEST_CART')
FOODCART_PLACEHOLDER_IMAGE = os.getenv('FOODCART_PLACEHOLDER_IMAGE', '/images/placeholder-dish.jpg')

# Guest cart storage
"""Storage configuration.
The guest cart is kept in the Django cache framework. Locally it lands in a
file-based cache so it survives restarts; when REDIS_URL is set (for example a
storefront process keeping carts per device) django-redis is used instead. The
guest cart must never expire on its own, hence TIMEOUT=None."""
REDIS_URL = os.getenv('REDIS_URL')
GUEST_CART_DIR = os.getenv('FOODCART_GUEST_CART_DIR', str(Path.home() / '.foodcart' / 'cart'))

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            },
            'KEY_PREFIX': os.getenv('CACHE_KEY_PREFIX', 'foodcart'),
            'TIMEOUT': None,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
            'LOCATION': GUEST_CART_DIR,
            'TIMEOUT': None,
        }
    }

USING_PYTEST = (
    os.getenv('PYTEST_CURRENT_TEST') is not None
    or any(os.path.basename(arg).startswith('pytest') for arg in sys.argv)
    or 'pytest' in sys.modules
)

if 'test' in sys.argv or USING_PYTEST:
    # Use local in-memory cache during tests
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'foodcart-test-cache',
            'TIMEOUT': None,
        }
    }

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('FOODCART_LOG_LEVEL', 'INFO'),
            'propagate': True,
        },
    },
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
