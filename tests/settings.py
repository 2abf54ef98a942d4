import os

DEBUG = True
PRODUCTION = False

ADMINS = (
    # ('Your Name', 'your_email@domain.com'),
)

MANAGERS = ADMINS

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}


# Local time zone for this installation. Choices can be found here:
# http://en.wikipedia.org/wiki/List_of_tz_zones_by_name
# although not all choices may be available on all operating systems.
TIME_ZONE = 'America/Chicago'

# Language code for this installation. All choices can be found here:
# http://www.i18nguy.com/unicode/language-identifiers.html
LANGUAGE_CODE = 'en-us'

SITE_ID = 1

USE_I18N = True

USE_TZ = True

# Absolute path to the directory that holds media.
STATIC_ROOT = os.path.abspath(os.path.join(__file__, '..', 'static'))
MEDIA_ROOT = os.path.abspath(os.path.join(__file__, '..', 'media'))

MEDIA_URL = '/media/'

# URL that handles the media served from STATIC_ROOT. Make sure to use a
# trailing slash if there is a path component (optional in other cases).
STATIC_URL = '/static/'

# Make this unique, and don't share it with anybody.
SECRET_KEY = 'w9k#2p@c1t!v0u8x$h6n4m^r7e5q3z*ab-j0d+f9g2y8l1s'

ALLOWED_HOSTS = ['testserver', 'example.com']

INSTALLED_APPS = [
    'django.contrib.staticfiles',
    'avatarcache',
]

STATICFILES_FINDERS = (
    'django.contrib.staticfiles.finders.AppDirectoriesFinder',
)

# Salt for identity hashes. Real sites must keep this stable.
AVATAR_CACHE_SALT = 'avatarcache-tests'
