"""Django app configuration for avatarcache."""

from __future__ import annotations

from django.apps import AppConfig


class AvatarCacheAppConfig(AppConfig):
    name = 'avatarcache'
    label = 'avatarcache'
    verbose_name = 'Avatar Cache'
