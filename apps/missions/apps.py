from django.apps import AppConfig


class MissionsConfig(AppConfig):
    """Missions posted by customers and the student applications to them."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.missions'
    label = 'missions'
