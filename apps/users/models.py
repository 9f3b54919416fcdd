# apps/users/models.py
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models


class Role(models.TextChoices):
    STUDENT = 'student', 'Student'
    CUSTOMER = 'customer', 'Customer'


class User(AbstractUser):
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=Role.choices)
    full_name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(AbstractUser.Meta):
        indexes = [
            models.Index(fields=['role'], name='user_role_idx'),
        ]

    def __str__(self):
        return self.email

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_role = instance.__dict__.get('role')
        return instance

    def save(self, *args, **kwargs):
        stored_role = getattr(self, '_stored_role', None)
        if stored_role and stored_role != self.role:
            raise ValidationError({"role": "Role cannot be changed after signup"})
        super().save(*args, **kwargs)
        self._stored_role = self.role

    @property
    def is_student(self):
        return self.role == Role.STUDENT

    @property
    def is_customer(self):
        return self.role == Role.CUSTOMER

    @property
    def is_admin(self):
        """Admins are staff accounts; they are not a marketplace role."""
        return self.is_staff or self.is_superuser
