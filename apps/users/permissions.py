# apps/users/permissions.py
from rest_framework import permissions

from .models import Role


class HasRole(permissions.BasePermission):
    role = None

    def has_permission(self, request, view):
        return (
            request.user.is_authenticated
            and request.user.role == self.role
        )


class IsStudent(HasRole):
    role = Role.STUDENT
    message = "Only students can perform this action"


class IsCustomer(HasRole):
    role = Role.CUSTOMER
    message = "Only customers can perform this action"
