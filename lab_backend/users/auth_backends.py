"""
PATH: users/auth_backends.py

AUTH BACKEND: email login

Used by Django auth() and by SimpleJWT's TokenObtainPairView, which calls
authenticate() with the USERNAME_FIELD ("email") as keyword.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailBackend(ModelBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        identifier = (kwargs.get("email") or username or "").strip()
        if not identifier or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=identifier)
        except User.DoesNotExist:
            # run the hasher anyway to keep timing flat
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
