from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()


class Contact(models.Model):
    """A person in a user's address book who can be invited to surveys."""

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="contacts")
    names = models.CharField(max_length=255)
    phone = models.CharField(max_length=50, unique=True)
    email = models.EmailField(max_length=255, null=True, blank=True, unique=True)
    gender = models.CharField(
        max_length=10, choices=Gender.choices, null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["names", "id"]
        indexes = [
            models.Index(fields=["owner", "names"], name="contact_owner_names_idx")
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.names} ({self.phone})"
