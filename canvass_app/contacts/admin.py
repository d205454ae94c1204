from django.contrib import admin

from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ("names", "phone", "email", "gender", "owner", "created_at")
    list_filter = ("gender",)
    search_fields = ("names", "phone", "email")
