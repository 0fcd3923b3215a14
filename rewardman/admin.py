"""Rewardman admin. Everything is read-only: rows are never edited or deleted."""

from django.contrib import admin
from django.utils.html import format_html

from rewardman.models import EligibilityToken, LedgerTransaction, SpinRecord


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(EligibilityToken)
class EligibilityTokenAdmin(ReadOnlyAdmin):
    list_display = ["user_id", "rule", "created_at", "status_badge", "consumed_on"]
    list_filter = ["rule", ("consumed_at", admin.EmptyFieldListFilter)]
    search_fields = ["user_id"]
    date_hierarchy = "created_at"

    def status_badge(self, obj):
        color, text = ("#6c757d", "consumed") if obj.is_consumed else ("#28a745", "available")
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            color,
            text,
        )

    status_badge.short_description = "Status"


@admin.register(SpinRecord)
class SpinRecordAdmin(ReadOnlyAdmin):
    list_display = ["created_at", "user_id", "prize_key", "points_granted", "cost", "spin_day"]
    list_filter = ["prize_key", "spin_day"]
    search_fields = ["user_id"]
    raw_id_fields = ["token"]
    date_hierarchy = "created_at"


@admin.register(LedgerTransaction)
class LedgerTransactionAdmin(ReadOnlyAdmin):
    list_display = [
        "created_at",
        "user_id",
        "points_display",
        "reason",
        "expires_at",
        "swept",
        "description",
    ]
    list_filter = ["reason", "swept"]
    search_fields = ["user_id", "reference", "description"]
    raw_id_fields = ["compensates"]
    date_hierarchy = "created_at"

    def points_display(self, obj):
        if obj.delta > 0:
            return format_html('<span style="color:green">+{}</span>', obj.delta)
        return format_html('<span style="color:red">{}</span>', obj.delta)

    points_display.short_description = "Points"
