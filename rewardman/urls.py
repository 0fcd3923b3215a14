from django.urls import path

from .views import SweepTriggerView

app_name = "rewardman"

urlpatterns = [
    path("sweep/", SweepTriggerView.as_view(), name="sweep-trigger"),
]
