"""
Scheduled sweep trigger.

For hosted schedulers that can only call a URL (Cloud Scheduler, cron-job
services). Self-hosted deployments use `manage.py rewardman_sweep` instead.

Flow:
    1. Validates the shared secret (R1)
    2. Runs the expiry sweep
    3. Returns {"neutralized": n}
"""

from __future__ import annotations

import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from rewardman.conf import rewardman_settings
from rewardman.gates import GateError, Gates
from rewardman.services import expiry

logger = logging.getLogger("rewardman.views")

SECRET_HEADER = "X-Rewardman-Sweep-Secret"


@method_decorator(csrf_exempt, name="dispatch")
class SweepTriggerView(View):
    """
    POST endpoint for the daily expiry sweep.

    Expects:
        - X-Rewardman-Sweep-Secret header matching REWARDMAN["SWEEP_SECRET"]

    Settings:
        REWARDMAN["SWEEP_SECRET"] - shared secret; empty rejects every call.
    """

    def post(self, request):
        provided = request.headers.get(SECRET_HEADER, "")

        # R1: Trusted invoker
        try:
            Gates.trusted_invoker(provided, rewardman_settings.SWEEP_SECRET)
        except GateError as exc:
            logger.warning("Sweep trigger: R1 failed - %s", exc.message)
            return JsonResponse({"error": exc.message}, status=403)

        try:
            neutralized = expiry.sweep()
        except Exception:
            logger.exception("Sweep trigger: sweep failed")
            return JsonResponse({"error": "Internal error"}, status=500)

        return JsonResponse({"neutralized": neutralized})
