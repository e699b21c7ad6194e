# envoearn/services/status_poller.py
"""Client side of the "waiting for approval" screen.

Polls GET /invest/status?phone=... until the payment is decided or the
countdown runs out.
"""
import logging
import time

import requests

from envoearn.models import SubmissionStatus

logger = logging.getLogger(__name__)

STATUS_PATH = "/invest/status"


class ApprovalStatusPoller:
    def __init__(
        self,
        base_url,
        phone,
        interval=5,
        timeout=600,
        session=None,
        sleep=time.sleep,
        clock=time.monotonic,
        on_tick=None,
        request_timeout=15,
    ):
        self.url = base_url.rstrip("/") + STATUS_PATH
        self.phone = phone
        self.interval = interval
        self.timeout = timeout
        self.session = session or requests.Session()
        self.sleep = sleep
        self.clock = clock
        self.on_tick = on_tick
        self.request_timeout = request_timeout

    def fetch_status(self):
        """One poll. Returns the SubmissionStatus, or None if nothing could be read."""
        try:
            response = self.session.get(
                self.url,
                params={"phone": self.phone},
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning("Status poll for %s failed: %s", self.phone, e)
            return None

        if response.status_code != 200:
            # 404 until the submission is visible; keep waiting
            return None

        try:
            return SubmissionStatus(response.json().get("status"))
        except ValueError:
            logger.warning("Unexpected status payload for %s: %s", self.phone, response.text)
            return None

    def wait(self) -> SubmissionStatus:
        """Block until approved/rejected, or return PENDING after `timeout` seconds."""
        deadline = self.clock() + self.timeout

        while True:
            status = self.fetch_status()
            if status is not None and self.on_tick:
                self.on_tick(status)

            if status is not None and status != SubmissionStatus.PENDING:
                return status

            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.info("Approval for %s still pending after %ss", self.phone, self.timeout)
                return SubmissionStatus.PENDING

            self.sleep(min(self.interval, remaining))
