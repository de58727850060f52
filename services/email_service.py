"""
Email Service - transactional email through the Resend HTTP API.

Delivery is best-effort: request handlers hand rendered messages to the
EmailQueue, which sends them from a background worker thread with bounded
retries. A failed delivery is logged and counted, never raised back into
the request that produced it.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from functools import wraps
from typing import Dict, List, Any, Optional

import requests
from flask import render_template

from errors import UpstreamError, UpstreamConfigError, UpstreamRejected, UpstreamUnavailable

logger = logging.getLogger(__name__)

RESEND_API_URL = 'https://api.resend.com/emails'
SERVICE_NAME = 'resend'


@dataclass
class EmailMessage:
    """One outbound email, already rendered"""
    to: List[str]
    subject: str
    html: str
    reply_to: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)

    def to_payload(self, sender: str) -> Dict[str, Any]:
        payload = {
            'from': sender,
            'to': self.to,
            'subject': self.subject,
            'html': self.html,
        }
        if self.reply_to:
            payload['reply_to'] = self.reply_to
        if self.tags:
            payload['tags'] = [{'name': k, 'value': v} for k, v in self.tags.items()]
        return payload


def retry_on_failure(max_attempts=3, delay=2, backoff=2, give_up_on=()):
    """
    Decorator to retry function on failure with exponential backoff

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between retries (seconds)
        backoff: Multiplier for delay on each retry
        give_up_on: Exception types that are re-raised without retrying
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except give_up_on:
                    raise
                except Exception as e:
                    last_exception = e
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}"
                    )

                    if attempt < max_attempts - 1:
                        if current_delay:
                            logger.info(f"Retrying in {current_delay} seconds...")
                            time.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}")

            raise last_exception

        return wrapper
    return decorator


class EmailService:
    """Thin client for the Resend send-email endpoint"""

    def __init__(self, config, http: Optional[requests.Session] = None):
        self.api_key = config.get('RESEND_API_KEY')
        self.sender = config.get('EMAIL_FROM')
        self.timeout = config.get('EMAIL_TIMEOUT', 10)
        self.http = http or requests.Session()

        if not self.api_key:
            logger.warning("⚠️  RESEND_API_KEY not set - outgoing email is disabled")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send(self, message: EmailMessage) -> Optional[str]:
        """
        Send one email

        Args:
            message: Rendered EmailMessage

        Returns:
            Provider message id, if the API returned one

        Raises:
            UpstreamConfigError: If no API key is set or Resend rejects it
            UpstreamRejected: If Resend refuses the message (4xx other than 429)
            UpstreamUnavailable: On transport errors, 429 and 5xx responses
        """
        if not self.is_configured():
            raise UpstreamConfigError("Resend is not configured", service=SERVICE_NAME)

        try:
            response = self.http.post(
                RESEND_API_URL,
                json=message.to_payload(self.sender),
                headers={'Authorization': f'Bearer {self.api_key}'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Resend request failed: {e}")
            raise UpstreamUnavailable("Resend API unreachable", service=SERVICE_NAME)

        if response.status_code in (401, 403):
            logger.error(f"Resend rejected the API key: {response.status_code} {response.text}")
            raise UpstreamConfigError("Resend authentication failed", service=SERVICE_NAME)

        # 429 is rate limiting; any other 4xx is a problem with the message itself
        if 400 <= response.status_code < 500 and response.status_code != 429:
            logger.error(f"Resend refused the message: {response.status_code} {response.text}")
            raise UpstreamRejected(f"Resend refused the message ({response.status_code})", service=SERVICE_NAME)

        if not response.ok:
            logger.error(f"Resend API error: {response.status_code} {response.text}")
            raise UpstreamUnavailable(f"Resend returned {response.status_code}", service=SERVICE_NAME)

        # Accepted from here on; a bad body must not trigger a resend
        try:
            body = response.json()
        except ValueError:
            body = None
        message_id = body.get('id') if isinstance(body, dict) else None
        logger.info(f"📧 Email sent to {', '.join(message.to)}: {message.subject} (id={message_id})")
        return message_id


class EmailQueue:
    """
    Background delivery for EmailService.

    With run_async=False messages are delivered inline on enqueue, using the
    same retry policy; the test configuration runs this way.
    """

    def __init__(self, email_service: EmailService, max_attempts: int = 3,
                 delay: float = 2.0, backoff: float = 2, run_async: bool = True):
        self.email_service = email_service
        self.run_async = run_async
        self._deliver = retry_on_failure(
            max_attempts=max(1, max_attempts),
            delay=delay,
            backoff=backoff,
            give_up_on=(UpstreamConfigError, UpstreamRejected),
        )(email_service.send)

        self._queue: "queue.Queue[Optional[EmailMessage]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._counters = {'sent': 0, 'failed': 0, 'skipped': 0}

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the delivery worker (no-op for inline delivery)"""
        if not self.run_async:
            return
        with self._lock:
            if self.running:
                return
            self._thread = threading.Thread(target=self._run_loop, name='email-queue', daemon=True)
            self._thread.start()
        logger.info("Email delivery worker started")

    def stop(self, timeout: float = 5):
        """Drain pending messages and stop the worker"""
        if not self.running:
            return
        self._queue.put(None)
        self._thread.join(timeout=timeout)
        logger.info("Email delivery worker stopped")

    def enqueue(self, message: EmailMessage) -> bool:
        """
        Hand a message over for delivery

        Returns:
            False when email is not configured and the message was dropped
        """
        if not self.email_service.is_configured():
            logger.warning(f"Email not configured - skipping '{message.subject}' to {', '.join(message.to)}")
            self._count('skipped')
            return False

        if not self.run_async:
            self._process(message)
            return True

        self.start()
        self._queue.put(message)
        return True

    def join(self):
        """Block until every queued message has been processed"""
        self._queue.join()

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = dict(self._counters)
        stats['pending'] = self._queue.qsize()
        stats['worker_running'] = self.running
        return stats

    def _count(self, key: str):
        with self._lock:
            self._counters[key] += 1

    def _process(self, message: EmailMessage):
        try:
            self._deliver(message)
            self._count('sent')
        except UpstreamError as e:
            logger.error(f"Email delivery failed for '{message.subject}': {e.message}")
            self._count('failed')
        except Exception as e:
            logger.exception(f"Unexpected error delivering '{message.subject}': {e}")
            self._count('failed')

    def _run_loop(self):
        while True:
            message = self._queue.get()
            try:
                if message is None:
                    break
                self._process(message)
            finally:
                self._queue.task_done()


def build_maintenance_emails(request, config, image_url: Optional[str] = None) -> List[EmailMessage]:
    """
    Render the admin notification and the customer confirmation for a
    maintenance request. Must run inside a Flask app context.

    Args:
        request: MaintenanceRequest
        config: Flask app configuration
        image_url: Site-relative URL of the uploaded photo, if any

    Returns:
        Messages to enqueue (no admin message when ADMIN_EMAIL is unset)
    """
    company_name = config.get('COMPANY_NAME', 'All Access Remodelers')
    site_url = config.get('SITE_URL') or ''
    absolute_image_url = f"{site_url}{image_url}" if image_url else None

    messages = []
    admin_email = config.get('ADMIN_EMAIL')
    if admin_email:
        messages.append(EmailMessage(
            to=[admin_email],
            subject=f"New Maintenance Request: {request.issue_type} ({request.urgency.upper()})",
            html=render_template(
                'emails/maintenance_admin.html',
                request=request,
                image_url=absolute_image_url,
                company_name=company_name,
            ),
            reply_to=request.email,
            tags={'category': 'maintenance_admin'},
        ))
    else:
        logger.warning("ADMIN_EMAIL not set - maintenance request notification not sent")

    messages.append(EmailMessage(
        to=[request.email],
        subject=f"We received your maintenance request - {company_name}",
        html=render_template(
            'emails/maintenance_confirmation.html',
            request=request,
            company_name=company_name,
        ),
        tags={'category': 'maintenance_confirmation'},
    ))
    return messages
