import asyncio
from typing import Optional

from celery import shared_task
from loguru import logger

from app.services.email import send_registration_received_email, send_verification_decision_email
from app.tasks.celery_app import celery_app  # noqa: F401  configures the current app for shared tasks


def enqueue(task, *args, **kwargs) -> None:
    """Queue a notification; broker outages are logged, never raised to the caller"""
    try:
        task.delay(*args, **kwargs)
    except Exception as e:
        logger.error(f"Failed to queue {task.name}: {str(e)}")


@shared_task
def notify_registration_received(email_to: str, business_name: str) -> bool:
    sent = asyncio.run(send_registration_received_email(email_to, business_name))
    if not sent:
        logger.warning(f"Registration confirmation to {email_to} was not delivered")
    return sent


@shared_task
def notify_verification_decision(
        email_to: str,
        business_name: str,
        approved: bool,
        reason: Optional[str] = None,
) -> bool:
    sent = asyncio.run(send_verification_decision_email(email_to, business_name, approved, reason))
    if not sent:
        logger.warning(f"Verification decision for {email_to} was not delivered")
    return sent
