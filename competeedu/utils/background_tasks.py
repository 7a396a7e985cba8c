import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from competeedu.settings import settings
from competeedu.utils.email_utils import EmailSender, email_sender

TIER_TITLES = {
    "gold": "Gold Excellence Award",
    "silver": "Silver Merit Award",
    "bronze": "Bronze Commendation",
    "participant": "Participation Award",
}


@dataclass(frozen=True)
class BadgeNotification:
    email: str
    student_name: str
    event_name: str
    tier: str
    rank: int
    credential_id: str


def build_badge_email(notification: BadgeNotification, site_name: str) -> str:
    verify_url = f"{settings.public_base_url.rstrip('/')}/verify/{notification.credential_id}"
    title = TIER_TITLES.get(notification.tier, TIER_TITLES["participant"])
    return f"""
    <!DOCTYPE html>
    <html>
        <head><meta charset="utf-8"></head>
        <body style="font-family: Arial, sans-serif; background-color: #f5f5f5; padding: 20px;">
            <div style="max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 8px; padding: 30px;">
                <h2 style="margin-top: 0;">Results of {html.escape(notification.event_name)} are out</h2>
                <p>Dear {html.escape(notification.student_name)},</p>
                <p>You placed <b>#{notification.rank}</b> and received the <b>{title}</b>.</p>
                <p>Your credential ID is <b>{notification.credential_id}</b>. Anyone can verify it here:</p>
                <p><a href="{verify_url}">{verify_url}</a></p>
                <p style="color: #888888;">{html.escape(site_name)}</p>
            </div>
        </body>
    </html>
    """


def send_results_published_emails(
        notifications: List[BadgeNotification],
        site_name: str,
        sender: Optional[EmailSender] = None
) -> int:
    """
    Send badge notifications after results are published.

    Runs as a FastAPI background task; failures are logged and counted,
    never raised.
    """
    sender = sender or email_sender
    if not sender.enabled:
        logging.info(f"SMTP is not configured, skipping {len(notifications)} results notifications")
        return 0

    total = len(notifications)
    successful_sends = 0
    failed_sends = 0

    logging.info(f"Sending results notifications. Recipients: {total}")
    start_time = datetime.now()

    for i, notification in enumerate(notifications, 1):
        sent = sender.send_email(
            to_email=notification.email,
            subject=f"{site_name}: your result in {notification.event_name}",
            body=build_badge_email(notification, site_name),
            is_html=True
        )
        if sent:
            successful_sends += 1
            logging.info(f"[{i}/{total}] Notification sent to {notification.email}")
        else:
            failed_sends += 1

    duration = datetime.now() - start_time
    logging.info(
        f"Results notifications finished in {duration.total_seconds():.1f}s: "
        f"sent {successful_sends}, failed {failed_sends}"
    )
    return successful_sends
