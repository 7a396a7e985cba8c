import hashlib
import hmac
import io
import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from PIL import Image, ImageDraw, ImageFont
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from competeedu.db import utcnow
from competeedu.models import Badge, Event, Submission
from competeedu.models.enums import BadgeTier
from competeedu.settings import settings

TIER_STYLES = {
    BadgeTier.GOLD.value: {"label": "GOLD EXCELLENCE", "background": (40, 28, 0), "accent": (255, 215, 0)},
    BadgeTier.SILVER.value: {"label": "SILVER MERIT", "background": (24, 28, 40), "accent": (192, 192, 192)},
    BadgeTier.BRONZE.value: {"label": "BRONZE COMMENDATION", "background": (36, 20, 4), "accent": (205, 127, 50)},
    BadgeTier.PARTICIPANT.value: {"label": "PARTICIPANT", "background": (12, 18, 48), "accent": (99, 102, 241)},
}

BADGE_IMAGE_SIZE = (800, 480)


def generate_credential_id(now: Optional[datetime] = None) -> str:
    """Opaque public identifier, e.g. CE-2026-3F9A0C1B2D4E"""
    year = (now or utcnow()).year
    return f"CE-{year}-{secrets.token_hex(6).upper()}"


def _normalize_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def credential_payload(
        credential_id: str,
        student_id: UUID,
        event_id: UUID,
        tier: str,
        rank: int,
        weighted_score: float,
        issued_at: datetime,
        student_name: str,
        school_name: str,
        event_name: str
) -> str:
    return json.dumps(
        {
            "credential_id": credential_id,
            "student_id": str(student_id),
            "event_id": str(event_id),
            "tier": tier,
            "rank": rank,
            "weighted_score": f"{weighted_score:.2f}",
            "issued_at": _normalize_timestamp(issued_at),
            "student_name": student_name,
            "school_name": school_name,
            "event_name": event_name,
        },
        sort_keys=True,
        separators=(",", ":"),
    )


def generate_credential_hash(payload: str, secret: Optional[str] = None) -> str:
    key = (secret or settings.badge_secret).encode("utf-8")
    return hmac.new(key, payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_credential_hash(badge: Badge, secret: Optional[str] = None) -> bool:
    """Recompute the hash from the stored fields and compare in constant time"""
    payload = credential_payload(
        badge.credential_id,
        badge.student_id,
        badge.event_id,
        badge.tier,
        badge.rank,
        badge.weighted_score,
        badge.issued_at,
        badge.student_name,
        badge.school_name,
        badge.event_name,
    )
    return hmac.compare_digest(generate_credential_hash(payload, secret), badge.credential_hash)


async def get_badge_for_submission(session: AsyncSession, submission_id: UUID) -> Optional[Badge]:
    result = await session.execute(
        select(Badge).where(Badge.submission_id == submission_id)
    )
    return result.scalar_one_or_none()


async def get_badge_by_credential(session: AsyncSession, credential_id: str) -> Optional[Badge]:
    result = await session.execute(
        select(Badge).where(Badge.credential_id == credential_id)
    )
    return result.scalar_one_or_none()


async def issue_badge(
        session: AsyncSession,
        submission: Submission,
        event: Event,
        rank: int,
        tier: str,
        weighted_score: float,
        issued_by: Optional[str] = None
) -> Tuple[Badge, bool]:
    """
    Mint the credential for a ranked submission.

    Issuance is keyed by submission: when a badge already exists it is
    returned untouched. The submission must have ``student`` and
    ``student.school`` loaded. Returns the badge and whether it was created.
    The caller commits.
    """
    existing = await get_badge_for_submission(session, submission.id)
    if existing:
        return existing, False

    student = submission.student
    student_name = student.full_name if student else "Unknown"
    school_name = student.school.name if student and student.school else "Unknown School"
    issued_at = utcnow()
    credential_id = generate_credential_id(issued_at)
    payload = credential_payload(
        credential_id, submission.student_id, event.id, tier, rank, weighted_score, issued_at,
        student_name, school_name, event.title
    )

    badge = Badge(
        credential_id=credential_id,
        credential_hash=generate_credential_hash(payload),
        submission_id=submission.id,
        event_id=event.id,
        student_id=submission.student_id,
        tier=tier,
        rank=rank,
        weighted_score=weighted_score,
        student_name=student_name,
        school_name=school_name,
        event_name=event.title,
        issued_by=issued_by or settings.badge_issuer_name,
        is_public=tier != BadgeTier.PARTICIPANT.value,
        issued_at=issued_at,
    )
    session.add(badge)
    logging.info(f"Issued badge {credential_id} ({tier}, rank {rank}) for submission {submission.id}")
    return badge, True


def _font(size: int):
    return ImageFont.load_default(size=size)


def render_badge_png(badge: Badge) -> bytes:
    """Draw the certificate card for a badge and return PNG bytes"""
    style = TIER_STYLES.get(badge.tier, TIER_STYLES[BadgeTier.PARTICIPANT.value])
    accent = style["accent"]
    width, height = BADGE_IMAGE_SIZE

    image = Image.new("RGB", BADGE_IMAGE_SIZE, style["background"])
    draw = ImageDraw.Draw(image)

    draw.rounded_rectangle((4, 4, width - 5, height - 5), radius=24, outline=accent, width=2)
    draw.rectangle((0, 0, 6, height), fill=accent)

    draw.text((56, 48), badge.issued_by.upper(), font=_font(14), fill=accent)
    draw.text((56, 70), "OFFICIAL ACHIEVEMENT CERTIFICATE", font=_font(11), fill=(150, 150, 150))
    draw.text((width - 56, 56), style["label"], font=_font(14), fill=accent, anchor="ra")

    name_size = 38 if len(badge.student_name) > 20 else 48
    draw.text((56, 150), "THIS CERTIFIES THAT", font=_font(12), fill=(150, 150, 150))
    draw.text((56, 172), badge.student_name, font=_font(name_size), fill=(255, 255, 255))
    draw.text((56, 180 + name_size), badge.school_name, font=_font(16), fill=(170, 170, 170))

    draw.text((56, 290), "ACHIEVEMENT IN", font=_font(11), fill=(120, 120, 120))
    draw.text((56, 306), badge.event_name, font=_font(18), fill=accent)

    draw.line((56, 372, width - 56, 372), fill=(60, 60, 60), width=1)
    draw.text((56, 386), "RANK", font=_font(11), fill=(120, 120, 120))
    draw.text((56, 402), f"#{badge.rank}", font=_font(28), fill=accent)
    draw.text((180, 386), "SCORE", font=_font(11), fill=(120, 120, 120))
    draw.text((180, 402), f"{badge.weighted_score:.1f}/100", font=_font(28), fill=(220, 220, 220))
    draw.text((width - 56, 410), badge.credential_id, font=_font(12), fill=(150, 150, 150), anchor="ra")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
