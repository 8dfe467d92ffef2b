"""Email delivery of assessment results (SMTP, PDF attached)."""

from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

from app.config import Settings, get_settings
from app.schemas.assessment import AssessmentRecord
from app.schemas.lead import LeadProfile
from app.services.delivery import report_filename
from app.services.report.pdf_report import render_report
from app.services.scoring.scoring_constants import BAND_COLORS, score_band

logger = logging.getLogger(__name__)

NO_GAPS_TEXT = "No specific gaps identified at this time."
NO_RECOMMENDATIONS_TEXT = "Complete your assessment for personalized recommendations."


@dataclass(frozen=True)
class EmailConfig:
    host: str
    port: int
    secure: bool
    user: str
    password: str
    from_address: str
    from_name: str

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EmailConfig":
        if settings is None:
            settings = get_settings()
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            user=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.smtp_from or settings.smtp_user,
            from_name=settings.smtp_from_name,
        )


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    error: str | None = None
    message_id: str | None = None


@dataclass(frozen=True)
class EmailPayload:
    subject: str
    html_body: str
    text_body: str
    pdf_attachment: bytes
    attachment_filename: str


class EmailClient:
    """SMTP sender. Disabled (soft failure on send) without credentials."""

    def __init__(self, config: EmailConfig) -> None:
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config.host and self.config.user and self.config.password)

    def _build_message(self, to: str, payload: EmailPayload) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = payload.subject
        msg["From"] = formataddr((self.config.from_name, self.config.from_address))
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain=self.config.from_address.partition("@")[2] or None)

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(payload.text_body, "plain", "utf-8"))
        body.attach(MIMEText(payload.html_body, "html", "utf-8"))
        msg.attach(body)

        attachment = MIMEApplication(payload.pdf_attachment, _subtype="pdf")
        attachment.add_header(
            "Content-Disposition", "attachment", filename=payload.attachment_filename
        )
        msg.attach(attachment)
        return msg

    def send(self, to: str, payload: EmailPayload) -> DeliveryResult:
        """Send one message. Returns a DeliveryResult; never raises."""
        if not self.enabled:
            logger.warning("email_send_skipped: SMTP credentials not configured")
            return DeliveryResult(success=False, error="Email service not configured")
        if not to:
            logger.warning("email_send_skipped: no recipient")
            return DeliveryResult(success=False, error="No recipient address")

        cfg = self.config
        smtp_cls = smtplib.SMTP_SSL if cfg.secure else smtplib.SMTP
        try:
            msg = self._build_message(to, payload)
            with smtp_cls(cfg.host, cfg.port, timeout=30) as server:
                if not cfg.secure:
                    server.starttls()
                server.login(cfg.user, cfg.password)
                server.sendmail(cfg.from_address, [to], msg.as_string())
        except smtplib.SMTPAuthenticationError:
            logger.error("email_auth_failed: could not authenticate with SMTP server")
            return DeliveryResult(success=False, error="SMTP authentication failed")
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("email_send_failed: recipient=%s error=%s", to, exc)
            return DeliveryResult(success=False, error=str(exc))
        except Exception as exc:
            # e.g. UnicodeEncodeError from login with non-ASCII credentials
            logger.exception("email_send_failed: recipient=%s unexpected error", to)
            return DeliveryResult(success=False, error=f"{type(exc).__name__}: {exc}")
        logger.info("email_sent: recipient=%s message_id=%s", to, msg["Message-ID"])
        return DeliveryResult(success=True, message_id=msg["Message-ID"])


def _completed_label(record: AssessmentRecord) -> str:
    if record.completed_at is None:
        return "Not recorded"
    return record.completed_at.strftime("%B %d, %Y")


def _build_html_email(user: LeadProfile, record: AssessmentRecord, settings: Settings) -> str:
    esc = html.escape
    band = score_band(record.overall_score)
    company = esc(user.company_name or "your organization")

    pillar_rows = "".join(
        "<tr>"
        f'<td style="padding:8px;border-bottom:1px solid #E5E5E5"><strong>{esc(p.pillar_name)}</strong></td>'
        f'<td style="padding:8px;border-bottom:1px solid #E5E5E5;text-align:right">{p.score:.1f}%</td>'
        "</tr>"
        for p in record.dimension_scores or []
    )
    if not pillar_rows:
        pillar_rows = '<tr><td colspan="2" style="padding:8px">Pillar data not available.</td></tr>'

    gaps = record.insights.gap_analysis or [NO_GAPS_TEXT]
    recs = record.insights.service_recommendations or [NO_RECOMMENDATIONS_TEXT]
    gap_items = "".join(f"<li>{esc(g)}</li>" for g in gaps)
    rec_items = "".join(f"<li>{esc(r)}</li>" for r in recs)
    contact = esc(settings.advisory_contact_email)
    brand = esc(settings.report_brand_name)

    return (
        "<html><body style=\"font-family:Arial,sans-serif;color:#333333\">"
        f'<div style="border-bottom:4px solid #00539F;padding:20px 0"><strong>{brand}</strong>'
        '<div style="font-size:11px;color:#666666">SAFE-8 ASSESSMENT PLATFORM</div></div>'
        '<div style="background:#00539F;color:#FFFFFF;padding:20px">'
        "<h1>Your SAFE-8 Assessment Results</h1>"
        f"<p>{esc(record.assessment_type)} Assessment | Completed {_completed_label(record)}</p></div>"
        f"<p>Dear <strong>{esc(user.contact_name)}</strong>,</p>"
        "<p>Thank you for completing your SAFE-8 assessment. We have analyzed your responses "
        f"and compiled personalized insights to help {company} advance its AI transformation "
        "journey.</p>"
        f'<div style="border-left:5px solid {BAND_COLORS[band]};padding:15px;background:#F5F5F5">'
        f"<div>Overall Performance</div><h2>{esc(band)}</h2>"
        f"<div style=\"font-size:32px\">{record.overall_score:.1f}%</div></div>"
        "<h2>Pillar Performance Breakdown</h2>"
        f'<table style="border-collapse:collapse;width:100%">{pillar_rows}</table>'
        f"<h2>Key Areas for Improvement</h2><ul>{gap_items}</ul>"
        f"<h2>Recommended Next Steps</h2><ul>{rec_items}</ul>"
        '<div style="background:#F0F7FF;padding:15px"><h3>Need Expert Guidance?</h3>'
        f"<p>Our specialists at {brand} can help you translate these insights into actionable "
        "strategies.</p>"
        f'<p><a href="mailto:{contact}">Contact our AI Advisory Team</a></p></div>'
        f'<p style="font-size:11px;color:#666666">This assessment report was generated for '
        f"{esc(user.contact_name)} at {company}.</p>"
        "</body></html>"
    )


def _build_text_email(user: LeadProfile, record: AssessmentRecord, settings: Settings) -> str:
    band = score_band(record.overall_score)
    lines = [
        "Your SAFE-8 Assessment Results",
        f"{record.assessment_type} Assessment | Completed {_completed_label(record)}",
        "=" * 40,
        "",
        f"Dear {user.contact_name},",
        "",
        f"Overall Performance: {band} ({record.overall_score:.1f}%)",
        "",
        "Pillar Performance Breakdown",
    ]
    if record.dimension_scores:
        lines.extend(f"  {p.pillar_name}: {p.score:.1f}%" for p in record.dimension_scores)
    else:
        lines.append("  Pillar data not available.")
    lines += ["", "Key Areas for Improvement"]
    lines.extend(f"  - {g}" for g in record.insights.gap_analysis or [NO_GAPS_TEXT])
    lines += ["", "Recommended Next Steps"]
    lines.extend(
        f"  - {r}" for r in record.insights.service_recommendations or [NO_RECOMMENDATIONS_TEXT]
    )
    lines += [
        "",
        "Need Expert Guidance?",
        f"Contact our AI Advisory Team: {settings.advisory_contact_email}",
    ]
    return "\n".join(lines)


def build_email_payload(
    user: LeadProfile,
    record: AssessmentRecord,
    settings: Settings | None = None,
) -> EmailPayload:
    """Subject, bodies and rendered PDF for one assessment."""
    if settings is None:
        settings = get_settings()
    return EmailPayload(
        subject=(
            f"Your SAFE-8 {record.assessment_type} Assessment Results - "
            f"{record.overall_score:.1f}%"
        ),
        html_body=_build_html_email(user, record, settings),
        text_body=_build_text_email(user, record, settings),
        pdf_attachment=render_report(user, record, settings=settings),
        attachment_filename=report_filename(user.contact_name, record.id),
    )


def send_assessment_results(
    client: EmailClient,
    user: LeadProfile,
    record: AssessmentRecord,
    *,
    to: str | None = None,
    settings: Settings | None = None,
) -> DeliveryResult:
    """Email the report to ``to`` (default: the lead's address).

    Rendering or SMTP failures come back as ``DeliveryResult(success=False)``.
    """
    recipient = to or user.email or ""
    if not client.enabled:
        logger.info("email_send_skipped: assessment_id=%s reason=not_configured", record.id)
        return DeliveryResult(success=False, error="Email service not configured")
    try:
        payload = build_email_payload(user, record, settings)
    except Exception as exc:
        logger.exception("email_payload_failed: assessment_id=%s", record.id)
        return DeliveryResult(success=False, error=f"Report generation failed: {exc}")
    try:
        result = client.send(recipient, payload)
    except Exception as exc:
        logger.exception("assessment_email_failed: assessment_id=%s recipient=%s", record.id, recipient)
        return DeliveryResult(success=False, error=f"{type(exc).__name__}: {exc}")
    if not result.success:
        logger.error(
            "assessment_email_failed: assessment_id=%s recipient=%s error=%s",
            record.id, recipient, result.error,
        )
    return result
