"""Notification emails sent over SMTP. Every sender returns True/False and never raises."""

import asyncio
import html
import logging
import smtplib
import ssl
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from staffpanel.core.config import settings

logger = logging.getLogger(__name__)

REPORT_PREVIEW_CHARS = 500


def email_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_password)


def _sender() -> str:
    address = settings.email_from or settings.smtp_user or ""
    return f'"{settings.app_name}" <{address}>'


def _deliver(to: str, subject: str, body_html: str) -> None:
    msg = EmailMessage()
    msg["From"] = _sender()
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(body_html, subtype="html")

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=20) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls(context=ssl.create_default_context())
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(msg)


async def send_email(to: str, subject: str, body_html: str) -> bool:
    if not to:
        return False
    if not email_configured():
        logger.warning("Email not configured (SMTP_HOST/SMTP_PASSWORD unset); skipping %r", subject)
        return False
    try:
        await asyncio.to_thread(_deliver, to, subject, body_html)
    except Exception:
        logger.exception("Failed to send email to %s", to)
        return False
    logger.info("Email sent to %s", to)
    return True


def _layout(heading: str, heading_color: str, body: str) -> str:
    app_name = html.escape(settings.app_name)
    return f"""
      <div style="font-family: 'Inter', sans-serif; max-width: 600px; margin: 0 auto; background: #0a0a0b; padding: 32px; border-radius: 8px;">
        <div style="text-align: center; margin-bottom: 24px;">
          <h1 style="color: #ffffff; margin: 0;">{app_name}</h1>
        </div>
        <div style="background: #18181b; padding: 24px; border-radius: 8px; border: 1px solid #27272a;">
          <h2 style="color: {heading_color}; margin-top: 0;">{heading}</h2>
          {body}
        </div>
        <p style="color: #52525b; font-size: 12px; text-align: center; margin-top: 24px;">
          This is an automated message from {app_name}.
        </p>
      </div>
    """


def _greeting(username: str) -> str:
    return f'<p style="color: #a1a1aa;">Hello <strong style="color: #ffffff;">{html.escape(username)}</strong>,</p>'


async def send_access_approved_email(email: str, username: str) -> bool:
    body = (
        _greeting(username)
        + f'<p style="color: #a1a1aa;">Your access request to {html.escape(settings.app_name)} has been approved. '
        "You can now log in with your credentials.</p>"
        '<p style="color: #a1a1aa; margin-bottom: 0;">Welcome to the team!</p>'
    )
    return await send_email(
        email,
        f"Access Request Approved - {settings.app_name}",
        _layout("Access Approved!", "#22c55e", body),
    )


async def send_access_rejected_email(email: str, username: str) -> bool:
    body = (
        _greeting(username)
        + f'<p style="color: #a1a1aa;">Unfortunately, your access request to {html.escape(settings.app_name)} '
        "was not approved at this time.</p>"
        '<p style="color: #a1a1aa; margin-bottom: 0;">If you believe this is an error, please contact the administrator.</p>'
    )
    return await send_email(
        email,
        f"Access Request Update - {settings.app_name}",
        _layout("Access Request Update", "#ef4444", body),
    )


async def send_task_assigned_email(
    email: str,
    username: str,
    task_title: str,
    task_description: Optional[str],
    due_date: Optional[datetime],
) -> bool:
    due = (
        f'<p style="color: #f59e0b; margin: 8px 0 0 0;">Due: {due_date.strftime("%Y-%m-%d")}</p>'
        if due_date
        else ""
    )
    body = (
        _greeting(username)
        + '<p style="color: #a1a1aa;">A new task has been assigned to you:</p>'
        '<div style="background: #27272a; padding: 16px; border-radius: 6px; margin: 16px 0;">'
        f'<h3 style="color: #ffffff; margin: 0 0 8px 0;">{html.escape(task_title)}</h3>'
        f'<p style="color: #a1a1aa; margin: 0;">{html.escape(task_description or "No description provided.")}</p>'
        f"{due}</div>"
        '<p style="color: #a1a1aa; margin-bottom: 0;">Please log in to view and update the task.</p>'
    )
    return await send_email(
        email,
        f"New Task Assigned: {task_title} - {settings.app_name}",
        _layout("New Task Assigned", "#3b82f6", body),
    )


def report_preview(content: str) -> str:
    if len(content) > REPORT_PREVIEW_CHARS:
        return content[:REPORT_PREVIEW_CHARS] + "..."
    return content


async def send_report_submitted_email(
    admin_email: str,
    submitter_name: str,
    report_title: str,
    report_content: str,
) -> bool:
    body = (
        f'<p style="color: #a1a1aa;"><strong style="color: #ffffff;">{html.escape(submitter_name)}</strong> '
        "has submitted a new work report:</p>"
        '<div style="background: #27272a; padding: 16px; border-radius: 6px; margin: 16px 0;">'
        f'<h3 style="color: #ffffff; margin: 0 0 8px 0;">{html.escape(report_title)}</h3>'
        '<p style="color: #a1a1aa; margin: 0; white-space: pre-wrap;">'
        f"{html.escape(report_preview(report_content))}</p></div>"
        '<p style="color: #a1a1aa; margin-bottom: 0;">Please log in to review this report.</p>'
    )
    return await send_email(
        admin_email,
        f"New Work Report: {report_title} - {settings.app_name}",
        _layout("New Work Report Submitted", "#8b5cf6", body),
    )
