"""Email report pipeline.

Scans the configured IMAP mailbox for messages received in the last N days
and imports every spreadsheet attachment whose file name matches a known
report export. imaplib is blocking, so mailbox I/O runs in a worker thread;
imports themselves run on the event loop.

Failures are collected per message and per attachment, so one bad
workbook never aborts the rest of the scan. Connection and login errors
propagate to the caller.
"""

import asyncio
import email
import imaplib
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from email import policy

from opsboard.schemas import EmailFetchResult, EmailReportResult
from opsboard.services.clock import business_today
from opsboard.services.ingestion import import_report, refresh_names_quietly
from opsboard.services.parsers import ReportType, detect_report_type
from opsboard.settings import Settings, get_settings
from opsboard.stores.analytics import AnalyticsStore, get_analytics_store

logger = logging.getLogger("uvicorn.error")

DEFAULT_DAYS_BACK = 3

# IMAP dates are always English month abbreviations, whatever the locale
_IMAP_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class EmailNotConfiguredError(RuntimeError):
    """Raised when IMAP credentials are missing."""

    def __init__(self):
        super().__init__("Email not configured. Set IMAP_USER and IMAP_PASS.")


@dataclass
class Attachment:
    filename: str
    content_type: str
    content: bytes


def imap_since(day: date) -> str:
    """Format a date for an IMAP SINCE criterion (e.g. 05-Mar-2024)."""
    return f"{day.day:02d}-{_IMAP_MONTHS[day.month - 1]}-{day.year}"


def is_spreadsheet_attachment(filename: str, content_type: str | None) -> bool:
    """True for .xlsx / .xls files or spreadsheet / excel MIME types."""
    name = (filename or "").lower()
    if name.endswith(".xlsx") or name.endswith(".xls"):
        return True
    mime = (content_type or "").lower()
    return "spreadsheet" in mime or "excel" in mime


def extract_attachments(raw_message: bytes) -> tuple[str, list[Attachment]]:
    """Subject and attachments of one RFC 822 message."""
    message = email.message_from_bytes(raw_message, policy=policy.default)
    subject = str(message.get("Subject") or "(no subject)")

    attachments: list[Attachment] = []
    for part in message.iter_attachments():
        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        attachments.append(
            Attachment(
                filename=part.get_filename() or "",
                content_type=part.get_content_type(),
                content=payload,
            )
        )
    return subject, attachments


# ============================================================
# IMAP access (blocking, called via asyncio.to_thread)
# ============================================================


def _connect(settings: Settings) -> imaplib.IMAP4_SSL:
    client = imaplib.IMAP4_SSL(
        settings.imap_host,
        settings.imap_port,
        timeout=settings.imap_fetch_timeout_seconds,
    )
    try:
        client.login(settings.imap_user, settings.imap_pass)
        client.select(settings.imap_mailbox)
    except BaseException:
        client.shutdown()
        raise
    return client


def _search_since(client: imaplib.IMAP4_SSL, since: date) -> list[bytes]:
    status, data = client.uid("SEARCH", None, "SINCE", imap_since(since))
    if status != "OK":
        raise imaplib.IMAP4.error(f"SEARCH failed: {status}")
    if not data or not data[0]:
        return []
    return data[0].split()


def _fetch_message(client: imaplib.IMAP4_SSL, uid: bytes) -> bytes:
    status, data = client.uid("FETCH", uid, "(RFC822)")
    if status != "OK":
        raise imaplib.IMAP4.error(f"FETCH failed: {status}")
    for item in data or []:
        if isinstance(item, tuple) and len(item) > 1:
            return item[1]
    raise imaplib.IMAP4.error("empty message body")


def _logout(client: imaplib.IMAP4_SSL) -> None:
    try:
        client.logout()
    except (imaplib.IMAP4.error, OSError) as e:
        logger.debug("[email] Logout failed: %s", e)


# ============================================================
# Pipeline
# ============================================================


async def _import_attachment(
    attachment: Attachment,
    report_type: ReportType,
    store: AnalyticsStore,
    result: EmailFetchResult,
) -> None:
    try:
        imported = await import_report(attachment.content, attachment.filename, store=store, refresh_names=False)
    except Exception as e:
        message = f"Failed to parse {attachment.filename}: {e}"
        logger.warning("[email] %s", message)
        result.errors.append(message)
        result.reports.append(
            EmailReportResult(filename=attachment.filename, report_type=report_type.value, error=str(e))
        )
        return

    result.reports_imported += 1
    result.reports.append(
        EmailReportResult(
            filename=attachment.filename,
            report_type=imported.report_type,
            inserted=imported.inserted,
            updated=imported.updated,
            unchanged=imported.unchanged,
            total_parsed=imported.total_parsed,
            date_range=imported.date_range,
        )
    )
    logger.info("[email] Imported: %s inserted, %s updated", imported.inserted, imported.updated)


async def fetch_email_reports(
    days_back: int = DEFAULT_DAYS_BACK,
    store: AnalyticsStore | None = None,
    today: date | None = None,
) -> EmailFetchResult:
    """Import report attachments from recent emails.

    Args:
        days_back: How many days back to search (IMAP SINCE).
        store: Read store used for the name-cache rebuild.
        today: Reference day (business today when None).

    Returns:
        EmailFetchResult with per-report accounting and error strings.

    Raises:
        EmailNotConfiguredError: If IMAP credentials are not set.
    """
    settings = get_settings()
    if not settings.imap_configured:
        raise EmailNotConfiguredError()

    store = store or get_analytics_store()
    since = (today or business_today()) - timedelta(days=days_back)
    result = EmailFetchResult()

    logger.info("[email] Pipeline started")
    client = await asyncio.to_thread(_connect, settings)
    try:
        logger.info("[email] Connected to %s", settings.imap_host)
        uids = await asyncio.to_thread(_search_since, client, since)
        result.emails_scanned = len(uids)
        logger.info("[email] Found %s emails since %s", len(uids), imap_since(since))

        for uid in uids:
            try:
                raw = await asyncio.to_thread(_fetch_message, client, uid)
                subject, attachments = extract_attachments(raw)
            except (imaplib.IMAP4.error, OSError, ValueError) as e:
                message = f"Failed to process email UID {uid.decode()}: {e}"
                logger.warning("[email] %s", message)
                result.errors.append(message)
                continue

            for attachment in attachments:
                if not is_spreadsheet_attachment(attachment.filename, attachment.content_type):
                    continue
                report_type = detect_report_type(attachment.filename)
                if report_type == ReportType.UNKNOWN:
                    logger.info("[email] Attachment: %s - skipped (unknown report type)", attachment.filename)
                    continue
                logger.info(
                    '[email] Processing: "%s" | Attachment: %s -> detected as: %s',
                    subject,
                    attachment.filename,
                    report_type.value,
                )
                await _import_attachment(attachment, report_type, store, result)
    finally:
        await asyncio.to_thread(_logout, client)

    if result.reports_imported:
        await refresh_names_quietly(store)

    logger.info(
        "[email] Pipeline complete: %s reports imported from %s emails",
        result.reports_imported,
        result.emails_scanned,
    )
    return result
