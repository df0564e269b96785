import html
import logging
from email.message import EmailMessage

import aiosmtplib

logger = logging.getLogger("SmartTalkAI")

VERIFICATION_SUBJECT = "🚀 Verify Your Smart Talk AI Account"

VERIFICATION_TEXT = """Hello {name}!

Thank you for joining Smart Talk AI.
Please verify your email address by opening this link:

{url}

This link expires in 24 hours for security reasons.
"""

VERIFICATION_HTML = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #667eea;">🚀 Welcome to Smart Talk AI!</h1>
    <h2>Hello {name}! 👋</h2>
    <p>Please verify your email address by clicking the button below:</p>
    <p style="text-align: center; margin: 30px 0;">
      <a href="{url}" style="padding: 15px 40px; background: #667eea; color: white;
         text-decoration: none; border-radius: 8px; font-weight: bold;">✅ Verify Email Address</a>
    </p>
    <p style="color: #666; font-size: 14px;">Or copy and paste this link in your browser:</p>
    <p style="color: #667eea; font-size: 13px; word-break: break-all;">{url}</p>
    <p style="color: #999; font-size: 12px; text-align: center;">
      This link expires in 24 hours for security reasons.
    </p>
  </div>
</body>
</html>"""


def is_email_configured(settings: dict) -> bool:
    return bool(settings.get("user") and settings.get("password"))


def build_verification_message(settings: dict, to_address: str, name: str, verification_url: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = f"{settings['sender_name']} <{settings['user']}>"
    message["To"] = to_address
    message["Subject"] = VERIFICATION_SUBJECT
    message.set_content(VERIFICATION_TEXT.format(name=name, url=verification_url))
    message.add_alternative(
        VERIFICATION_HTML.format(name=html.escape(name), url=html.escape(verification_url)),
        subtype="html",
    )
    return message


async def send_verification_email(settings: dict, to_address: str, name: str, verification_url: str) -> bool:
    """Mails the verification link over SMTP.

    Returns False when mail is not configured or delivery failed; signup
    carries on in both cases.
    """
    if not is_email_configured(settings):
        logger.warning("Email not configured - skipping verification email")
        return False

    message = build_verification_message(settings, to_address, name, verification_url)
    try:
        await aiosmtplib.send(
            message,
            hostname=settings["host"],
            port=settings["port"],
            username=settings["user"],
            password=settings["password"],
            start_tls=settings["start_tls"],
            timeout=settings["timeout_seconds"],
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(f"Email send error for {to_address}: {e}")
        return False

    logger.info(f"Verification email sent to: {to_address}")
    return True
