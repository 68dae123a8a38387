from app.core.config import settings
from typing import Optional
from html import escape
from loguru import logger
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart


async def send_email_smtp(email_to: str, subject: str, body: str) -> bool:
    try:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
        message["To"] = email_to

        html_part = MIMEText(body, "html")
        message.attach(html_part)

        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            start_tls=settings.SMTP_TLS,
        )

        logger.info(f"Email sent successfully to {email_to}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email: {str(e)}")
        return False


def _layout(title: str, content: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f5f5f5;">
        <table cellpadding="0" cellspacing="0" border="0" width="100%" style="background-color: #f5f5f5; padding: 20px 0;">
            <tr>
                <td align="center">
                    <table cellpadding="0" cellspacing="0" border="0" width="600" style="max-width: 600px; background-color: #ffffff; border-radius: 8px;">
                        <tr>
                            <td style="padding: 32px 30px; text-align: center; background-color: #059669; border-radius: 8px 8px 0 0;">
                                <h1 style="margin: 0; color: #ffffff; font-size: 26px; font-weight: 600;">{settings.EMAILS_FROM_NAME}</h1>
                            </td>
                        </tr>
                        <tr>
                            <td style="padding: 32px 30px;">
                                <h2 style="margin: 0 0 20px 0; color: #1F2937; font-size: 22px; text-align: center;">{title}</h2>
                                {content}
                            </td>
                        </tr>
                    </table>
                </td>
            </tr>
        </table>
    </body>
    </html>
    """


async def send_registration_received_email(email_to: str, business_name: str) -> bool:
    business_name = escape(business_name)
    subject = "Professional registration received"
    content = f"""
        <p style="color: #4B5563; font-size: 16px; line-height: 24px;">
            Thank you for registering <strong>{business_name}</strong> as a gemstone professional.
        </p>
        <p style="color: #4B5563; font-size: 16px; line-height: 24px;">
            Your registration has been submitted for review. We will verify your information
            and notify you by email when your account is approved.
        </p>
    """
    return await send_email_smtp(email_to, subject, _layout("Registration submitted", content))


async def send_verification_decision_email(
        email_to: str,
        business_name: str,
        approved: bool,
        reason: Optional[str] = None,
) -> bool:
    business_name = escape(business_name)
    reason = escape(reason) if reason else None
    if approved:
        subject = "Your professional account is verified"
        content = f"""
        <p style="color: #4B5563; font-size: 16px; line-height: 24px;">
            <strong>{business_name}</strong> is now a verified professional.
            <a href="{settings.FRONTEND_URL}/auth/login" style="color: #059669;">Sign in</a> to get started.
        </p>
        """
        title = "Verification approved"
    else:
        subject = "Your professional verification was not approved"
        content = f"""
        <p style="color: #4B5563; font-size: 16px; line-height: 24px;">
            We could not verify <strong>{business_name}</strong>.
        </p>
        <p style="color: #6B7280; font-size: 14px;">Reason: {reason or "not specified"}</p>
        """
        title = "Verification rejected"

    return await send_email_smtp(email_to, subject, _layout(title, content))
