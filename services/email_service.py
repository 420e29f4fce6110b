import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from core.config import Settings
from utils.logger import get_logger

logger = get_logger(__name__)


class EmailService:
    """
    SMTP email sender.

    Sending is skipped (and logged) in the testing environment or when no
    MAIL_SERVER is configured. SMTP failures are logged and re-raised;
    callers decide whether a failed email matters.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def send(self, to_email: str, subject: str, html: str) -> None:
        if self.settings.ENV == "testing" or not self.settings.MAIL_SERVER:
            logger.info(
                "Email sending disabled, message not delivered",
                extra={"recipient": to_email, "subject": subject}
            )
            return

        logger.debug(
            "Attempting to send email",
            extra={"recipient": to_email, "subject": subject}
        )

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.MAIL_FROM
        message["To"] = to_email
        message.attach(MIMEText(html, "html"))

        try:
            with smtplib.SMTP(self.settings.MAIL_SERVER, self.settings.MAIL_PORT) as server:
                server.starttls()
                if self.settings.MAIL_USERNAME:
                    server.login(self.settings.MAIL_USERNAME, self.settings.MAIL_PASSWORD)
                server.sendmail(self.settings.MAIL_FROM, to_email, message.as_string())

            logger.info(
                "Email sent successfully",
                extra={"recipient": to_email, "subject": subject}
            )

        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to send email: {str(e)}",
                extra={
                    "recipient": to_email,
                    "subject": subject,
                    "error_type": type(e).__name__
                },
                exc_info=True
            )
            raise

    def send_welcome_email(self, to_email: str, first_name: str) -> None:
        html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>Welcome to Dental Lab, {first_name}!</h2>
            <p>Your account has been created. You can now sign in and start managing your cases.</p>
            <p>If you didn't create this account, please contact support.</p>
        </body>
        </html>
        """
        self.send(to_email, "Welcome to Dental Lab", html)

    def send_password_reset_email(self, to_email: str, reset_token: str, first_name: str) -> None:
        reset_url = f"{self.settings.FRONTEND_URL}/reset-password?token={reset_token}"
        minutes = self.settings.PASSWORD_RESET_EXPIRE_MINUTES
        html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2c3e50;">Password Reset Request</h2>
                <p>Hi {first_name}, we received a request to reset your password.</p>
                <a href="{reset_url}"
                style="display: inline-block; padding: 14px 28px; background-color: #3498db;
                        color: white; text-decoration: none; border-radius: 4px; margin: 10px 0;">
                    Reset Password
                </a>
                <p style="color: #666; font-size: 14px;">This link expires in {minutes} minutes.</p>
                <p style="color: #999; font-size: 12px;">
                    If you didn't request this, ignore this email. Your password will remain unchanged.
                    <br><br>
                    {reset_url}
                </p>
            </div>
        </body>
        </html>
        """
        self.send(to_email, "Reset Your Password", html)
