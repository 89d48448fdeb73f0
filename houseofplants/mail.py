"""
Welcome mail sent after signup.

Delivery runs on a daemon thread so the signup response never waits on
SMTP. Failures are written to the audit log and never reach the user.
"""

import logging
import smtplib
import threading
from email.message import EmailMessage
from typing import Optional

from houseofplants.logging_config import audit_log, sanitize_log_value

WELCOME_SUBJECT = 'Welcome to House of Plants'

WELCOME_TEXT = """Hello {name},

welcome to House of Plants! Your account "{username}" is ready.

Share the plants you are growing, swap cuttings with your neighbours
and join the next plant event in your borough.

See you soon,
the House of Plants team
"""

WELCOME_HTML = """<h1>Welcome to House of Plants, {name}!</h1>
<p>Your account <strong>{username}</strong> is ready.</p>
<p>Share the plants you are growing, swap cuttings with your neighbours
and join the next plant event in your borough.</p>
<p>See you soon,<br>the House of Plants team</p>
"""


class WelcomeMailer:
    """SMTP sender for the fixed welcome message."""

    def __init__(self, app=None):
        self.settings = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        # Copied out of app.config so the worker thread needs no app context.
        self.settings = {
            'enabled': app.config.get('MAIL_ENABLED', False),
            'server': app.config.get('MAIL_SERVER', 'localhost'),
            'port': app.config.get('MAIL_PORT', 587),
            'use_tls': app.config.get('MAIL_USE_TLS', True),
            'username': app.config.get('MAIL_USERNAME'),
            'password': app.config.get('MAIL_PASSWORD'),
            'sender': app.config.get('MAIL_SENDER'),
            'timeout': app.config.get('MAIL_TIMEOUT', 10),
        }
        app.extensions['welcome_mailer'] = self

    def build_message(self, to: str, name: str, username: str) -> EmailMessage:
        message = EmailMessage()
        message['Subject'] = WELCOME_SUBJECT
        message['From'] = self.settings.get('sender')
        message['To'] = to
        message.set_content(WELCOME_TEXT.format(name=name, username=username))
        message.add_alternative(
            WELCOME_HTML.format(name=name, username=username),
            subtype='html',
        )
        return message

    def send_welcome(self, to: str, name: str, username: str) -> Optional[threading.Thread]:
        """
        Start delivering the welcome mail in the background.

        Returns the started thread, or None when mail is disabled.
        """
        if not self.settings.get('enabled'):
            audit_log(
                event='welcome_mail_skipped',
                message='Mail disabled, welcome mail not sent',
                username=sanitize_log_value(username),
            )
            return None

        message = self.build_message(to, name, username)
        thread = threading.Thread(
            target=self._deliver,
            args=(message, username),
            name='welcome-mail',
            daemon=True,
        )
        thread.start()
        return thread

    def _deliver(self, message: EmailMessage, username: str) -> None:
        settings = self.settings
        try:
            with smtplib.SMTP(settings['server'], settings['port'], timeout=settings['timeout']) as smtp:
                if settings['use_tls']:
                    smtp.starttls()
                if settings['username']:
                    smtp.login(settings['username'], settings['password'] or '')
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            audit_log(
                event='welcome_mail_failed',
                message=f'Welcome mail delivery failed: {e}',
                level=logging.WARNING,
                username=sanitize_log_value(username),
                reason=type(e).__name__,
            )
            return

        audit_log(
            event='welcome_mail_sent',
            message='Welcome mail delivered',
            username=sanitize_log_value(username),
        )
