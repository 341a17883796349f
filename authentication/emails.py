import logging
import os

from django.core.exceptions import ImproperlyConfigured
from django.core.mail import EmailMessage, get_connection

logger = logging.getLogger(__name__)

DEFAULT_SMTP_HOST = 'mail.smtp2go.com'
DEFAULT_SMTP_PORT = 2525


class EmailNotConfigured(ImproperlyConfigured):
    pass


def smtp_settings():
    host = os.getenv('SMTP_HOST') or DEFAULT_SMTP_HOST
    port = int(os.getenv('SMTP_PORT') or DEFAULT_SMTP_PORT)
    username = os.getenv('SMTP_USER', '')
    password = os.getenv('SMTP_PASS', '')
    if not username or not password:
        raise EmailNotConfigured('SMTP credentials are not set')
    from_email = os.getenv('FROM_EMAIL') or username
    return {
        'host': host,
        'port': port,
        'username': username,
        'password': password,
        'from_email': from_email,
    }


def send_plain_email(to, subject, body):
    config = smtp_settings()
    connection = get_connection(
        host=config['host'],
        port=config['port'],
        username=config['username'],
        password=config['password'],
        use_tls=config['port'] == 587,
    )
    message = EmailMessage(
        subject=subject,
        body=body,
        from_email=config['from_email'],
        to=[to],
        connection=connection,
    )
    message.send()
    logger.info('Email "%s" sent to %s', subject, to)


def notify(to, subject, body):
    """Send an email whose failure must not break the caller."""
    if not to:
        logger.warning('Skipping notification "%s": no recipient', subject)
        return False
    try:
        send_plain_email(to, subject, body)
    except (ImproperlyConfigured, OSError) as exc:
        logger.warning('Notification "%s" to %s failed: %s', subject, to, exc)
        return False
    return True
