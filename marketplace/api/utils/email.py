from flask_mail import Message
from marketplace.extensions import mail


def send_email(subject, recipients, body, sender=None):
    """
    Send a plain-text UTF-8 e-mail through Flask-Mail.
    Falls back to MAIL_DEFAULT_SENDER when no sender is given.
    """
    if isinstance(recipients, str):
        recipients = [recipients]

    msg = Message(
        subject=subject or "",
        recipients=list(recipients or []),
        body=body or "",
        sender=sender,
    )
    msg.charset = "utf-8"

    mail.send(msg)
    return msg
