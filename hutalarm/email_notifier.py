from __future__ import annotations

import smtplib
from email.message import EmailMessage


def send_email(
    *,
    host: str,
    port: int,
    username: str,
    password: str,
    recipient: str,
    subject: str,
    text: str,
    timeout_seconds: float = 20.0,
) -> None:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = username
    msg["To"] = recipient
    msg.set_content(text)

    with smtplib.SMTP(host, port, timeout=timeout_seconds) as server:
        server.starttls()
        server.login(username, password)
        server.send_message(msg)
