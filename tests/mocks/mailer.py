"""Recording mailer for testing"""

import html
import re
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

from insight_auth.services.notification_service import Mailer

LINK_PATTERN = re.compile(r'href="([^"]+)"')


class MockMailer(Mailer):
    """Stores sent emails in memory; ``fail`` makes every send report failure"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent_emails: List[Dict[str, Any]] = []
        self.attempts = 0

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        self.attempts += 1
        if self.fail:
            return False
        self.sent_emails.append({
            "to": recipient,
            "subject": subject,
            "body": html_body,
        })
        return True

    def get_latest_email(self, to: Optional[str] = None) -> Optional[Dict[str, Any]]:
        if to:
            for email in reversed(self.sent_emails):
                if email["to"] == to:
                    return email
            return None
        return self.sent_emails[-1] if self.sent_emails else None

    def clear(self):
        self.sent_emails.clear()
        self.attempts = 0


class RaisingMailer(Mailer):
    """Transport that blows up instead of answering"""

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        raise ConnectionError("SMTP server unreachable")


def extract_link(email: Dict[str, Any]) -> str:
    match = LINK_PATTERN.search(email["body"])
    assert match, "no link in email body"
    return html.unescape(match.group(1))


def extract_link_params(email: Dict[str, Any]) -> Dict[str, str]:
    """Query parameters (email, orgId, token) of the link in an email"""
    query = parse_qs(urlsplit(extract_link(email)).query)
    return {key: values[0] for key, values in query.items()}
