"""
Console notification adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification port, logging verification codes for development use.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - prints verification codes to the log.
    """

    async def send_verification_code(self, email: str, code: str) -> None:
        """
        Log verification code (simulates email delivery).

        In production, this would be replaced with an SMTP or provider adapter.

        Args:
            email: Recipient email address
            code: 6-digit verification code
        """
        logger.info("[VERIFICATION] Email: %s Code: %s", email, code)
