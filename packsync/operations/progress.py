"""
PackSync - Progress Reporting Module

Progress sinks receive human-readable status lines from the sync client
("Authenticating to ...", "Downloaded 40% of mod.jar").

Author: PackSync Project
"""

import logging

# Configure logging
logger = logging.getLogger(__name__)


class ProgressSink:
    """
    Destination for progress messages.

    The default implementation writes each message to the log. Subclasses
    override add_progress_message to send messages elsewhere.
    """

    def add_progress_message(self, message: str):
        """
        Publish one progress message.

        Args:
            message: Human-readable status line
        """
        logger.info(message)
