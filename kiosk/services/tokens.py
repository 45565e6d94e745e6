"""Sequential token allocation."""

import re
from collections.abc import Iterable

from kungfu import Error, Ok

from kiosk.store.repository import PatientRepository
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)


class TokenAllocator:
    """Issues tokens of the form PREFIX + zero-padded sequence number.

    The next number is one past the store's current maximum. Tokens already
    handed to records that are still waiting in fallback storage count as
    issued, so they are never handed out twice in one process.
    """

    def __init__(self, repository: PatientRepository, prefix: str = "HOS", width: int = 3):
        self.repository = repository
        self.prefix = prefix
        self.width = width
        self._pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    def format_token(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.width}d}"

    def parse_token(self, token: str) -> int | None:
        """Numeric suffix of ``token``, or None if it is not one of ours."""
        match = self._pattern.match(token)
        return int(match.group(1)) if match else None

    def next_token(self, reserved: Iterable[str] = ()) -> str:
        """Compute the next token.

        Args:
            reserved: Tokens issued to records not yet in the store

        Returns:
            The next token string, e.g. ``HOS007``
        """
        floor = max((n for n in map(self.parse_token, reserved) if n is not None), default=0)

        match self.repository.max_token(self.prefix):
            case Ok(None):
                last = 0
            case Ok(token):
                parsed = self.parse_token(token)
                if parsed is None:
                    logger.error(f"Stored token {token!r} is malformed, falling back to default numbering")
                    last = 0
                else:
                    last = parsed
            case Error(e):
                logger.warning(f"Could not read latest token, falling back to default numbering: {e}")
                last = 0

        return self.format_token(max(last, floor) + 1)
