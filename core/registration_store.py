"""
Registration Store Module

This module holds in-flight registrations in process memory. Nothing is
persisted: a restart drops every registration.

Each registration is keyed by a VID number ("VID" + 6 digits) and carries
its creation time. A registration older than the time-to-live is treated
as dead, both when it is accessed (see is_expired) and by the periodic
sweep that removes it from the map.

The RegistrationStore class provides:
- create: Insert a new registration under a fresh VID number
- get: Look up a registration (no expiry check)
- delete: Remove a registration
- sweep: Remove every expired registration
- stats: Counts of pending and verified registrations

Usage:
    from core.registration_store import RegistrationStore

    store = RegistrationStore(ttl_sec=3600)
    record = store.create(id_image="data:image/jpeg;base64,...")
    print(record.vid_number)  # e.g. "VID482913"

    removed = store.sweep()
"""

import random
import logging
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Any

from core.errors import ServerError

# Setup logging
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with milliseconds.

    Example: "2026-10-18T09:15:02.123Z"
    """
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RegistrationRecord:
    """
    One in-flight registration.

    Attributes:
        vid_number: Registration identifier (e.g., "VID482913").
        id_image: Base64 / data-URL payload captured at step 1.
        created_at: Timezone-aware UTC creation time.
        face_image: Payload captured at step 2. None until step 2 succeeds.
        verified: False until step 2 succeeds.
    """

    vid_number: str
    id_image: str
    created_at: datetime
    face_image: Optional[str] = None
    verified: bool = False

    def age_sec(self, now: datetime) -> float:
        """Return the age of the record in seconds at time now."""
        return (now - self.created_at).total_seconds()

    def to_summary(self) -> Dict[str, Any]:
        """Return the public, image-free view of the record."""
        return {
            "vid_number": self.vid_number,
            "created_at": format_timestamp(self.created_at),
            "verified": self.verified,
        }


def generate_vid_number(prefix: str = "VID", rng: Optional[random.Random] = None) -> str:
    """
    Generate a random VID number.

    Format: prefix followed by 6 decimal digits in the range 100000-999999.

    Args:
        prefix: Identifier prefix.
        rng: Optional random generator (for reproducible tests).

    Returns:
        A VID number string (e.g., "VID482913").
    """
    rng = rng or random
    return f"{prefix}{rng.randint(100000, 999999)}"


class RegistrationStore:
    """
    In-memory map from VID number to RegistrationRecord with a time-to-live.

    All methods are synchronous and never yield to the event loop, so each
    call is atomic with respect to other coroutines running on the same loop.

    Attributes:
        ttl: Maximum age of a registration.
        vid_prefix: Prefix for generated VID numbers.
        max_vid_attempts: How many times create() regenerates a VID number
                          that is already taken before giving up.
    """

    def __init__(
        self,
        ttl_sec: float = 3600,
        vid_prefix: str = "VID",
        max_vid_attempts: int = 20,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the store.

        Args:
            ttl_sec: Time-to-live in seconds.
            vid_prefix: Prefix for generated VID numbers.
            max_vid_attempts: Collision retries for VID generation.
            clock: Callable returning the current UTC datetime.
            rng: Optional random generator used for VID numbers.
        """
        self.ttl = timedelta(seconds=ttl_sec)
        self.vid_prefix = vid_prefix
        self.max_vid_attempts = max_vid_attempts
        self._clock = clock
        self._rng = rng
        self._records: Dict[str, RegistrationRecord] = {}

        logger.info(f"RegistrationStore initialized: ttl={ttl_sec}s")

    def now(self) -> datetime:
        """Return the store's notion of the current time."""
        return self._clock()

    def _new_vid_number(self) -> str:
        """Generate a VID number that is not currently in use."""
        for _ in range(self.max_vid_attempts):
            vid_number = generate_vid_number(self.vid_prefix, self._rng)
            if vid_number not in self._records:
                return vid_number
            logger.debug(f"VID collision on {vid_number}, regenerating")

        raise ServerError("Server error processing ID image. Please try again.")

    def create(self, id_image: str) -> RegistrationRecord:
        """
        Insert a new, unverified registration.

        Args:
            id_image: Payload captured at step 1.

        Returns:
            The stored RegistrationRecord.

        Raises:
            ServerError: If no free VID number was found.
        """
        record = RegistrationRecord(
            vid_number=self._new_vid_number(),
            id_image=id_image,
            created_at=self.now(),
        )
        self._records[record.vid_number] = record
        logger.debug(f"Stored registration {record.vid_number}")
        return record

    def get(self, vid_number: str) -> Optional[RegistrationRecord]:
        """Look up a registration without checking its age."""
        return self._records.get(vid_number)

    def is_expired(self, record: RegistrationRecord, now: Optional[datetime] = None) -> bool:
        """Check whether a record is older than the time-to-live."""
        now = now or self.now()
        return record.age_sec(now) > self.ttl.total_seconds()

    def delete(self, vid_number: str) -> bool:
        """
        Remove a registration.

        Returns:
            True if a record was removed, False if it did not exist.
        """
        return self._records.pop(vid_number, None) is not None

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """
        Remove every registration older than the time-to-live.

        Verified registrations are removed as well.

        Args:
            now: Reference time (defaults to the store clock).

        Returns:
            VID numbers of the removed registrations.
        """
        now = now or self.now()
        expired = [
            vid_number
            for vid_number, record in self._records.items()
            if self.is_expired(record, now)
        ]
        for vid_number in expired:
            del self._records[vid_number]

        return expired

    def stats(self) -> Dict[str, int]:
        """
        Get counts of stored registrations.

        Returns:
            Dictionary with:
            - total: Number of stored registrations
            - verified: Registrations that completed step 2
            - pending: Registrations still waiting for step 2
        """
        verified = sum(1 for record in self._records.values() if record.verified)
        return {
            "total": len(self._records),
            "verified": verified,
            "pending": len(self._records) - verified,
        }

    def clear(self) -> None:
        """Drop every registration."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, vid_number: str) -> bool:
        return vid_number in self._records
