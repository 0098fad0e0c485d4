"""Remote access pairing: a second device adopts the owner's session.

Flow: the requester creates a request, the owner approves it from an
authenticated session (which issues a 6-digit one-time code), and the
requester verifies the code. Records live only in process memory; a restart
drops every pending request.

    requested --approve--> approved --verify(ok)--> verified (deleted)
    requested --reject---> deleted
    approved  --3 wrong codes--> attempts_exhausted (deleted)
    any       --TTL--------> expired (deleted on next access)
"""

import secrets
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
from uuid import UUID

from money_manager.core.config import ACCESS_GRANT_MAX_ATTEMPTS, ACCESS_GRANT_TTL_MINUTES
from money_manager.core.errors import AttemptsExhausted, Forbidden, InvalidOperation, NotFound
from money_manager.core.logging_setup import get_logger
from money_manager.services.notifier import ACCESS_CODE, ACCESS_REQUEST, Notifier, notify
from money_manager.utils.time_helpers import utcnow

logger = get_logger(__name__)

REQUESTED = "requested"
APPROVED = "approved"


@dataclass
class AccessGrantRequest:
    request_id: str
    owner_id: UUID
    account_id: Optional[int]
    account_name: str
    device_info: str
    created_at: datetime
    expires_at: datetime
    code: Optional[str] = None
    approved: bool = False
    attempts: int = 0

    @property
    def status(self) -> str:
        return APPROVED if self.approved else REQUESTED

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class AccessGrantStore(ABC):
    """Storage for pending requests; swap for a shared cache when running
    more than one instance."""

    @abstractmethod
    def create(self, record: AccessGrantRequest) -> AccessGrantRequest: ...

    @abstractmethod
    def get(self, request_id: str) -> Optional[AccessGrantRequest]:
        """Return the record, or None when absent or expired."""

    @abstractmethod
    def update(self, record: AccessGrantRequest) -> None: ...

    @abstractmethod
    def delete(self, request_id: str) -> None:
        """Remove the record; deleting an absent id is a no-op."""

    @abstractmethod
    def sweep_expired(self) -> int:
        """Drop every expired record and return how many were dropped."""


class InMemoryAccessGrantStore(AccessGrantStore):
    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._records: Dict[str, AccessGrantRequest] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def create(self, record: AccessGrantRequest) -> AccessGrantRequest:
        with self._lock:
            self._records[record.request_id] = replace(record)
        return record

    def get(self, request_id: str) -> Optional[AccessGrantRequest]:
        with self._lock:
            record = self._records.get(request_id)
            if record is None:
                return None
            if record.is_expired(self._clock()):
                del self._records[request_id]
                return None
            return replace(record)

    def update(self, record: AccessGrantRequest) -> None:
        with self._lock:
            if record.request_id in self._records:
                self._records[record.request_id] = replace(record)

    def delete(self, request_id: str) -> None:
        with self._lock:
            self._records.pop(request_id, None)

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [rid for rid, rec in self._records.items() if rec.is_expired(now)]
            for rid in expired:
                del self._records[rid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def generate_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


class AccessGrantCoordinator:
    def __init__(
        self,
        store: AccessGrantStore,
        ttl: timedelta = timedelta(minutes=ACCESS_GRANT_TTL_MINUTES),
        max_attempts: int = ACCESS_GRANT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_code,
    ):
        self.store = store
        self.ttl = ttl
        self.max_attempts = max_attempts
        self._clock = clock
        self._code_factory = code_factory
        # read-modify-write de attempts/approved debe ser indivisible
        self._lock = threading.Lock()

    def _get(self, request_id: str) -> AccessGrantRequest:
        record = self.store.get(str(request_id))
        if record is None:
            raise NotFound("Request not found or expired")
        return record

    def _get_for_owner(self, owner_id: UUID, request_id: str) -> AccessGrantRequest:
        record = self._get(request_id)
        if str(record.owner_id) != str(owner_id):
            raise Forbidden("Not allowed for this request")
        return record

    def request(
        self,
        owner_id: UUID,
        account_id: Optional[int] = None,
        device_info: str = "",
        account_name: str = "Profile Access",
        notifier: Optional[Notifier] = None,
    ) -> AccessGrantRequest:
        self.store.sweep_expired()
        now = self._clock()
        record = self.store.create(
            AccessGrantRequest(
                request_id=str(uuid.uuid4()),
                owner_id=owner_id,
                account_id=account_id,
                account_name=account_name,
                device_info=str(device_info or ""),
                created_at=now,
                expires_at=now + self.ttl,
            )
        )
        logger.info("access_requested", owner_id=str(owner_id), request_id=record.request_id)
        notify(
            notifier,
            owner_id,
            [ACCESS_REQUEST],
            {
                "request_id": record.request_id,
                "account_id": account_id,
                "account_name": account_name,
                "device_info": record.device_info,
                "expires_at": record.expires_at,
            },
        )
        return record

    def approve(
        self,
        owner_id: UUID,
        request_id: str,
        notifier: Optional[Notifier] = None,
    ) -> AccessGrantRequest:
        with self._lock:
            record = self._get_for_owner(owner_id, request_id)
            record.approved = True
            record.code = self._code_factory()
            record.attempts = 0
            self.store.update(record)

        logger.info("access_approved", owner_id=str(owner_id), request_id=record.request_id)
        notify(
            notifier,
            owner_id,
            [ACCESS_CODE],
            {"request_id": record.request_id, "code": record.code, "expires_at": record.expires_at},
        )
        return record

    def reject(self, owner_id: UUID, request_id: str) -> None:
        with self._lock:
            record = self._get_for_owner(owner_id, request_id)
            self.store.delete(record.request_id)
        logger.info("access_rejected", owner_id=str(owner_id), request_id=record.request_id)

    def status(self, request_id: str) -> AccessGrantRequest:
        return self._get(request_id)

    def verify(self, request_id: str, code: str) -> UUID:
        """Consume the request and return the owner id when ``code`` matches."""
        with self._lock:
            record = self._get(request_id)
            if not record.approved or not record.code:
                raise InvalidOperation("Owner approval pending")

            if not secrets.compare_digest(str(code).strip().encode(), record.code.encode()):
                record.attempts += 1
                if record.attempts >= self.max_attempts:
                    self.store.delete(record.request_id)
                    logger.warning("access_attempts_exhausted", request_id=record.request_id)
                    raise AttemptsExhausted()
                self.store.update(record)
                remaining = self.max_attempts - record.attempts
                raise InvalidOperation(f"Invalid code ({remaining} attempts left)")

            self.store.delete(record.request_id)

        logger.info("access_verified", owner_id=str(record.owner_id), request_id=record.request_id)
        return record.owner_id


_coordinator = AccessGrantCoordinator(InMemoryAccessGrantStore())


def get_access_coordinator() -> AccessGrantCoordinator:
    return _coordinator
