"""In-memory store for purchase passwords and download tokens.

Both credential kinds live in separate maps guarded by one lock, so every
operation (including the check-and-delete steps of redemption) is atomic with
respect to every other. Nothing here survives a restart.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import secrets
import threading
from typing import Callable

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OtpRecord:
    secret: str
    expires_at: datetime


@dataclass(frozen=True)
class DownloadGrant:
    account: str
    item: str
    expires_at: datetime


class CredentialStore:
    def __init__(
        self,
        otp_ttl_seconds: int,
        token_ttl_seconds: int = 300,
        otp_bytes: int = 3,
        token_bytes: int = 16,
        clock: Clock = _utcnow,
        log_secrets: bool = False,
    ) -> None:
        self._otp_ttl = timedelta(seconds=otp_ttl_seconds)
        self._token_ttl = timedelta(seconds=token_ttl_seconds)
        self._otp_bytes = otp_bytes
        self._token_bytes = token_bytes
        self._clock = clock
        self._log_secrets = log_secrets
        self._lock = threading.Lock()
        self._otps: dict[tuple[str, str], OtpRecord] = {}
        self._tokens: dict[str, DownloadGrant] = {}

    def issue_otp(self, account: str, item: str) -> str:
        secret = secrets.token_hex(self._otp_bytes)
        record = OtpRecord(secret=secret, expires_at=self._clock() + self._otp_ttl)
        with self._lock:
            # Last issuance wins; tokens already derived from an older secret are left alone.
            self._otps[(account, item)] = record
        if self._log_secrets:
            LOGGER.debug("Issued OTP account=%s item=%s secret=%s", account, item, secret)
        else:
            LOGGER.info("Issued OTP account=%s item=%s", account, item)
        return secret

    def redeem_otp(self, account: str, item: str, supplied: str) -> str | None:
        """Trade a matching, unexpired OTP for a fresh download token.

        Returns None for every failure so callers cannot tell a wrong secret
        from a missing one.
        """
        key = (account, item)
        with self._lock:
            now = self._clock()
            record = self._otps.get(key)
            if record is None:
                return None
            if record.expires_at <= now:
                del self._otps[key]
                return None
            if not secrets.compare_digest(
                record.secret.encode("utf-8"), (supplied or "").strip().encode("utf-8")
            ):
                return None
            del self._otps[key]
            token = self._new_token_id()
            self._tokens[token] = DownloadGrant(
                account=account, item=item, expires_at=now + self._token_ttl
            )
        LOGGER.info("Exchanged OTP for download token account=%s item=%s", account, item)
        return token

    def consume_token(self, token: str) -> DownloadGrant | None:
        with self._lock:
            grant = self._tokens.pop(token, None)
            if grant is None:
                return None
            if self._clock() > grant.expires_at:
                return None
        LOGGER.info("Consumed download token account=%s item=%s", grant.account, grant.item)
        return grant

    def has_pending_otp(self, account: str, item: str) -> bool:
        with self._lock:
            record = self._otps.get((account, item))
            return record is not None and record.expires_at > self._clock()

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale_otps = [key for key, record in self._otps.items() if record.expires_at <= now]
            for key in stale_otps:
                del self._otps[key]
            stale_tokens = [key for key, grant in self._tokens.items() if now > grant.expires_at]
            for key in stale_tokens:
                del self._tokens[key]
        removed = len(stale_otps) + len(stale_tokens)
        if removed:
            LOGGER.debug(
                "Purged expired credentials otps=%d tokens=%d",
                len(stale_otps),
                len(stale_tokens),
            )
        return removed

    def clear(self) -> None:
        with self._lock:
            self._otps.clear()
            self._tokens.clear()

    def _new_token_id(self) -> str:
        while True:
            token = secrets.token_hex(self._token_bytes)
            if token not in self._tokens:
                return token
