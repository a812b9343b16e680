import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from config import Settings, resolve_settings

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class CredentialStore:
    """
    Zwischengespeichertes Passwort zum Entsperren geschützter Produkte und Rezepturen.

    Wird von der aufrufenden Schicht gehalten und übergeben; die Berechnungen
    selbst greifen nie darauf zu.
    """

    def __init__(self, default_ttl: Optional[float] = None, clock: Callable[[], float] = time.time,
                 settings: Optional[Settings] = None):
        if default_ttl is None:
            default_ttl = resolve_settings(settings).credential_ttl_days * SECONDS_PER_DAY
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._secret: Optional[str] = None
        self._expires_at: Optional[float] = None

    def save(self, secret: str, ttl: Optional[float] = None):
        """ttl in Sekunden, Standard aus den Einstellungen (7 Tage)."""
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._secret = secret
            self._expires_at = self._clock() + ttl

    def _expire_locked(self):
        if self._expires_at is not None and self._clock() > self._expires_at:
            logger.info("Gespeichertes Passwort abgelaufen")
            self._secret = None
            self._expires_at = None

    def get(self) -> Optional[str]:
        with self._lock:
            self._expire_locked()
            return self._secret

    def clear(self):
        with self._lock:
            self._secret = None
            self._expires_at = None

    @property
    def has_secret(self) -> bool:
        return self.get() is not None

    def expires_at(self) -> Optional[datetime]:
        with self._lock:
            self._expire_locked()
            if self._expires_at is None:
                return None
            return datetime.fromtimestamp(self._expires_at)

    def check(self, item_password: Optional[str]) -> bool:
        """Einträge ohne Passwort sind immer freigegeben."""
        if not item_password:
            return True
        saved = self.get()
        if saved is None:
            return False
        return saved == item_password
