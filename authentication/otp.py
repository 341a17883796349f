import secrets
import string
import threading
from datetime import timedelta

from django.utils import timezone

OTP_LENGTH = 4
OTP_TTL = timedelta(minutes=10)


class OTPError(Exception):
    message = 'OTP verification failed'

    def __str__(self):
        return self.message


class OTPNotFound(OTPError):
    message = 'No OTP request found'


class OTPExpired(OTPError):
    message = 'OTP has expired'


class OTPInvalid(OTPError):
    message = 'Invalid OTP'


class OTPStore:
    """Process-wide one-time codes keyed by an identifier such as an email address"""

    def __init__(self, ttl=OTP_TTL):
        self.ttl = ttl
        self._codes = {}
        self._lock = threading.Lock()

    def generate_code(self):
        return ''.join(secrets.choice(string.digits) for _ in range(OTP_LENGTH))

    def issue(self, key):
        code = self.generate_code()
        with self._lock:
            self._codes[key] = (code, timezone.now() + self.ttl)
        return code

    def verify(self, key, code):
        with self._lock:
            entry = self._codes.get(key)
            if entry is None:
                raise OTPNotFound()
            stored_code, expires_at = entry
            if timezone.now() > expires_at:
                del self._codes[key]
                raise OTPExpired()
            if not secrets.compare_digest(stored_code, str(code)):
                raise OTPInvalid()
        return True

    def discard(self, key):
        with self._lock:
            self._codes.pop(key, None)

    def clear(self):
        with self._lock:
            self._codes.clear()


otp_store = OTPStore()
