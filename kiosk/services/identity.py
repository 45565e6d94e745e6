"""Mock identity lookups for the kiosk (Aadhaar number and fingerprint)."""

import hashlib
from dataclasses import dataclass
from typing import ClassVar, Protocol

from kiosk.errors import InputValidationError, UnimplementedError


@dataclass(frozen=True)
class IdentityRecord:
    """Identity details used to pre-fill the registration form."""

    name: str
    age: int
    token: str


class BiometricMatcher(Protocol):
    """Interface for fingerprint-template matching.

    - Mock: deterministic pick from the demo directory
    - Real: server-to-server authentication through a licensed device SDK
    """

    def match(self, template: str) -> IdentityRecord:
        """Resolve a captured template to an identity."""
        ...


class DemoIdentityDirectory:
    """Fixed demo identities standing in for a UIDAI lookup."""

    DEMO_IDENTITIES: ClassVar[dict[str, IdentityRecord]] = {
        "123456789012": IdentityRecord(name="Rahul Kumar", age=28, token="PENDING"),
        "987654321098": IdentityRecord(name="Anita Sharma", age=34, token="PENDING"),
        "111122223333": IdentityRecord(name="Suresh Patel", age=45, token="PENDING"),
        "444455556666": IdentityRecord(name="Meena Gupta", age=29, token="PENDING"),
        "555566667777": IdentityRecord(name="Amit Joshi", age=38, token="PENDING"),
        "888899990000": IdentityRecord(name="Priya Reddy", age=31, token="PENDING"),
    }

    INVALID: ClassVar[IdentityRecord] = IdentityRecord(name="Unknown", age=0, token="INVALID")

    def lookup(self, number: str | None) -> IdentityRecord:
        """Best-effort identity for an Aadhaar number.

        Unknown numbers get a readable placeholder built from their last four
        digits rather than an error, so the kiosk flow can continue.
        """
        if number is None:
            return self.INVALID

        cleaned = "".join(number.split())
        if len(cleaned) < 4:
            return self.INVALID

        known = self.DEMO_IDENTITIES.get(cleaned)
        if known:
            return known

        return IdentityRecord(name=f"Patient {cleaned[-4:]}", age=30, token="PENDING")

    def identities(self) -> list[IdentityRecord]:
        return list(self.DEMO_IDENTITIES.values())


class MockBiometricMatcher:
    """Maps a template to a demo identity by digest modulo directory size."""

    def __init__(self, directory: DemoIdentityDirectory):
        self.directory = directory

    def match(self, template: str) -> IdentityRecord:
        identities = self.directory.identities()
        digest = hashlib.sha256(template.encode()).hexdigest()
        return identities[int(digest, 16) % len(identities)]


class UidaiBiometricMatcher:
    """Placeholder for real UIDAI biometric authentication.

    Needs a registered client, HSM-backed keys, and encrypted PID blocks
    produced by a certified capture device.
    """

    def match(self, template: str) -> IdentityRecord:
        raise UnimplementedError(
            "Integrate UIDAI server-side API here using certified device SDK and encrypted PID"
        )


class IdentityService:
    """Front door for identity lookups used by the API layer."""

    def __init__(self, directory: DemoIdentityDirectory | None = None):
        self.directory = directory or DemoIdentityDirectory()
        self.matchers: dict[str, BiometricMatcher] = {
            "mock": MockBiometricMatcher(self.directory),
            "real": UidaiBiometricMatcher(),
        }

    def lookup_aadhaar(self, number: str | None) -> IdentityRecord:
        return self.directory.lookup(number)

    def authenticate_biometric(self, template: str | None, mode: str | None = "mock") -> IdentityRecord:
        """Resolve a fingerprint template in the requested mode.

        Raises:
            InputValidationError: If the template is missing or the mode unknown
            UnimplementedError: For the real biometric path
        """
        if template is None:
            raise InputValidationError("Missing template")

        matcher = self.matchers.get((mode or "mock").lower())
        if matcher is None:
            raise InputValidationError(f"Unknown mode: {mode}")
        return matcher.match(template)
