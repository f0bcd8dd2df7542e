"""Exception types raised by the certificate pipeline.

Core functions raise these; only the CLI catches them and maps them to an
exit code.
"""


class CertToolError(Exception):
    """Base class for all cert-tool errors."""


class ValidationError(CertToolError):
    """Invalid option combination or option value."""


class EmptyPassword(ValidationError):
    """PKCS#12 output was requested without a password."""

    def __init__(self, message: str = "Please enter a valid password for PFX certificate"):
        super().__init__(message)


class InvalidHostname(ValidationError):
    """Hostname is not usable as a DNS subject alternative name."""

    def __init__(self, hostname: str):
        self.hostname = hostname
        super().__init__(f"Invalid hostname for DNS subject alternative name: {hostname!r}")


class KeyGenerationFailed(CertToolError):
    """The underlying library failed to generate a key pair."""


class NoAddressFound(CertToolError):
    """No external IPv4 interface address exists on this host."""

    def __init__(self, message: str = "No external IPv4 address found on any network interface"):
        super().__init__(message)


class InvalidPassword(CertToolError):
    """A PKCS#12 payload could not be decrypted with the given password."""


class FileWriteError(CertToolError):
    """An output file could not be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")
