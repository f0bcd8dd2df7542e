"""cert-tool: self-signed development certificates in PEM and PKCS#12 form."""

__version__ = "1.0.0"
