"""Demo-request mailer: relays "request a demo" form submissions over SMTP."""

__version__ = "1.0.0"
