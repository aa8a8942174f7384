"""Report delivery."""

from commitwatch.delivery.mailer import Mailer, open_smtp

__all__ = ["Mailer", "open_smtp"]
