# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

IO_ERROR = "IO_ERROR"
PROCESS_FAILED = "PROCESS_FAILED"
LISTING_MALFORMED = "LISTING_MALFORMED"
DUPLICATE_SYMBOL = "DUPLICATE_SYMBOL"
FRAGMENT_CONFLICT = "FRAGMENT_CONFLICT"
NO_OUTPUTS = "NO_OUTPUTS"
ARGS_INVALID = "ARGS_INVALID"


@dataclass(frozen=True)
class WrapperError(Exception):
	"""
	A structured, serializable error for the protoc wrapper.

	Every error is fatal: the pipeline never retries and never commits partial
	outputs. `reason_code` is stable; the optional fields carry whatever context
	the failing stage knows about.
	"""

	reason_code: str
	message: str
	path: str | None = None
	line: str | None = None
	symbol: str | None = None
	stderr: str | None = None
	argv: list[str] | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"line": self.line,
			"symbol": self.symbol,
			"stderr": self.stderr,
			"argv": list(self.argv) if self.argv is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		if self.symbol:
			parts.append(f"symbol={self.symbol}")
		if self.line is not None:
			parts.append(f"line={self.line!r}")
		if self.argv:
			parts.append(f"argv={' '.join(self.argv)}")
		text = " ".join(parts)
		if self.stderr and self.stderr.strip():
			text += "\n" + self.stderr.rstrip()
		return text


def io_error(action: str, path: object, err: OSError | UnicodeError) -> WrapperError:
	"""Wrap an OSError (or a decode failure) raised while touching `path`."""
	return WrapperError(
		reason_code=IO_ERROR,
		message=f"failed to {action}: {getattr(err, 'strerror', None) or err}",
		path=str(path),
	)
