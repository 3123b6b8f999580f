# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Wrapper configuration.

The CLI is the only place that knows about flags; everything below it receives
a `WrapperOptions` value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class NamingScheme:
	"""
	File naming conventions of the code generator.

	- `extension`: suffix of every generated source file.
	- `service_marker`: extra stem suffix carried by service (RPC) outputs,
	  e.g. `pkg.tonic.rs`.
	- `anonymous_marker`: stem used for schema files without a package; such
	  files are written without an extension and are renamed on discovery.
	"""

	extension: str = ".rs"
	service_marker: str = ".tonic"
	anonymous_marker: str = "_"

	def primary_name(self, package: str) -> str:
		return f"{package}{self.extension}"

	def service_name(self, package: str) -> str:
		return f"{package}{self.service_marker}{self.extension}"


@dataclass(frozen=True)
class WrapperOptions:
	protoc: Path
	out_dir: Path
	crate_name: str
	package_info_path: Path
	lib_path: Path
	proto_files: list[Path] = field(default_factory=list)
	includes: list[str] = field(default_factory=list)
	proto_paths: list[str] = field(default_factory=list)
	rustfmt: Path | None = None
	service_enabled: bool = False
	extra_args: list[str] = field(default_factory=list)
	naming: NamingScheme = field(default_factory=NamingScheme)
