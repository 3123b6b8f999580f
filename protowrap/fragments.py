# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generated output fragments.

protoc writes one flat file per proto package into its output directory:
`a.b.c.rs` for messages and, when gRPC generation is enabled,
`a.b.c.tonic.rs` for services. Schema files without a package produce a file
named by the anonymous marker (`_`, without an extension).

This module discovers those files and loads them into a `FragmentStore`
keyed by (normalized package, kind).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from protowrap.errors import FRAGMENT_CONFLICT, WrapperError, io_error
from protowrap.options import NamingScheme


class FragmentKind(Enum):
	PRIMARY = "primary"
	SERVICE = "service"


@dataclass(frozen=True)
class Fragment:
	"""One unit of generated source tied to a single package."""

	package: str
	kind: FragmentKind
	content: str
	path: Path | None = None  # origin file, informational only


class FragmentStore:
	"""
	The set of fragments discovered after compilation.

	Holds at most one fragment per (package, kind). Iteration order is sorted
	by package, then kind, independent of insertion order.
	"""

	def __init__(self, fragments: Iterable[Fragment] = ()) -> None:
		self._fragments: dict[tuple[str, FragmentKind], Fragment] = {}
		for frag in fragments:
			self.add(frag)

	def add(self, fragment: Fragment) -> None:
		key = (fragment.package, fragment.kind)
		existing = self._fragments.get(key)
		if existing is not None:
			origins = sorted(str(p) for p in (existing.path, fragment.path) if p is not None)
			raise WrapperError(
				reason_code=FRAGMENT_CONFLICT,
				message=(
					f"more than one {fragment.kind.value} fragment for package '{fragment.package}'"
					+ (f" ({', '.join(origins)})" if origins else "")
				),
				path=str(fragment.path) if fragment.path is not None else None,
			)
		self._fragments[key] = fragment

	def get(self, package: str, kind: FragmentKind) -> Fragment | None:
		return self._fragments.get((package, kind))

	def packages(self) -> list[str]:
		return sorted({package for package, _kind in self._fragments})

	def __iter__(self) -> Iterator[Fragment]:
		for key in sorted(self._fragments, key=lambda k: (k[0], k[1].value)):
			yield self._fragments[key]

	def __len__(self) -> int:
		return len(self._fragments)


def discover_generated_files(out_dir: Path, naming: NamingScheme | None = None) -> list[Path]:
	"""
	Locate generated outputs under `out_dir` (recursively).

	Files carrying the generated extension are collected as-is. An
	extension-less file named by the anonymous marker is first renamed to carry
	the extension. Everything else is ignored. The returned list is sorted.
	"""
	naming = naming or NamingScheme()
	try:
		candidates = sorted(p for p in out_dir.rglob("*") if p.is_file())
	except OSError as err:
		raise io_error("scan output directory", out_dir, err) from err

	out: set[Path] = set()
	for path in candidates:
		if path.name.endswith(naming.extension) and path.name != naming.extension:
			out.add(path)
			continue
		if path.name == naming.anonymous_marker:
			renamed = path.with_name(naming.anonymous_marker + naming.extension)
			try:
				os.replace(path, renamed)
			except OSError as err:
				raise io_error("rename anonymous output", path, err) from err
			out.add(renamed)
	return sorted(out)


def package_key_for(path: Path, naming: NamingScheme, *, service_enabled: bool) -> tuple[str, FragmentKind]:
	"""
	Derive the normalized package key and kind from a generated file name.

	The service marker is only interpreted when service generation is enabled;
	otherwise every output is a primary fragment.
	"""
	stem = path.name
	if stem.endswith(naming.extension):
		stem = stem[: -len(naming.extension)]
	kind = FragmentKind.PRIMARY
	if service_enabled and stem.endswith(naming.service_marker):
		stem = stem[: -len(naming.service_marker)]
		kind = FragmentKind.SERVICE
	return stem.lower(), kind


def load_fragment_store(
	paths: Iterable[Path],
	naming: NamingScheme | None = None,
	*,
	service_enabled: bool,
) -> FragmentStore:
	naming = naming or NamingScheme()
	store = FragmentStore()
	for path in sorted(paths):
		package, kind = package_key_for(path, naming, service_enabled=service_enabled)
		try:
			content = path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as err:
			raise io_error("read generated file", path, err) from err
		store.add(Fragment(package=package, kind=kind, content=content, path=path))
	return store
