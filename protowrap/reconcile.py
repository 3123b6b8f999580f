# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Primary/service fragment reconciliation.

Not every proto file produces both a message (`.rs`) and a service
(`.tonic.rs`) output: a file without services has no service output, and a
file with only services may have no message output. To give downstream steps
exactly one fragment per package, outputs are normalized toward the service
naming scheme when service generation is enabled:

- primary only: the primary becomes the canonical (service-named) fragment,
- service only: kept as-is,
- both: primary content, a newline, then service content; the primary is dropped.

A package with neither output simply has no entry.
"""

from __future__ import annotations

from dataclasses import replace

from protowrap.fragments import Fragment, FragmentKind, FragmentStore
from protowrap.options import NamingScheme


def reconcile_fragments(store: FragmentStore, *, service_enabled: bool) -> dict[str, Fragment]:
	"""Return one canonical fragment per package (package -> fragment)."""
	out: dict[str, Fragment] = {}
	for package in store.packages():
		primary = store.get(package, FragmentKind.PRIMARY)
		service = store.get(package, FragmentKind.SERVICE)
		if primary is not None and service is not None:
			out[package] = replace(
				service,
				content=f"{primary.content}\n{service.content}",
			)
		elif service is not None:
			out[package] = service
		elif primary is not None:
			out[package] = replace(primary, kind=FragmentKind.SERVICE) if service_enabled else primary
	return out


def canonical_file_name(fragment: Fragment, naming: NamingScheme) -> str:
	"""File name a canonical fragment carries under `naming`."""
	if fragment.kind is FragmentKind.SERVICE:
		return naming.service_name(fragment.package)
	return naming.primary_name(fragment.package)
