# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
End-to-end wrapper run.

Stages, in order:
1. run protoc (prost, plus tonic when service generation is enabled),
2. discover generated files and load them as fragments,
3. reconcile fragments, build the module tree and render the lib text,
4. list symbols of every proto file and resolve extern paths,
5. commit the lib text and the package info,
6. optionally format the committed lib file.

Any failure stops the run. Nothing is written before stage 5, and stage 5
commits both outputs together.
"""

from __future__ import annotations

import contextlib
import errno
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from protowrap.errors import NO_OUTPUTS, WrapperError, io_error
from protowrap.fragments import discover_generated_files, load_fragment_store
from protowrap.module_tree import build_module_tree, iter_module_paths
from protowrap.options import WrapperOptions
from protowrap.process import (
	ProcessRunner,
	check_process,
	protoc_codegen_argv,
	protoc_listing_argv,
	run_process,
	rustfmt_argv,
)
from protowrap.reconcile import canonical_file_name, reconcile_fragments
from protowrap.symbols import render_extern_paths, resolve_extern_paths
from protowrap.writer import render_module_tree


@dataclass(frozen=True)
class WrapperReport:
	ok: bool
	lib_path: str | None = None
	package_info_path: str | None = None
	module_count: int = 0
	extern_count: int = 0
	# package -> canonical fragment file name
	canonical_files: dict[str, str] = field(default_factory=dict)
	errors: list[WrapperError] = field(default_factory=list)

	def to_dict(self) -> dict[str, Any]:
		return {
			"ok": self.ok,
			"lib_path": self.lib_path,
			"package_info_path": self.package_info_path,
			"module_count": self.module_count,
			"extern_count": self.extern_count,
			"canonical_files": dict(self.canonical_files),
			"errors": [e.to_dict() for e in self.errors],
		}


@dataclass(frozen=True)
class GeneratedOutputs:
	lib_text: str
	package_info_text: str
	module_count: int
	extern_count: int
	canonical_files: dict[str, str] = field(default_factory=dict)


def generate_outputs(opts: WrapperOptions, runner: ProcessRunner = run_process) -> GeneratedOutputs:
	"""Run stages 1-4 and return the output texts without writing them."""
	check_process(runner(protoc_codegen_argv(opts)), "protoc")

	generated = discover_generated_files(opts.out_dir, opts.naming)
	if not generated:
		raise WrapperError(
			reason_code=NO_OUTPUTS,
			message="no generated files were found in the protoc output directory",
			path=str(opts.out_dir),
		)
	store = load_fragment_store(generated, opts.naming, service_enabled=opts.service_enabled)
	canonical = reconcile_fragments(store, service_enabled=opts.service_enabled)
	tree = build_module_tree({package: frag.content for package, frag in canonical.items()})
	lib_text = render_module_tree(tree)

	listings: dict[Path, str] = {}
	for proto_file in sorted(set(opts.proto_files)):
		result = check_process(runner(protoc_listing_argv(opts, proto_file)), f"protoc symbol listing for {proto_file}")
		listings[proto_file] = result.stdout
	externs = resolve_extern_paths(listings, opts.crate_name)

	return GeneratedOutputs(
		lib_text=lib_text,
		package_info_text=render_extern_paths(externs),
		module_count=sum(1 for _ in iter_module_paths(tree)),
		extern_count=len(externs),
		canonical_files={package: canonical_file_name(frag, opts.naming) for package, frag in canonical.items()},
	)


def commit_outputs(files: dict[Path, str]) -> None:
	"""
	Write every file via a temp sibling, then move them all into place.

	Destinations are checked before anything is staged. If staging or a move
	fails, every temp file not yet moved is removed, destinations already moved
	get their previous content back, and the first failure is raised as an
	`IO_ERROR`.
	"""
	previous: dict[Path, bytes | None] = {}
	for path in files:
		if path.is_dir():
			err = IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
			raise io_error("write output", path, err)
		try:
			previous[path] = path.read_bytes() if path.exists() else None
		except OSError as err:
			raise io_error("read existing output", path, err) from err

	pending: list[tuple[Path, Path]] = []
	for path, text in files.items():
		tmp = path.with_name(path.name + f".tmp.{os.getpid()}")
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			tmp.write_text(text, encoding="utf-8")
		except OSError as err:
			_discard(staged for staged, _dest in pending)
			_discard([tmp])
			raise io_error("write output", path, err) from err
		pending.append((tmp, path))

	moved: list[Path] = []
	for tmp, dest in pending:
		try:
			os.replace(tmp, dest)
		except OSError as err:
			_discard(staged for staged, _dest in pending[len(moved):])
			_restore(moved, previous)
			raise io_error("move output into place", dest, err) from err
		moved.append(dest)


def _discard(paths: Iterable[Path]) -> None:
	# Cleanup must not mask the error being reported.
	for path in paths:
		with contextlib.suppress(OSError):
			path.unlink(missing_ok=True)


def _restore(paths: list[Path], previous: dict[Path, bytes | None]) -> None:
	for path in paths:
		old = previous[path]
		with contextlib.suppress(OSError):
			if old is None:
				path.unlink(missing_ok=True)
			else:
				path.write_bytes(old)


def run_wrapper(opts: WrapperOptions, runner: ProcessRunner = run_process) -> WrapperReport:
	try:
		outputs = generate_outputs(opts, runner)
		commit_outputs(
			{
				opts.lib_path: outputs.lib_text,
				opts.package_info_path: outputs.package_info_text,
			}
		)
		if opts.rustfmt is not None:
			check_process(runner(rustfmt_argv(opts.rustfmt, opts.lib_path)), "rustfmt")
	except WrapperError as err:
		return WrapperReport(ok=False, errors=[err])
	return WrapperReport(
		ok=True,
		lib_path=str(opts.lib_path),
		package_info_path=str(opts.package_info_path),
		module_count=outputs.module_count,
		extern_count=outputs.extern_count,
		canonical_files=outputs.canonical_files,
	)
