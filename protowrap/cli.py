# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line for the protoc wrapper.

Flags mirror what the build rules pass:

	protowrap --protoc=<protoc> --prost_out=<dir> [--is_tonic]
	    --package_info_output=<crate>=<file> --out_librs=<file>
	    [--deps_info=<file>] [--rustfmt=<rustfmt>] [--proto_path=<p>]...
	    [-I<dir>]... [other protoc args]... <proto files>...

Unknown options are forwarded to protoc unchanged; bare arguments are proto
files. `-I` takes both the attached (`-Idir`) and the separated (`-I dir`)
form; in the separated form the next argument is the include directory, not a
proto file.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from protowrap.errors import ARGS_INVALID, WrapperError
from protowrap.options import WrapperOptions
from protowrap.pipeline import run_wrapper
from protowrap.process import ProcessRunner, run_process
from protowrap.symbols import load_dependency_extern_paths


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="protowrap",
		description="Run protoc for prost/tonic and assemble a single crate root",
		allow_abbrev=False,
	)
	p.add_argument("--protoc", type=Path, default=None, help="Path to the protoc binary")
	p.add_argument("--prost_out", "--tonic_out", dest="out_dir", type=Path, default=None, help="protoc output directory")
	p.add_argument("--crate_name", type=str, default=None, help="Crate name used as the extern path prefix")
	p.add_argument(
		"--package_info_output",
		type=str,
		default=None,
		help="<crate_name>=<path>: crate name and output path of the extern path listing",
	)
	p.add_argument(
		"--deps_info",
		type=Path,
		default=None,
		help="File listing dependency package info files; their entries are passed to prost as extern paths",
	)
	p.add_argument("--out_librs", type=Path, default=None, help="Output path for the combined crate root")
	p.add_argument("--rustfmt", type=Path, default=None, help="Format the combined crate root with this rustfmt")
	p.add_argument("--proto_path", dest="proto_paths", action="append", default=[], help="protoc --proto_path (repeatable)")
	p.add_argument("-I", dest="includes", action="append", default=[], help="protoc include directory (repeatable)")
	p.add_argument("--is_tonic", action="store_true", help="Also generate tonic services")
	p.add_argument("--json", action="store_true", help="Emit a machine-readable JSON report")
	return p


def build_options(args: argparse.Namespace, rest: list[str]) -> WrapperOptions:
	"""
	Turn parsed arguments into `WrapperOptions`.

	`rest` holds everything argparse did not recognize: bare arguments are proto
	files, the others are forwarded to protoc.
	"""
	proto_files = [Path(a) for a in rest if not a.startswith("-")]
	extra_args = [a for a in rest if a.startswith("-")]

	crate_name: str | None = args.crate_name
	package_info_path: Path | None = None
	if args.package_info_output is not None:
		key, sep, value = args.package_info_output.partition("=")
		if not sep:
			raise WrapperError(
				reason_code=ARGS_INVALID,
				message=f"`--package_info_output` must be <crate_name>=<path>, got: {args.package_info_output}",
			)
		crate_name = key
		package_info_path = Path(value)

	if args.deps_info is not None:
		for flag in load_dependency_extern_paths(args.deps_info):
			extra_args.append(f"--prost_opt=extern_path={flag}")

	if args.protoc is None:
		raise WrapperError(
			reason_code=ARGS_INVALID,
			message="No `--protoc` value was found. Unable to parse path to proto compiler.",
		)
	if args.out_dir is None:
		raise WrapperError(
			reason_code=ARGS_INVALID,
			message="No `--prost_out` value was found. Unable to parse output directory.",
		)
	if crate_name is None:
		raise WrapperError(
			reason_code=ARGS_INVALID,
			message="No `--package_info_output` value was found. Unable to parse target crate name.",
		)
	if package_info_path is None:
		raise WrapperError(
			reason_code=ARGS_INVALID,
			message="No `--package_info_output` value was found. Unable to parse package info output file.",
		)
	if args.out_librs is None:
		raise WrapperError(
			reason_code=ARGS_INVALID,
			message=(
				"No `--out_librs` value was found. "
				"Unable to parse the output location for all combined prost outputs."
			),
		)

	return WrapperOptions(
		protoc=args.protoc,
		out_dir=args.out_dir,
		crate_name=crate_name,
		package_info_path=package_info_path,
		lib_path=args.out_librs,
		proto_files=proto_files,
		includes=list(args.includes),
		proto_paths=list(args.proto_paths),
		rustfmt=args.rustfmt,
		service_enabled=bool(args.is_tonic),
		extra_args=extra_args,
	)


def main(argv: list[str] | None = None, runner: ProcessRunner = run_process) -> int:
	p = _build_parser()
	args, rest = p.parse_known_args(argv)

	try:
		opts = build_options(args, rest)
	except WrapperError as err:
		if err.reason_code == ARGS_INVALID:
			p.error(str(err))
		print(f"protowrap: {err.format_human()}", file=sys.stderr)
		return 2

	report = run_wrapper(opts, runner)
	if args.json:
		print(json.dumps(report.to_dict(), sort_keys=True, separators=(",", ":")))
		return 0 if report.ok else 2
	if report.ok:
		return 0
	for err in report.errors:
		print(f"protowrap: {err.format_human()}", file=sys.stderr)
	return 2
