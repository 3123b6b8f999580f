# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
External process invocation (protoc, rustfmt).

The pipeline never spawns processes directly: it builds an argv and hands it
to a `ProcessRunner`, so tests can substitute canned results.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from protowrap.errors import PROCESS_FAILED, WrapperError
from protowrap.options import WrapperOptions

RUST_EDITION = "2021"


@dataclass(frozen=True)
class ProcessResult:
	argv: list[str]
	returncode: int
	stdout: str = ""
	stderr: str = ""


ProcessRunner = Callable[[list[str]], ProcessResult]


def run_process(argv: list[str]) -> ProcessResult:
	try:
		proc = subprocess.run(argv, capture_output=True, text=True)
	except OSError as err:
		raise WrapperError(
			reason_code=PROCESS_FAILED,
			message=f"failed to spawn {argv[0]}: {err.strerror or err}",
			argv=list(argv),
		) from err
	return ProcessResult(argv=list(argv), returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def check_process(result: ProcessResult, what: str) -> ProcessResult:
	"""Return `result` unchanged, or raise if the process failed."""
	if result.returncode != 0:
		raise WrapperError(
			reason_code=PROCESS_FAILED,
			message=f"{what} failed with exit code {result.returncode}",
			stderr=result.stderr,
			argv=list(result.argv),
		)
	return result


def protoc_codegen_argv(opts: WrapperOptions) -> list[str]:
	argv = [str(opts.protoc), f"--prost_out={opts.out_dir}"]
	if opts.service_enabled:
		argv.append(f"--tonic_out={opts.out_dir}")
	argv.extend(opts.extra_args)
	argv.extend(f"--proto_path={p}" for p in opts.proto_paths)
	argv.extend(f"-I{inc}" for inc in opts.includes)
	argv.extend(str(p) for p in opts.proto_files)
	return argv


def protoc_listing_argv(opts: WrapperOptions, proto_file: Path) -> list[str]:
	argv = [str(opts.protoc)]
	argv.extend(f"-I{inc}" for inc in opts.includes)
	argv.append("--print_free_field_numbers")
	argv.extend(f"--proto_path={p}" for p in opts.proto_paths)
	argv.append(str(proto_file))
	return argv


def rustfmt_argv(rustfmt: Path, path: Path) -> list[str]:
	return [str(rustfmt), "--edition", RUST_EDITION, "--quiet", str(path)]
