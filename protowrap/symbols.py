# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Extern path resolution.

protoc's `--print_free_field_numbers` lists every message type declared by a
proto file, one absolute name per line. That listing is used as the
authoritative symbol inventory: each symbol maps to an `--extern_path` entry
so dependent crates can refer to it by its fully qualified Rust path:

	.google.protobuf.FileDescriptorProto=crate_name::google::protobuf::FileDescriptorProto

A symbol declared twice across the inputs of one target cannot be
disambiguated and is a fatal error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from lark import Lark, UnexpectedInput

from protowrap.errors import DUPLICATE_SYMBOL, LISTING_MALFORMED, WrapperError, io_error

_GRAMMAR_PATH = Path(__file__).with_name("listing.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

# The trailer terminal overlaps NAME, so the contextual lexer is required.
_LINE_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="entry",
	maybe_placeholders=False,
)

PATH_SEPARATOR = "::"


@dataclass(frozen=True)
class ExternPath:
	source_key: str  # ".pkg.Type"
	target_path: str  # "crate::pkg::Type"

	def __str__(self) -> str:
		return f"{self.source_key}={self.target_path}"


@dataclass(frozen=True)
class SymbolEntry:
	"""One declared type as reported by the listing."""

	absolute_name: str
	trailer: str = ""
	origin: str | None = None  # proto file whose listing declared it

	@property
	def package(self) -> str:
		package, _sep, _local = self.absolute_name.rpartition(".")
		return package

	@property
	def local_name(self) -> str:
		return self.absolute_name.rpartition(".")[2]

	def extern_path(self, crate_name: str) -> ExternPath:
		parts = [crate_name]
		if self.package:
			parts.extend(self.package.split("."))
		parts.append(self.local_name)
		return ExternPath(source_key=f".{self.absolute_name}", target_path=PATH_SEPARATOR.join(parts))


def parse_listing_line(line: str, *, origin: str | None = None) -> SymbolEntry:
	"""Parse one non-blank listing line into a `SymbolEntry`."""
	text = line.strip()
	try:
		tree = _LINE_PARSER.parse(text)
	except UnexpectedInput as err:
		raise WrapperError(
			reason_code=LISTING_MALFORMED,
			message="cannot split listing line into a symbol name and trailing info",
			path=origin,
			line=text,
		) from err
	# entry: symbol _WS TRAILER, with _WS filtered out
	symbol_node, trailer = tree.children
	name = ".".join(str(tok) for tok in symbol_node.children)
	return SymbolEntry(absolute_name=name, trailer=str(trailer), origin=origin)


def parse_listing(text: str, *, origin: str | None = None) -> list[SymbolEntry]:
	return [parse_listing_line(line, origin=origin) for line in text.splitlines() if line.strip()]


def resolve_extern_paths(listings: Mapping[Path | str, str], crate_name: str) -> list[ExternPath]:
	"""
	Compute extern paths for every symbol in `listings` (proto file -> listing text).

	Listings are consumed in sorted proto-file order; the result is sorted by
	its rendered `source_key=target_path` text.
	"""
	seen: dict[str, tuple[ExternPath, str | None]] = {}
	for proto_file in sorted(listings, key=str):
		origin = str(proto_file)
		for entry in parse_listing(listings[proto_file], origin=origin):
			ext = entry.extern_path(crate_name)
			prev = seen.get(ext.source_key)
			if prev is not None:
				first_origin = prev[1]
				raise WrapperError(
					reason_code=DUPLICATE_SYMBOL,
					message=f"duplicate extern {ext} (declared by {first_origin} and {origin})",
					path=origin,
					symbol=ext.source_key,
				)
			seen[ext.source_key] = (ext, origin)
	return sorted((ext for ext, _origin in seen.values()), key=str)


def render_extern_paths(paths: list[ExternPath]) -> str:
	return "\n".join(str(p) for p in paths)


def load_dependency_extern_paths(deps_info_path: Path) -> list[str]:
	"""
	Read extern paths published by dependency targets.

	`deps_info_path` lists one dependency package-info file per line; each of
	those holds `source_key=target_path` lines as written by
	`render_extern_paths`.
	"""
	out: list[str] = []
	try:
		dep_files = [line.strip() for line in deps_info_path.read_text(encoding="utf-8").splitlines()]
	except (OSError, UnicodeDecodeError) as err:
		raise io_error("read deps info", deps_info_path, err) from err
	for dep in dep_files:
		if not dep:
			continue
		dep_path = Path(dep)
		try:
			lines = dep_path.read_text(encoding="utf-8").splitlines()
		except (OSError, UnicodeDecodeError) as err:
			raise io_error("read dependency package info", dep_path, err) from err
		out.extend(line.strip() for line in lines if line.strip())
	return out
