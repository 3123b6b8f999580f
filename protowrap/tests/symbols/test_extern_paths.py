# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from protowrap.errors import DUPLICATE_SYMBOL, LISTING_MALFORMED, WrapperError
from protowrap.symbols import (
	SymbolEntry,
	load_dependency_extern_paths,
	parse_listing,
	parse_listing_line,
	render_extern_paths,
	resolve_extern_paths,
)

# `protoc --print_free_field_numbers` on google/protobuf/descriptor.proto (v23.3).
DESCRIPTOR_LISTING = """
google.protobuf.FileDescriptorSet   free: 2-INF
google.protobuf.FileDescriptorProto free: 13-INF
google.protobuf.DescriptorProto.ExtensionRange free: 4-INF
google.protobuf.DescriptorProto.ReservedRange free: 3-INF
google.protobuf.DescriptorProto     free: 11-INF
"""


def test_descriptor_listing_resolves_to_crate_paths() -> None:
	paths = resolve_extern_paths({Path("/tmp/google/protobuf/descriptor.proto"): DESCRIPTOR_LISTING}, "crate_name")

	assert [str(p) for p in paths] == [
		".google.protobuf.DescriptorProto.ExtensionRange=crate_name::google::protobuf::DescriptorProto::ExtensionRange",
		".google.protobuf.DescriptorProto.ReservedRange=crate_name::google::protobuf::DescriptorProto::ReservedRange",
		".google.protobuf.DescriptorProto=crate_name::google::protobuf::DescriptorProto",
		".google.protobuf.FileDescriptorProto=crate_name::google::protobuf::FileDescriptorProto",
		".google.protobuf.FileDescriptorSet=crate_name::google::protobuf::FileDescriptorSet",
	]


def test_single_line_mapping() -> None:
	entry = parse_listing_line("google.protobuf.FileDescriptorProto free: 13-INF")
	ext = entry.extern_path("crate_name")

	assert entry.package == "google.protobuf"
	assert entry.local_name == "FileDescriptorProto"
	assert entry.trailer == "free: 13-INF"
	assert ext.source_key == ".google.protobuf.FileDescriptorProto"
	assert ext.target_path == "crate_name::google::protobuf::FileDescriptorProto"


def test_nested_message_mapping() -> None:
	ext = parse_listing_line("google.protobuf.DescriptorProto.ExtensionRange free: 4-INF").extern_path("crate_name")

	assert str(ext) == (
		".google.protobuf.DescriptorProto.ExtensionRange"
		"=crate_name::google::protobuf::DescriptorProto::ExtensionRange"
	)


def test_symbol_without_package_maps_directly_under_crate() -> None:
	entry = parse_listing_line("TopLevel\tfree: 1-INF")

	assert entry.package == ""
	assert entry.local_name == "TopLevel"
	assert str(entry.extern_path("my_crate")) == ".TopLevel=my_crate::TopLevel"


def test_blank_lines_are_skipped() -> None:
	entries = parse_listing("\n   \na.B free: 1-INF\n\n")

	assert entries == [SymbolEntry(absolute_name="a.B", trailer="free: 1-INF")]


@pytest.mark.parametrize("line", ["a.b.NoTrailer", "free: 2-INF", "a..B free: 1-INF", ".a.B free: 1"])
def test_malformed_line_is_fatal(line: str) -> None:
	with pytest.raises(WrapperError) as excinfo:
		parse_listing(line + "\n", origin="x.proto")

	assert excinfo.value.reason_code == LISTING_MALFORMED
	assert excinfo.value.line == line
	assert excinfo.value.path == "x.proto"


def test_duplicate_symbol_across_files_is_fatal() -> None:
	listings = {
		Path("a.proto"): "pkg.Shared free: 2-INF\npkg.OnlyA free: 1-INF\n",
		Path("b.proto"): "pkg.Shared free: 2-INF\n",
	}

	with pytest.raises(WrapperError) as excinfo:
		resolve_extern_paths(listings, "crate_name")

	err = excinfo.value
	assert err.reason_code == DUPLICATE_SYMBOL
	assert err.symbol == ".pkg.Shared"
	assert "a.proto" in err.message and "b.proto" in err.message


def test_render_joins_sorted_entries_without_trailing_newline() -> None:
	paths = resolve_extern_paths({"b.proto": "z.Z free: 1\n", "a.proto": "a.A free: 1\n"}, "c")

	assert render_extern_paths(paths) == ".a.A=c::a::A\n.z.Z=c::z::Z"
	assert render_extern_paths([]) == ""


def test_load_dependency_extern_paths(tmp_path: Path) -> None:
	dep_a = tmp_path / "a.package_info"
	dep_b = tmp_path / "b.package_info"
	dep_a.write_text(".a.A=dep_a::a::A\n.a.B=dep_a::a::B", encoding="utf-8")
	dep_b.write_text("\n.b.C=dep_b::b::C\n", encoding="utf-8")
	deps_info = tmp_path / "deps_info"
	deps_info.write_text(f"{dep_a}\n{dep_b}\n\n", encoding="utf-8")

	assert load_dependency_extern_paths(deps_info) == [
		".a.A=dep_a::a::A",
		".a.B=dep_a::a::B",
		".b.C=dep_b::b::C",
	]


def test_load_dependency_extern_paths_missing_file_is_io_error(tmp_path: Path) -> None:
	deps_info = tmp_path / "deps_info"
	deps_info.write_text(str(tmp_path / "missing.package_info") + "\n", encoding="utf-8")

	with pytest.raises(WrapperError) as excinfo:
		load_dependency_extern_paths(deps_info)

	assert excinfo.value.reason_code == "IO_ERROR"
	assert excinfo.value.path == str(tmp_path / "missing.package_info")
