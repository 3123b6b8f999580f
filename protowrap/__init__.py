# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
protowrap: protoc post-processing for prost/tonic crates.

Modules:
  fragments: discover protoc outputs and load them per package
  reconcile: merge message and service outputs into one fragment per package
  module_tree / writer: nest fragments into modules and render one crate root
  symbols: compute extern paths from protoc's symbol listing
  pipeline / cli: orchestration and the command line

The CLI entrypoint is `protowrap.cli:main`.
"""

__all__ = ["fragments", "reconcile", "module_tree", "writer", "symbols", "pipeline", "cli"]
