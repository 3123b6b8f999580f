# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render a module tree into a single Rust source text.

For a proto file declaring `package examples.prost.helloworld;` the output
looks like (no formatting is applied here; a formatter may run afterwards):

	// @generated

	  pub mod examples {
	    pub mod prost {
	      pub mod helloworld {
	// @generated
	pub struct HelloRequest { ... }
	      }
	    }
	  }

Fragment content is copied verbatim: no escaping, no parsing.
"""

from __future__ import annotations

from protowrap.module_tree import ModuleNode, NodeScope

GENERATED_HEADER = "// @generated\n\n"
INDENT = "  "


def render_module_tree(root: ModuleNode) -> str:
	"""Serialize `root` depth-first (pre-order), children in sorted key order."""
	out: list[str] = [GENERATED_HEADER]
	for key in sorted(root.children):
		_write_module(out, root.children[key], depth=1)
	return "".join(out)


def _write_module(out: list[str], node: ModuleNode, *, depth: int) -> None:
	scoped = node.scope is NodeScope.SCOPED
	indent = INDENT * depth
	if scoped:
		out.append(f"{indent}pub mod {node.name} {{\n")
	out.append(node.content)
	for key in sorted(node.children):
		_write_module(out, node.children[key], depth=depth + 1)
	if scoped:
		out.append(f"{indent}}}\n")
