# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module tree: a trie over dotted package segments.

For packages `a.b.c` and `a.d` the tree is:

	<root>
	  a
	    b
	      c   (content of a.b.c)
	    d     (content of a.d)

Intermediate levels (`a`, `a.b`) exist even when no fragment was emitted for
them. The anonymous marker segment (`_`) produces a transparent node: its
content is embedded without a wrapping module.

Child order is not tracked here; the writer sorts on read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping

ANONYMOUS_SEGMENT = "_"


class NodeScope(Enum):
	SCOPED = "scoped"
	TRANSPARENT = "transparent"


@dataclass
class ModuleNode:
	"""One level of the output namespace. The root has `name=None`."""

	name: str | None = None
	scope: NodeScope = NodeScope.SCOPED
	content: str = ""
	children: dict[str, "ModuleNode"] = field(default_factory=dict)

	@property
	def is_root(self) -> bool:
		return self.name is None


def build_module_tree(fragments: Mapping[str, str], *, anonymous_segment: str = ANONYMOUS_SEGMENT) -> ModuleNode:
	"""
	Build the module tree from canonical fragments (package -> content).

	Fragments with an empty package contribute nothing. Each package is
	inserted by a single walk over its segments, creating missing nodes along
	the way; a node created earlier as a pure grouping level keeps its children
	when its own fragment arrives later.
	"""
	root = ModuleNode()
	for package, content in fragments.items():
		if not package:
			continue
		node = root
		for segment in package.split("."):
			child = node.children.get(segment)
			if child is None:
				scope = NodeScope.TRANSPARENT if segment == anonymous_segment else NodeScope.SCOPED
				child = ModuleNode(name=segment, scope=scope)
				node.children[segment] = child
			node = child
		node.content = content
	return root


def iter_module_paths(root: ModuleNode) -> Iterator[tuple[str, ModuleNode]]:
	"""Yield (dotted path, node) for every non-root node, depth-first in sorted order."""
	stack: list[tuple[str, ModuleNode]] = [
		(key, root.children[key]) for key in sorted(root.children, reverse=True)
	]
	while stack:
		path, node = stack.pop()
		yield path, node
		for key in sorted(node.children, reverse=True):
			stack.append((f"{path}.{key}", node.children[key]))
