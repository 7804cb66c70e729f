# SPDX-License-Identifier: MIT
"""Mermaid diagram generator for dependency visualization.

Generates Mermaid flowchart syntax showing which grammar files each
project is generated from. Output can be rendered in GitHub markdown,
documentation tools, or the Mermaid live editor (https://mermaid.live).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from makemake.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from makemake.core.project import AggregateIndex


class MermaidGenerator(BaseGenerator):
    """Generator that produces Mermaid flowchart diagrams.

    Example output:
        ```mermaid
        flowchart LR
          json[[json]]
          grammars_v4_json_JSON_g4(JSON.g4)
          grammars_v4_json_JSON_g4 --> json
        ```

    With show_files, the generated Go files are drawn between the
    grammars and the project.
    """

    def __init__(self, *, show_files: bool = False, direction: str = "LR") -> None:
        """Initialize the Mermaid generator.

        Args:
            show_files: If True, show generated files as well.
            direction: Graph direction - "LR" (left-right), "TB" (top-bottom),
                      "RL" (right-left), or "BT" (bottom-top).
        """
        super().__init__("mermaid")
        self._show_files = show_files
        self._direction = direction

    def render(self, index: AggregateIndex) -> str:
        lines = ["---", "title: Grammar Dependencies", "---"]
        lines.append(f"flowchart {self._direction}")

        if not index.projects:
            lines.append("  empty[No grammars]")
            return "\n".join(lines) + "\n"

        written: set[str] = set()
        edges: list[str] = []

        def node(node_id: str, text: str) -> None:
            if node_id not in written:
                lines.append(f"  {node_id}{text}")
                written.add(node_id)

        for name in index.names():
            project = index.projects[name]
            project_id = self._sanitize_id(name)
            node(project_id, f"[[{name}]]")

            for source in project.dependencies():
                source_id = self._sanitize_id(source.as_posix())
                node(source_id, f"({source.name})")
                if self._show_files:
                    for generated in index.generated_files[name]:
                        edges.append(
                            f"  {source_id} --> {self._sanitize_id(generated)}"
                        )
                else:
                    edges.append(f"  {source_id} --> {project_id}")

            if self._show_files:
                for generated in index.generated_files[name]:
                    generated_id = self._sanitize_id(generated)
                    node(generated_id, f"[{generated.rsplit('/', 1)[-1]}]")
                    edges.append(f"  {generated_id} --> {project_id}")

        lines.append("")
        lines.extend(edges)
        return "\n".join(lines) + "\n"

    def _sanitize_id(self, name: str) -> str:
        """Sanitize a name for use as a Mermaid node ID."""
        # Replace problematic characters
        result = name.replace("/", "_").replace("\\", "_")
        result = result.replace(".", "_").replace("-", "_")
        result = result.replace(" ", "_").replace(":", "_")
        # Ensure it starts with a letter
        if result and result[0].isdigit():
            result = "n" + result
        return result
