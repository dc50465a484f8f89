"""Rich rendering of delta manifests."""

from typing import Dict, List, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from tardelta.schemas import DiffManifest

console = Console()

# change type -> (style, summary prefix, verbose heading)
CHANGE_STYLES: Dict[str, Tuple[str, str, str]] = {
    "added": ("green", "+", "Added"),
    "changed": ("yellow", "~", "Changed"),
    "removed": ("red", "-", "Removed"),
}


def _change_groups(manifest: DiffManifest) -> List[Tuple[str, List[str]]]:
    return [
        ("added", manifest.added),
        ("changed", manifest.changed),
        ("removed", manifest.removed),
    ]


def add_files_to_tree(tree: Tree, paths: List[str], style: str) -> None:
    """Add files to tree, grouped by top-level directory."""
    by_dir: Dict[str, List[str]] = {}
    for path in sorted(paths):
        parts = path.split("/", 1)
        dir_name = parts[0] if len(parts) > 1 else ""
        file_name = parts[1] if len(parts) > 1 else parts[0]
        by_dir.setdefault(dir_name, []).append(file_name)

    for dir_name, files in sorted(by_dir.items()):
        branch = tree.add(f"[bold]{dir_name}/[/bold]") if dir_name else tree
        for file_name in files:
            branch.add(f"[{style}]{file_name}[/{style}]")


def display_changes(title: str, manifest: DiffManifest, verbose: bool = False) -> None:
    """Display a manifest as a tree, summarized per directory or listing every path."""
    tree = Tree(title)

    if manifest.is_empty:
        tree.add("No changes")
        console.print(Panel(tree, expand=False))
        return

    if not verbose:
        by_dir: Dict[str, Dict[str, int]] = {}
        for change_type, paths in _change_groups(manifest):
            for path in paths:
                dir_name = path.split("/", 1)[0] if "/" in path else "."
                counts = by_dir.setdefault(dir_name, {"added": 0, "changed": 0, "removed": 0})
                counts[change_type] += 1

        for dir_name, counts in sorted(by_dir.items()):
            summary_parts = []
            for change_type, count in counts.items():
                if count:
                    style, prefix, _ = CHANGE_STYLES[change_type]
                    summary_parts.append(f"[{style}]{prefix}{count} {change_type}[/{style}]")
            tree.add(f"[bold]{dir_name}/[/bold] {' '.join(summary_parts)}")
    else:
        summary = []
        for change_type, paths in _change_groups(manifest):
            if paths:
                style = CHANGE_STYLES[change_type][0]
                summary.append(f"[{style}]{len(paths)} {change_type}[/{style}]")
        tree.add(f"Found {', '.join(summary)}")

        for change_type, paths in _change_groups(manifest):
            if paths:
                style, _, heading = CHANGE_STYLES[change_type]
                branch = tree.add(f"[{style}]{heading}[/{style}]")
                add_files_to_tree(branch, paths, style)

    console.print(Panel(tree, expand=False))
