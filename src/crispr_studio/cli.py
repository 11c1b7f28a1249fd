#!/usr/bin/env python3
"""CRISPR studio CLI for inspecting experiments."""

import argparse
import uuid

import questionary
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from crispr_studio.experiment import ExperimentService, ExperimentTree, Shape
from crispr_studio.experiment.export import export_experiment
from crispr_studio.logging_setup import configure_logging

console = Console()


def _score(value) -> str:
    return f"{float(value):.3f}" if value is not None else "-"


def select_experiment(service: ExperimentService, user_id) -> dict | None:
    """Prompt the user to select one of their experiments."""
    experiments = service.list_experiments(user_id)
    if not experiments:
        console.print("[red]No experiments found.[/]")
        return None
    return questionary.select(
        "Select an experiment:",
        choices=[
            questionary.Choice(title=f"{r['name']} ({r['status']})", value=r) for r in experiments
        ],
    ).ask()


def build_tree(tree: ExperimentTree) -> Tree:
    """Render an assembled experiment as a rich tree."""
    experiment = tree.experiment
    root = Tree(f"[bold]{experiment['name']}[/] [dim]{experiment['status']}[/]")
    if tree.shape is Shape.SHALLOW:
        return root

    for sequence in tree.sequences:
        branch = root.add(f"[cyan]{sequence['name']}[/] [dim]{sequence['id']}[/]")
        if tree.shape is Shape.WITH_SEQUENCES:
            continue
        for guide in tree.guides_for(sequence["id"]):
            guide_branch = branch.add(
                f"[green]{guide['guide_sequence']}[/] efficiency={_score(guide['efficiency_score'])}"
            )
            for site in tree.off_targets_for(guide["id"]):
                guide_branch.add(
                    f"{site['sequence']} {site.get('chromosome') or '?'}:{site.get('position') or '?'} "
                    f"binding={_score(site['binding_score'])}"
                )
    return root


def list_command(service: ExperimentService, args) -> None:
    experiments = service.list_experiments(args.user, status=args.status, limit=args.limit)
    if not experiments:
        console.print("[red]No experiments found.[/]")
        return

    table = Table("ID", "Name", "Type", "Status", "Updated")
    for r in experiments:
        table.add_row(
            str(r["id"]),
            r["name"],
            r.get("experiment_type") or "",
            r.get("status") or "",
            str(r.get("updated_at") or ""),
        )
    console.print(table)


def show_command(service: ExperimentService, args) -> None:
    experiment_id = args.experiment
    if experiment_id is None:
        selected = select_experiment(service, args.user)
        # User pressed Ctrl+C or Escape
        if selected is None:
            console.print("[dim]Cancelled.[/]")
            return
        experiment_id = selected["id"]

    tree = service.aggregate(experiment_id, args.user, shape=args.shape)
    if tree is None:
        console.print(f"[red]Experiment {experiment_id} not found.[/]")
        return

    console.print(build_tree(tree))
    if tree.shape is Shape.FULL:
        console.print(f"[dim]{tree.leaf_count} off-target site(s)[/]")


def export_command(service: ExperimentService, args) -> None:
    try:
        result = export_experiment(service, args.experiment, args.user)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return
    console.print(f"[green]Exported {result['rows']} rows to {result['path']}.[/]")


def main(argv: list[str] = None):
    parser = argparse.ArgumentParser(description="CRISPR studio CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List your experiments")
    list_parser.add_argument("--user", type=uuid.UUID, required=True)
    list_parser.add_argument("--status")
    list_parser.add_argument("--limit", type=int)

    show_parser = subparsers.add_parser("show", help="Show an experiment tree")
    show_parser.add_argument("--user", type=uuid.UUID, required=True)
    show_parser.add_argument("--experiment", type=uuid.UUID)
    show_parser.add_argument(
        "--shape", choices=[shape.value for shape in Shape], default=Shape.FULL.value
    )

    export_parser = subparsers.add_parser("export", help="Export an experiment to CSV")
    export_parser.add_argument("--user", type=uuid.UUID, required=True)
    export_parser.add_argument("--experiment", type=uuid.UUID, required=True)

    args = parser.parse_args(argv)

    configure_logging()
    service = ExperimentService()

    if args.command == "list":
        list_command(service, args)
    elif args.command == "show":
        show_command(service, args)
    elif args.command == "export":
        export_command(service, args)


if __name__ == "__main__":
    main()
