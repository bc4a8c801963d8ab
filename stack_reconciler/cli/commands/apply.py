"""Deploy a porter.yaml stack from the command line."""

from pathlib import Path
from typing import Annotated

import typer

from stack_reconciler.app.core.reconciler import (
    DeployRequest,
    FieldPatch,
    JobReleaseAction,
)
from stack_reconciler.cli.context import get_cli_context
from stack_reconciler.cli.shared.console import with_error_handling


@with_error_handling
def apply(
    ctx: typer.Context,
    project: Annotated[int, typer.Option("--project", "-p", help="Project ID")],
    cluster: Annotated[int, typer.Option("--cluster", "-c", help="Cluster ID")],
    name: Annotated[str, typer.Option("--name", "-n", help="Stack name")],
    file: Annotated[
        Path,
        typer.Option(
            "--file",
            "-f",
            exists=True,
            dir_okay=False,
            readable=True,
            help="Path to porter.yaml",
        ),
    ] = Path("porter.yaml"),
    image: Annotated[
        str,
        typer.Option("--image", "-i", help="Built image (repository:tag)"),
    ] = "",
    override_release: Annotated[
        bool,
        typer.Option(
            "--override-release",
            help="Discard prior values and manage the release job",
        ),
    ] = False,
    builder: Annotated[
        str | None,
        typer.Option(
            "--builder",
            help="Image builder (e.g. heroku/buildpacks:20); \"null\" clears it",
        ),
    ] = None,
) -> None:
    """Create or update a stack from a porter.yaml manifest."""
    cli = get_cli_context(ctx)
    console = cli.console
    store = cli.deps.store
    reconciler = cli.deps.reconciler

    cluster_row = store.get_cluster(cluster)
    if cluster_row is None or cluster_row.project_id != project:
        console.handle_error(f"Cluster {cluster} not found in project {project}")
        return
    reconciler.validate_stack_name(name)
    target = cluster_row.to_target()
    console.print_header(f"Applying stack {name}")

    existing = reconciler.prober.probe(target, name)
    if existing is None:
        console.warn(f"Could not read release for stack {name}: attempting creation")
    else:
        console.info(f"Found release for stack {name}: attempting update")

    request = DeployRequest(
        stack_name=name,
        project_id=project,
        porter_yaml=file.read_bytes(),
        build_image=image,
        override_release=override_release,
        patches={
            "builder": (
                FieldPatch.unset() if builder is None else FieldPatch.from_input(builder)
            ),
            "porter_yaml_path": FieldPatch.set(str(file)),
        },
    )

    with console.status(f"Reconciling stack {name}..."):
        result = reconciler.reconcile(request, target)

    verb = "Created" if result.created else "Updated"
    console.ok(f"{verb} stack {name} (revision {result.event.revision})")
    if result.job_action is not JobReleaseAction.NONE:
        console.info(f"Release job: {result.job_action.value}")
