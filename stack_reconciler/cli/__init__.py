"""Main CLI application module.

Command Groups:
- apply: deploy a porter.yaml stack to a cluster
- db: database bootstrap and migrations
- serve: run the HTTP API
"""

import typer

from .commands import apply, db_app, serve

# Create the main CLI application
app = typer.Typer(
    help="Stack Reconciler CLI - deploy porter.yaml stacks with Helm",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("apply")(apply)
app.command("serve")(serve)
app.add_typer(db_app, name="db")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
