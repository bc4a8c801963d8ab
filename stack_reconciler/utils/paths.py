from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Directory holding pyproject.toml, alembic.ini and config.yaml.

    Falls back to the parent of the package directory when the package runs
    from an installed location without a pyproject.toml above it.
    """
    for candidate in PACKAGE_DIR.parents:
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return PACKAGE_DIR.parent
