# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv and install apwatch with test and dev extras."""
    ctx.run("uv venv")
    ctx.run("uv pip install -e '.[test,dev]'")


@task
def clean(ctx):
    """Remove build output, caches and coverage data."""
    ctx.run(
        "rm -rf dist build .pytest_cache .mypy_cache .ruff_cache .coverage htmlcov"
    )
    ctx.run("find . -name __pycache__ -type d -prune -exec rm -rf {} +")


@task
def lint(ctx):
    """Check style and types."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run tests with coverage information."""
    ctx.run("pytest --cov=apwatch --cov-report=term-missing", pty=True)


@task
def build_package(ctx):
    """Build sdist and wheel."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")
