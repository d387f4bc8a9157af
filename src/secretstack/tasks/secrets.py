"""Secrets pipeline tasks.

Task definitions that load the project configuration, run the orchestrator and
report failures with built-in guidance."""

import sys
import traceback

from invoke import task

from secretstack.exceptions import SecretStackError

EXIT_FAILURE = 3


def _handle_error(e: SecretStackError, verbose: bool = False):
    """Print the error message, its guidance (and the traceback when verbose) and exit with code 3."""
    print(f"Error: {e}", file=sys.stderr)
    print(e.guidance, file=sys.stderr)
    if verbose:
        traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
    sys.exit(EXIT_FAILURE)


def _create_orchestrator(config, verbose):
    from secretstack.config.loading import load_project
    from secretstack.config.logging import bootstrap_logging
    from secretstack.orchestrator import SecretsOrchestrator

    bootstrap_logging(verbose=verbose)
    loaded = load_project(config)
    orchestrator = SecretsOrchestrator.create(loaded.project, effect_options=loaded.effect_options)
    return loaded, orchestrator


@task(help={
    'config': 'Path to secretstack.yaml (default: ./secretstack.yaml or ./config/secretstack.yaml)',
    'verbose': 'Enable debug logging and print tracebacks on failure'
})
def validate(ctx, config=None, verbose=False):
    """
    Resolve every secret and check that its connector can load it.

    Examples:
        secretstack secrets.validate
        secretstack secrets.validate --config=deploy/secretstack.yaml --verbose
    """
    try:
        _, orchestrator = _create_orchestrator(config, verbose)
        orchestrator.validate()
    except SecretStackError as e:
        _handle_error(e, verbose)

    print("✅ All secrets validated successfully")


@task(help={
    'config': 'Path to secretstack.yaml (default: ./secretstack.yaml or ./config/secretstack.yaml)',
    'verbose': 'Enable debug logging and print tracebacks on failure',
    'dry_run': 'Show the (censored) artifacts instead of applying them'
})
def apply(ctx, config=None, verbose=False, dry_run=False):
    """
    Prepare, merge and apply every secret artifact with kubectl.

    Examples:
        secretstack secrets.apply
        secretstack secrets.apply --dry-run
    """
    from secretstack.executor import KubectlExecutor

    try:
        loaded, orchestrator = _create_orchestrator(config, verbose)
        executor = KubectlExecutor(kubectl_path=loaded.cli_config.kubectl, dry_run=dry_run)
        artifacts = orchestrator.apply(executor)
    except SecretStackError as e:
        _handle_error(e, verbose)

    if not artifacts:
        print("⚠️  No secrets to apply", file=sys.stderr)
        return

    action = "Would apply" if dry_run else "Applied"
    for artifact in artifacts:
        print(f"✅ {action} {artifact.target_identity}")
