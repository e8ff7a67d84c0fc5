import click
import functools
import logging
import traceback
import yaml

from .config import Config, load_yaml_document
from .datacls import PodSpec, load_context, unwrap_manifest
from .exceptions import (
    CBIStageError,
    ConfigurationError,
    DefinitionError,
    PodSpecDefinitionError,
    StagingError,
)
from .planner import ContextPlanner
from .registry import strategy_registry
from .utils import setup_logger, parse_levels
from . import constants
from . import __version__

logger = logging.getLogger(__name__)


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    module_levels = parse_levels(log_levels) if log_levels else None
    setup_logger(debug=debug, module_levels=module_levels, log_file=log_file)


def handle_errors(func):
    """Decorator to turn application errors into a log line and a non-zero exit"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _report("Configuration error", e)
        except DefinitionError as e:
            _report("Definition error", e)
        except StagingError as e:
            _report("Staging error", e)
        except CBIStageError as e:
            _report("An unexpected application error occurred", e)
    return wrapper


def _report(what: str, error: Exception):
    logging.error(f"{what}: {error}")
    ctx = click.get_current_context()
    if ctx.obj and ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


@handle_errors
def do_plan(job_file: str, pod_file: str, config_file: str, index: int, env_var: str, output: str):
    """Execute plan command"""
    config = Config(config_file)
    if index is None:
        index = config.target_container
    if env_var is None:
        env_var = config.context_env

    context = load_context(load_yaml_document(job_file, "BuildJob manifest"))
    pod_manifest = load_yaml_document(pod_file, "Pod manifest")
    if not isinstance(pod_manifest, dict):
        raise PodSpecDefinitionError(f"Pod manifest '{pod_file}' must contain a mapping.")
    _, embed = unwrap_manifest(pod_manifest)
    pod_spec = PodSpec.from_manifest(pod_manifest)

    planner = ContextPlanner(config.helper)
    path = planner.plan(context, pod_spec, index, env_var=env_var)
    rendered = yaml.safe_dump(embed(pod_spec.to_manifest()), sort_keys=False)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(rendered)
        logging.info(f"Augmented manifest written to '{output}'.")
    else:
        click.echo(rendered, nl=False)
    logging.info(f"Context path: {path}")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'plan=DEBUG,path=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.version_option(version=__version__, prog_name='cbistage')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """CBI Stage - Stage build contexts into execution pod specs

    \b
    Examples:
      cbistage plan job.yml pod.yml            Print the augmented pod manifest
      cbistage plan job.yml pod.yml -i 1 -e CBI_CONTEXT -o out.yml
      cbistage kinds                           List supported context kinds
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logging(debug, log_levels, log_file)


@cli.command()
@click.argument('job_file', type=click.Path(dir_okay=False))
@click.argument('pod_file', type=click.Path(dir_okay=False))
@click.option('-c', '--config', 'config_file', type=click.Path(dir_okay=False), help='Stager config file')
@click.option('-i', '--index', type=int, default=None, help='Index of the container consuming the context (default: from config, else 0)')
@click.option('-e', '--env', 'env_var', default=None, help='Export the context path to the target container under this variable')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Write the augmented manifest here instead of stdout')
def plan(job_file, pod_file, config_file, index, env_var, output):
    """Stage the context of JOB_FILE into the pod of POD_FILE

    \b
    JOB_FILE is a BuildJob manifest or a bare context, e.g.
      kind: Git
      git: {url: https://github.com/example/app.git, revision: main}
    POD_FILE is a Pod, PodTemplate, Job or bare pod spec manifest.
    """
    do_plan(job_file, pod_file, config_file, index, env_var, output)


@cli.command()
def kinds():
    """List supported context kinds and their plugin labels"""
    for kind in sorted(strategy_registry.get_supports()):
        strategy = strategy_registry.strategy(kind)
        label = constants.CONTEXT_LABELS[constants.ContextKind(kind)]
        click.echo(f"{kind:<12} {label:<20} {strategy.__name__}")


if __name__ == '__main__':
    cli()
