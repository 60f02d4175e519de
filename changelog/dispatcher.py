"""
Command resolution pipeline.

Finds a command on PATH, follows its symlinks to the real install location,
decides which ecosystem put it there and asks that ecosystem's probe for the
package and repository.
"""

from .classifier import classify, ambiguous_default_from_config
from .config import logger, load_config
from .domain import DispatchResult, ProbeFailure
from .probes import run_probe
from .utils import locate_command


async def resolve(command: str, *, config=None) -> DispatchResult:
    """
    Resolve a command name to its package and GitHub repository.

    Args:
        command: Command name as the user would type it
        config: Loaded configuration (loaded on demand if omitted)

    Returns:
        DispatchResult; failures are reported in `error` and `failure`

    Raises:
        ConfigError: classifier.ambiguous_default is not a known ecosystem
    """
    if config is None:
        config = load_config()

    located = locate_command(command)
    if located is None:
        return DispatchResult(
            package_name=command,
            error=f"Command not found: {command}",
            failure=ProbeFailure.COMMAND_NOT_FOUND,
        )

    if located.resolved_path != located.bin_path:
        logger.debug(f"{located.bin_path} resolves to {located.resolved_path}")

    ecosystem = classify(located.resolved_path, ambiguous_default_from_config(config))
    if ecosystem is None:
        return DispatchResult(
            package_name=command,
            error=f"Could not determine package manager for: {located.bin_path}",
            failure=ProbeFailure.UNCLASSIFIED,
            bin_path=located.bin_path,
            resolved_path=located.resolved_path,
        )

    logger.debug(f"{command}: {ecosystem.value} install at {located.resolved_path}")
    result = await run_probe(ecosystem, command, located.resolved_path, config=config)
    return DispatchResult.from_probe(result, ecosystem, located)
