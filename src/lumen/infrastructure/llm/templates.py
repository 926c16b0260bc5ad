"""Prompt template loading."""

from collections.abc import Iterable

from jinja2 import Environment, PackageLoader, StrictUndefined

from lumen.domain.entities import Interaction


def transcript(interactions: Iterable[Interaction]) -> str:
    """Render interactions as ``[role]: text`` lines, oldest first."""
    return "\n".join(interaction.format_line() for interaction in interactions)


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for prompt templates.

    Templates live in the ``templates`` directory of this package. Prompts
    are plain text, so autoescaping is off; a missing variable is an
    error rather than an empty string.

    Returns:
        Configured Jinja2 environment.
    """
    env = Environment(
        loader=PackageLoader("lumen.infrastructure.llm", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["transcript"] = transcript
    return env
