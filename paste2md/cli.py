"""
Converts pasted plain text into Markdown.
Reads a file or stdin and writes Markdown to stdout or to an output file,
optionally refining the result with a local or OpenAI LLM.
"""

from __future__ import annotations

from pathlib import Path

import click
from .config import ConfigError, build_config
from .filesystem import (
    enforce_size,
    get_max_file_size,
    normalize_output_path,
    read_text_file,
    write_text_atomic,
)
from .formatter import format_text
from .llm import check_connection

__all__ = ["cli"]


def _warn(message: str) -> None:
    click.echo(message, err=True)


@click.command()
@click.version_option(package_name="paste2md")
@click.option("-o", "--output", help="Write Markdown to this file instead of stdout")
@click.option("--enhance/--no-enhance", default=False, help="Refine the output with an LLM")
@click.option("--emojis", is_flag=True, help="Ask the LLM to put emojis in front of headers")
@click.option("--instructions", default="", help="Extra instructions for the LLM")
@click.option(
    "--provider", type=click.Choice(["local", "ollama", "openai"]), help="LLM provider"
)
@click.option("--server-url", help="Ollama server URL")
@click.option("--model", help="LLM model name")
@click.option("--temperature", type=float, help="Sampling temperature (0-2)")
@click.option("--top-p", type=float, help="Nucleus sampling threshold (0-1)")
@click.option("--timeout", type=float, help="LLM request timeout in seconds")
@click.option(
    "--list-models", is_flag=True, help="List the models offered by the LLM server and exit"
)
@click.argument(
    "input_path",
    required=False,
    default="-",
    type=click.Path(allow_dash=True, dir_okay=False),
)
def cli(
    input_path: str = "-",
    output: str | None = None,
    enhance: bool = False,
    emojis: bool = False,
    instructions: str = "",
    provider: str | None = None,
    server_url: str | None = None,
    model: str | None = None,
    temperature: float | None = None,
    top_p: float | None = None,
    timeout: float | None = None,
    list_models: bool = False,
):
    """
    Entry point for converting text into Markdown.

    Args:
        input_path: Text file to convert, or ``-`` for stdin.
        output: Destination file; stdout when omitted.
        enhance: Whether to try the LLM before the built-in converter.
        emojis: Ask the LLM to decorate headers with emojis.
        instructions: Extra free-form instructions for the LLM.
        provider: Override for the LLM provider.
        server_url: Override for the Ollama server URL.
        model: Override for the model name.
        temperature: Override for the sampling temperature.
        top_p: Override for the nucleus sampling threshold.
        timeout: Override for the request timeout in seconds.
        list_models: Print the server's models and exit.

    Returns:
        None.

    Raises:
        click.BadParameter: If configuration values or the output path are invalid.
        click.ClickException: If the input cannot be read, is too large, the
            output cannot be written, or the LLM server is unavailable when
            listing models.

    Examples:
        pbpaste | paste2md
        paste2md notes.txt -o notes.md --enhance --provider openai
    """
    search_path = Path.cwd() if input_path == "-" else Path(input_path).expanduser().parent
    try:
        config = build_config(
            search_path,
            interactive_local=True,
            provider=provider,
            server_url=server_url,
            selected_model=model,
            temperature=temperature,
            top_p=top_p,
            timeout=timeout,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    if list_models:
        status = check_connection(config)
        if not status.available:
            raise click.ClickException(status.error or "LLM server unavailable")
        for name in status.models:
            marker = "*" if name == status.selected_model else " "
            click.echo(f"{marker} {name}")
        return

    if (emojis or instructions) and not enhance:
        _warn("Warning: --emojis and --instructions only apply with --enhance.")

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        if input_path == "-":
            text = click.get_text_stream("stdin").read()
            enforce_size(len(text.encode("UTF-8")), max_file_size, "stdin")
        else:
            text = read_text_file(Path(input_path).expanduser(), max_file_size)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    result = format_text(
        text,
        config,
        enhance=enhance,
        add_emojis=emojis,
        custom_instructions=instructions,
        warn=_warn,
    )

    # Writes to file
    if output is not None:
        try:
            destination = normalize_output_path(output)
        except ValueError as error:
            raise click.BadParameter(str(error)) from error
        try:
            write_text_atomic(destination, result.markdown + "\n")
        except IOError as error:
            raise click.ClickException(str(error)) from error
    # Prints to stdout
    else:
        click.echo(result.markdown)


if __name__ == "__main__":
    cli()
