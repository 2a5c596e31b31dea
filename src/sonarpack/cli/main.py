"""CLI entry point - Click commands for sonarpack."""

from __future__ import annotations

import dataclasses
import logging
import sys
import tempfile
from pathlib import Path
from typing import NoReturn

import click

from sonarpack import __version__
from sonarpack.build.jdk import JdkWrapper
from sonarpack.build.plugin import PluginBuilder
from sonarpack.cli._loader import load_analyzers
from sonarpack.cli._output import format_rules_json, format_rules_text
from sonarpack.core.config import SonarpackConfig, load_config
from sonarpack.core.descriptor import Analyzer
from sonarpack.core.errors import CompilerError, ConfigError, JdkNotFoundError, LoadError
from sonarpack.rules import RuleGenerator, to_xml, write_rules

logger = logging.getLogger("sonarpack")

_config_option = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to .sonarpack.toml or pyproject.toml config file.",
)


def _fail(message: str, code: int) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def _load_config(config_path: str | None) -> SonarpackConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        _fail(f"invalid config: {exc}", 2)


def _load_all(targets: tuple[str, ...]) -> list[Analyzer]:
    analyzers: list[Analyzer] = []
    for target in targets:
        try:
            analyzers.extend(load_analyzers(target))
        except LoadError as exc:
            _fail(str(exc), 2)
    return analyzers


def _key_value(pairs: tuple[str, ...], option: str) -> list[tuple[str, str]]:
    parsed: list[tuple[str, str]] = []
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option)
        parsed.append((key.strip(), value))
    return parsed


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", message="sonarpack %(version)s")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
def cli(verbose: bool, quiet: bool) -> None:
    """sonarpack - SonarQube rule and plugin packager."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)
    logger.setLevel(level)


@cli.command()
@click.argument("analyzers", nargs=-1, required=True)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json", "xml"]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@_config_option
def rules(analyzers: tuple[str, ...], fmt: str, no_color: bool, config_path: str | None) -> None:
    """List the rules generated from ANALYZERS (module:attribute)."""
    config = _load_config(config_path)
    generator = RuleGenerator(logger, cardinality=config.cardinality, status=config.status)
    generated = list(generator.generate_rules(_load_all(analyzers)))

    if fmt == "json":
        click.echo(format_rules_json(generated))
    elif fmt == "xml":
        click.echo(to_xml(generated), nl=False)
    else:
        click.echo(format_rules_text(generated, no_color=no_color))


@cli.command()
@click.argument("analyzers", nargs=-1, required=True)
@click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(dir_okay=False, writable=True),
    help="Where to write rules.xml.",
)
@_config_option
def generate(analyzers: tuple[str, ...], output: str, config_path: str | None) -> None:
    """Write the SonarQube rules.xml for ANALYZERS (module:attribute)."""
    config = _load_config(config_path)
    generator = RuleGenerator(logger, cardinality=config.cardinality, status=config.status)
    path = write_rules(generator.generate_rules(_load_all(analyzers)), output)
    click.echo(f"Wrote {path}")


@cli.command()
@click.argument("analyzers", nargs=-1, required=True)
@click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(dir_okay=False, writable=True),
    help="Where to write the plugin jar.",
)
@click.option(
    "--source",
    "sources",
    multiple=True,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Java source file to compile into the plugin. Repeatable.",
)
@click.option(
    "--jar",
    "jars",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Jar needed to compile the sources. Repeatable.",
)
@click.option(
    "--resource",
    "resources",
    multiple=True,
    help="Extra file to package, as SRC=PATH_IN_JAR. Repeatable.",
)
@click.option(
    "--property",
    "properties",
    multiple=True,
    help="Manifest entry, as KEY=VALUE. Repeatable.",
)
@click.option("--java-home", default=None, help="JDK location (overrides config and JAVA_HOME).")
@_config_option
def build(
    analyzers: tuple[str, ...],
    output: str,
    sources: tuple[str, ...],
    jars: tuple[str, ...],
    resources: tuple[str, ...],
    properties: tuple[str, ...],
    java_home: str | None,
    config_path: str | None,
) -> None:
    """Generate rules for ANALYZERS and build a SonarQube plugin jar."""
    config = _load_config(config_path)
    if java_home is not None:
        config = dataclasses.replace(config, java_home=java_home)

    resource_pairs = _key_value(resources, "--resource")
    property_pairs = _key_value(properties, "--property")

    generator = RuleGenerator(logger, cardinality=config.cardinality, status=config.status)
    generated = generator.generate_rules(_load_all(analyzers))

    builder = PluginBuilder(
        logger,
        JdkWrapper(config.java_home),
        api_version=config.api_version,
        runtime_jars=config.runtime_jars,
        support_jars=config.support_jars,
    )
    builder.set_jar_file_path(output)
    for name, value in config.properties.items():
        builder.set_property(name, value)
    for name, value in property_pairs:
        try:
            builder.set_property(name, value)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--property") from exc
    for source in sources:
        builder.add_source_file(source)
    for jar in jars:
        builder.add_referenced_jar(jar)
    for src, dest in resource_pairs:
        builder.add_resource_file(src, dest)

    with tempfile.TemporaryDirectory(prefix="sonarpack-rules-") as tmp:
        rules_xml = write_rules(generated, Path(tmp) / "rules.xml")
        builder.add_resource_file(rules_xml, config.rules_resource_path)
        try:
            ok = builder.build()
        except (JdkNotFoundError, CompilerError) as exc:
            _fail(str(exc), 1)

    if not ok:
        _fail(f"could not build {output}", 1)
    click.echo(f"Built {output} ({len(generated)} rules)")
