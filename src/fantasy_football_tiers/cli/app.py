import asyncio
from pathlib import Path
from typing import Annotated

import typer

from fantasy_football_tiers.cli._input import load_entities
from fantasy_football_tiers.cli._logging import configure_logging
from fantasy_football_tiers.cli._output import print_error, print_tier_result
from fantasy_football_tiers.config import create_config, load_tier_settings
from fantasy_football_tiers.domain.scoring_format import parse_scoring_format
from fantasy_football_tiers.exceptions import TierEngineError
from fantasy_football_tiers.services.tier_service import TierService, validate_tier_options

app = typer.Typer(name="fft", help="Fantasy football draft tiers.")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    configure_logging(verbose=verbose)


@app.command("tiers")
def tiers_cmd(
    path: Annotated[Path, typer.Argument(help="JSON file of ranked player records.", exists=True, dir_okay=False)],
    tiers: Annotated[int | None, typer.Option("--tiers", "-t", help="Number of tiers to compute.")] = None,
    scoring: Annotated[str | None, typer.Option("--scoring", "-s", help="PPR, HALF_PPR or STANDARD.")] = None,
    algorithm: Annotated[str, typer.Option("--algorithm", "-a", help="auto, gmm, value-drop or rank-gap.")] = "auto",
    category: Annotated[str | None, typer.Option("--category", "-c", help="Position label for the output.")] = None,
    config_path: Annotated[str, typer.Option("--config", help="YAML config file.")] = "tiers.yaml",
) -> None:
    """Compute draft tiers for a list of ranked players."""
    try:
        settings = load_tier_settings(create_config(yaml_path=config_path))
        scoring_format = parse_scoring_format(scoring) if scoring else settings.default_scoring_format
        options = validate_tier_options({"algorithm": algorithm, "max_tiers": tiers}, settings)
        entities = load_entities(path)
    except (TierEngineError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    service = TierService(settings=settings)
    result = asyncio.run(service.get_tiers(entities, scoring_format, options, category=category, data_source=str(path)))
    print_tier_result(result)
