#!/usr/bin/env python3
"""decksheet CLI - export decks to QR deck sheets and read them back."""

import logging
import sys
from pathlib import Path

import click
import yaml

from decksheet import __version__
from decksheet.config import get_settings


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def cli(verbose):
    """decksheet - printable deck sheets that carry their own deck list.

    Export a deck manifest to a PNG sheet, or scan a sheet (or a photo of
    one) to recover the deck and its blank cards.
    """
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")


@cli.command("export")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", "out_path", type=click.Path(path_type=Path), help="Output PNG (default: <manifest>.png)")
@click.option("--theme", multiple=True, help="Background colour (token or hex); repeat for a gradient")
@click.option("--caption", default=None, help="Caption text (default: deck name)")
def export_cmd(manifest, out_path, theme, caption):
    """Compose a deck sheet from a YAML deck manifest."""
    from decksheet.deck.manifest import ManifestError, load_manifest, session_from_manifest
    from decksheet.sheet.export import export_sheet

    try:
        data = load_manifest(manifest)
        session = session_from_manifest(data)
    except ManifestError as e:
        raise click.ClickException(str(e))

    theme = list(theme) or data.get("theme") or None
    out_path = out_path or manifest.with_suffix(".png")
    ok, message = session.validate()
    if not ok:
        click.echo(f"Warning: {message}", err=True)

    export_sheet(session, out_path, theme=theme, caption=caption)
    click.echo(f"Wrote {out_path}")


@cli.command("import")
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", "out_path", type=click.Path(path_type=Path), help="Save the recovered deck as a manifest")
@click.option("--ladder", "ladder_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Decode ladder YAML (default: DECKSHEET_LADDER or built-in)")
@click.option("--parallel", type=int, default=1, help="Regions scanned concurrently")
def import_cmd(image, out_path, ladder_path, parallel):
    """Recover a deck and its blank cards from a deck sheet image."""
    from PIL import Image, UnidentifiedImageError

    from decksheet.deck.manifest import manifest_data, save_manifest
    from decksheet.deck.text import DeckTextError
    from decksheet.scan.importer import import_sheet
    from decksheet.scan.ladder import load_ladder

    try:
        with Image.open(image) as img:
            img.load()
            candidate = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise click.ClickException(f"Cannot read image {image}: {e}")

    try:
        imported = import_sheet(candidate, ladder=load_ladder(ladder_path), parallel=parallel)
    except DeckTextError as e:
        raise click.ClickException(str(e))

    for card in imported.blank_cards:
        click.echo(f"Blank card: {card.card_id} {card.name} ({card.type.value})")
    if imported.leader_card is not None:
        click.echo(f"Blank leader: {imported.leader_card.card_id} {imported.leader_card.name}")

    if imported.deck is None:
        click.echo("No deck detected", err=True)
        sys.exit(1)

    deck = imported.deck
    click.echo(f"Leader: {deck.leader}")
    if deck.don:
        click.echo(f"DON: {deck.don}")
    for card_id, count in deck.cards.items():
        click.echo(f"{count}x{card_id}")

    if out_path:
        blanks = list(imported.blank_cards)
        if imported.leader_card is not None:
            blanks.insert(0, imported.leader_card)
        save_manifest(manifest_data(deck, blanks), out_path)
        click.echo(f"Wrote {out_path}")


@cli.command("text")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--payload", is_flag=True, help="Print the full main QR payload (with side-channel lines)")
def text_cmd(manifest, payload):
    """Print the canonical deck text for a manifest."""
    from decksheet.deck.manifest import ManifestError, load_session

    try:
        session = load_session(manifest)
    except ManifestError as e:
        raise click.ClickException(str(e))
    click.echo(session.sheet_payload() if payload else session.export_text())


@cli.group()
def card():
    """Blank card payload commands."""
    pass


@card.command("encode")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("card_id")
def card_encode(manifest, card_id):
    """Print the QR payload for a card in a manifest."""
    from decksheet.cards.codec import encode_card
    from decksheet.deck.manifest import ManifestError, load_session

    try:
        session = load_session(manifest)
    except ManifestError as e:
        raise click.ClickException(str(e))
    record = session.find_card(card_id)
    if record is None:
        raise click.ClickException(f"Card not found: {card_id}")
    click.echo(encode_card(record))


@card.command("decode")
@click.argument("payload")
def card_decode(payload):
    """Decode a blank card QR payload to YAML."""
    from decksheet.cards.codec import decode_card

    record = decode_card(payload)
    if record is None:
        raise click.ClickException("Not a blank card payload")
    click.echo(yaml.dump(record.to_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False), nl=False)


@cli.group()
def ladder():
    """Decode ladder commands."""
    pass


@ladder.command("show")
@click.option("--ladder", "ladder_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Ladder YAML to show (default: DECKSHEET_LADDER or built-in)")
def ladder_show(ladder_path):
    """Print the effective decode ladder as YAML."""
    from decksheet.scan.ladder import load_ladder

    try:
        effective = load_ladder(ladder_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))
    click.echo(effective.to_yaml(), nl=False)


def main():
    cli()


if __name__ == "__main__":
    main()
