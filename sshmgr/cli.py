"""sshmgr - pick a server from the inventory and connect, describe or copy."""

import logging

import click

from sshmgr import __version__
from sshmgr.automation import AutomationEngine, Keyboard
from sshmgr.clipboard import clear_after, copy_plain, copy_sensitive
from sshmgr.config import Settings, load_settings
from sshmgr.inventory import Record, field, load_inventory
from sshmgr.launcher import connect
from sshmgr.selector import dmenu, fzf, menu_confirm, select

logger = logging.getLogger(__name__)

ACTIONS = ("connect", "connect_proxied", "describe", "password", "execute_convenience")

CHANGE_PROMPT_COLOR = "Change prompt color"
ENTER_PASSWORD = "Enter password"
ESCALATE = "Escalate to superuser"
CLEAR_SCREEN = "Clear screen"
CONVENIENCES = (CHANGE_PROMPT_COLOR, ENTER_PASSWORD, ESCALATE, CLEAR_SCREEN)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def build_engine(settings: Settings) -> AutomationEngine:
    return AutomationEngine(
        Keyboard(settings.xdotool_command),
        menu_confirm(dmenu(settings.menu_command)),
        color_picker=dmenu(settings.menu_command + ["-i"]),
    )


def load_servers(settings: Settings) -> dict[str, Record]:
    """Load the inventory, or create the template and stop cleanly."""
    servers = load_inventory(settings.inventory)
    if servers is None:
        click.echo(
            f"Server list not found.\nTemplate generated at '{settings.inventory}'",
            err=True,
        )
        raise SystemExit(0)
    return servers


def select_server(settings: Settings) -> Record | None:
    servers = load_servers(settings)
    name = select(servers, fzf(settings.picker_command))
    if name is None:
        logger.debug("No server selected")
        return None
    return servers[name]


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------

def run_connect(settings: Settings, proxied: bool, config_path: str | None = None) -> None:
    record = select_server(settings)
    if record is None:
        return
    connect(record, settings, proxied=proxied, config_path=config_path)


def run_post_connect(settings: Settings, name: str) -> None:
    """Body of the detached post-connect child started by connect."""
    servers = load_inventory(settings.inventory) or {}
    if name not in servers:
        raise click.ClickException(f"Unknown server '{name}'")
    build_engine(settings).post_connect(field(servers[name], "credential"))


def run_describe(settings: Settings) -> None:
    record = select_server(settings)
    if record is None:
        return
    address = field(record, "address")
    click.secho(record.name, bold=True)
    click.echo(f"{click.style('Description:', bold=True)} {field(record, 'description')}")
    if address:
        click.echo(f"{click.style('IP:', bold=True)} {address}")
    copy_plain(address)


def run_password(settings: Settings) -> None:
    record = select_server(settings)
    if record is None:
        return
    copy_sensitive(field(record, "credential"), settings.clipboard_timeout)


def run_conveniences(settings: Settings) -> None:
    picks = fzf(settings.picker_command).choose(
        CONVENIENCES, prompt="Choose a convenience to execute: ", multi=True
    )
    engine = build_engine(settings)
    for pick in picks:
        if pick == CHANGE_PROMPT_COLOR:
            engine.recolor_prompt(None)
        elif pick == CLEAR_SCREEN:
            engine.clear_screen()
        elif pick in (ENTER_PASSWORD, ESCALATE):
            record = select_server(settings)
            if record is None:
                continue
            secret = field(record, "credential")
            if pick == ENTER_PASSWORD:
                engine.type_credential(secret)
            else:
                engine.escalate_privilege(secret)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-c", "--connect", is_flag=True, help="Connects to selected instance through SSH")
@click.option("-x", "--connect-proxied", is_flag=True,
              help="Connects to selected instance through SSH over proxychains")
@click.option("-p", "--password", is_flag=True, help="Copies password of selected instance to clipboard")
@click.option("-d", "--describe", is_flag=True, help="Provides a description of selected instance")
@click.option("-t", "--execute-convenience", is_flag=True, help="Executes convenience of choice")
@click.option("--inventory", type=click.Path(dir_okay=False), help="Server list CSV to use")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Settings file (YAML)")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.option("--clear-clipboard-after", type=click.IntRange(min=0), hidden=True)
@click.option("--post-connect", "post_connect", metavar="NAME", hidden=True)
@click.version_option(__version__, prog_name="sshmgr")
@click.pass_context
def cli(ctx, inventory, config_path, verbose, clear_clipboard_after, post_connect, **actions) -> None:
    """Pick a server from the inventory with fzf and act on it."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if clear_clipboard_after is not None:
        clear_after(clear_clipboard_after)
        return

    if post_connect is not None:
        run_post_connect(load_settings(config_path, inventory), post_connect)
        return

    chosen = [name for name in ACTIONS if actions.get(name)]
    if len(chosen) > 1:
        flags = ", ".join("--" + name.replace("_", "-") for name in chosen)
        raise click.UsageError(f"Options {flags} are mutually exclusive.", ctx)
    if not chosen:
        click.echo(ctx.get_help())
        return

    settings = load_settings(config_path, inventory)
    action = chosen[0]
    logger.debug("Action %s, inventory %s", action, settings.inventory)

    if action == "connect":
        run_connect(settings, proxied=False, config_path=config_path)
    elif action == "connect_proxied":
        run_connect(settings, proxied=True, config_path=config_path)
    elif action == "describe":
        run_describe(settings)
    elif action == "password":
        run_password(settings)
    else:
        run_conveniences(settings)


def main() -> None:
    cli(prog_name="sshmgr")


if __name__ == "__main__":
    main()
