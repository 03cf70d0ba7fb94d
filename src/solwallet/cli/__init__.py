"""CLI package for SolWallet."""

from __future__ import annotations

import logging
import os
import sys
from importlib import metadata
from pathlib import Path

import typer

from solwallet.core import DEFAULT_CONFIG_DIR, ConfigManager, ConfigurationError, NetworkConfigRegistry
from solwallet.core.config import CONFIG_FILENAME
from solwallet.solana import WalletManager

from .app import CLIApp
from .branding import themed_console

app = typer.Typer(invoke_without_command=True, help="SolWallet terminal wallet", no_args_is_help=False)

CLI_CONSOLE = themed_console()


def styled_echo(message: str = "", *, nl: bool = True) -> None:
    """Print using the SolWallet themed console."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"", "0", "false", "no"}


def _parse_direct_launch_args(args: list[str]) -> tuple[bool, Path | None] | str | None:
    """Recognise the flags that launch the shell directly; None defers to typer."""
    verbose = _env_flag("SOLWALLET_DEBUG", default=False)
    config_path: Path | None = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in {"--version", "-V"}:
            return "version"
        if arg in {"--verbose", "-v"}:
            verbose = True
            i += 1
            continue
        if arg == "--config":
            if i + 1 >= len(args):
                styled_echo("❌ Option '--config' requires a file path.")
                raise typer.Exit(code=2)
            config_path = Path(args[i + 1]).expanduser()
            i += 2
            continue
        if arg.startswith("--config="):
            config_path = Path(arg.split("=", 1)[1]).expanduser()
            i += 1
            continue
        return None
    return verbose, config_path


def _configure_logging(verbose: bool, log_dir: Path | None) -> None:
    root_logger = logging.getLogger()
    if verbose:
        if not root_logger.handlers:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        root_logger.setLevel(logging.DEBUG)
    else:
        if root_logger.handlers:
            root_logger.setLevel(logging.WARNING)
        else:
            logging.basicConfig(level=logging.WARNING, format="%(message)s")
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if verbose and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / "solwallet.log", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


def _resolve_project_paths() -> tuple[Path, Path]:
    project_home = Path.cwd() / ".solwallet"
    global_home = DEFAULT_CONFIG_DIR
    global_home.mkdir(parents=True, exist_ok=True)
    return project_home, global_home


def _build_config_manager(project_home: Path, global_home: Path, config_file: Path | None) -> ConfigManager:
    config_override_path: Path | None = None
    if config_file is not None:
        config_override_path = config_file.expanduser()
        if not config_override_path.exists():
            styled_echo(f"❌ Config file '{config_override_path}' not found.")
            raise typer.Exit(code=1)
        config_override_path = config_override_path.resolve()

    project_config_path: Path | None = None
    if config_override_path is None:
        candidate = project_home / CONFIG_FILENAME
        if candidate.exists():
            project_config_path = candidate

    return ConfigManager(
        config_dir=global_home,
        project_config_path=project_config_path,
        override_config_path=config_override_path,
    )


def _launch_shell(verbose: bool, config_file: Path | None) -> None:
    project_home, global_home = _resolve_project_paths()
    _configure_logging(verbose, log_dir=project_home / "logs" if verbose else None)

    config_manager = _build_config_manager(project_home, global_home, config_file)
    try:
        config = config_manager.load()
    except ConfigurationError as exc:
        styled_echo(f"❌ {exc}")
        raise typer.Exit(code=1) from exc

    registry = NetworkConfigRegistry.from_config_dir(global_home, selected_id=config.network)
    wallet_manager = WalletManager(keys_dir=global_home / "keys")
    CLIApp(
        history_path=global_home / "history",
        config=config,
        config_manager=config_manager,
        registry=registry,
        wallet_manager=wallet_manager,
    ).run()


@app.callback()
def _root(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        _launch_shell(_env_flag("SOLWALLET_DEBUG"), None)


@app.command()
def run(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", help="Use an alternate config file and skip project overrides"),  # noqa: B008
) -> None:
    """Launch the SolWallet interactive shell."""
    _launch_shell(verbose or _env_flag("SOLWALLET_DEBUG"), config)


@app.command()
def version() -> None:
    """Show CLI version."""
    try:
        pkg_version = metadata.version("solwallet")
    except metadata.PackageNotFoundError:
        pkg_version = "0.0.0"
    styled_echo(f"SolWallet version {pkg_version}")


def main() -> None:
    """Console script entrypoint."""
    args = sys.argv[1:]
    direct = _parse_direct_launch_args(args)
    if direct == "version":
        app(args=["version"])
        return
    if isinstance(direct, tuple):
        verbose, config_path = direct
        _launch_shell(verbose, config_path)
        return
    app(args=args or None)


__all__ = ["CLIApp", "app", "main"]
