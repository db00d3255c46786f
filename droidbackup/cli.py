"""Command Line Interface for DroidBackup."""

import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from .adb import ADBDevice, ADBError, check_adb_available, create_pull_progress_bar, list_devices, wait_for_device
from .backup import BackupReport, BackupStorage, DestinationError, SyncEngine
from .config import DroidBackupConfig, get_config, load_config, set_config
from .util import CancelToken, get_logger, setup_logging
from .util.logging import DEFAULT_LOG_LEVEL
from .volume import UsbVolume, VolumeError

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


def setup_cli_logging(verbose: bool = False, level: str = DEFAULT_LOG_LEVEL):
    """Setup logging for CLI."""
    setup_logging(level="DEBUG" if verbose else level, console=err_console)


def _abort(message: str) -> None:
    err_console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def _config(ctx: click.Context) -> DroidBackupConfig:
    return ctx.obj["config"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "-c", type=click.Path(exists=True, path_type=Path), help="Configuration file path")
@click.pass_context
def cli(ctx, verbose: bool, config: Optional[Path]):
    """DroidBackup - copy your Android phone's photos and documents to a USB drive or this computer."""
    ctx.ensure_object(dict)
    if config:
        loaded = load_config(config)
        set_config(loaded)
        ctx.obj["config"] = loaded
    else:
        ctx.obj["config"] = get_config()

    setup_cli_logging(verbose, ctx.obj["config"].log_level)


@contextmanager
def _cancel_on_interrupt():
    """Turn Ctrl+C into a cooperative cancel so a partial log still gets written."""
    token = CancelToken()

    def handler(signum, frame):
        err_console.print("\n[yellow]Stopping after the current file...[/yellow]")
        token.cancel()

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def _connect(config: DroidBackupConfig, serial: Optional[str], wait_timeout: Optional[float],
             token: CancelToken) -> ADBDevice:
    """Wait for the phone to show up on the bridge."""
    if not check_adb_available(config.adb_path):
        raise ADBError("ADB is not available or not in PATH. Please install Android platform tools.")

    if serial is None:
        devices = list_devices(config.adb_path)
        if len(devices) > 1:
            serials = ", ".join(d.serial for d in devices)
            raise ADBError(f"Multiple phones found ({serials}). Please specify --serial")

    device = ADBDevice(serial, config.adb_path)

    console.print("[blue]Please connect your phone and allow 'USB Debugging'.[/blue]")
    timeout = wait_timeout if wait_timeout is not None else config.device.wait_timeout
    with console.status("Waiting for your phone..."):
        wait_for_device(device, interval=config.device.poll_interval, timeout=timeout, cancel_token=token)

    return device


def _run_backup(config: DroidBackupConfig, base_dir: Path, serial: Optional[str],
                wait_timeout: Optional[float]) -> BackupReport:
    """Connect, sync into ``<base_dir>/<device label>`` and print the outcome."""
    with _cancel_on_interrupt() as token:
        device = _connect(config, serial, wait_timeout, token)

        label = device.device_label()
        console.print(f"[green]OK. Connected to your [bold]{label}[/bold].[/green]\n")

        storage = BackupStorage(base_dir)
        destination = storage.prepare(label)

        engine = SyncEngine(
            device,
            device_root=config.sync.device_root,
            contact_extension=config.sync.contact_extension,
            log_file_name=config.sync.log_file_name,
        )

        console.print("[yellow]Analyzing files on phone...[/yellow]")
        with create_pull_progress_bar(0) as bar:
            def on_progress(current: int, total: int, relative_path: str) -> None:
                if bar.total != total:
                    bar.total = total
                    bar.refresh()
                name = relative_path if len(relative_path) <= 40 else "..." + relative_path[-37:]
                bar.set_postfix_str(name, refresh=False)
                bar.update(1)

            report = engine.sync(
                config.sync.source_folders,
                destination,
                progress_callback=on_progress,
                cancel_token=token,
                device_label=label,
            )

    _print_summary(report)
    return report


def _print_summary(report: BackupReport) -> None:
    result = report.result

    if report.cancelled:
        console.print("[yellow][bold]--- Backup Stopped ---[/bold][/yellow]")
    else:
        console.print("[green][bold]--- Backup Complete! ---[/bold][/green]")
    console.print(f"  [bold]Copied:[/bold] {len(result.copied)} new files.")
    console.print(f"  [bold]Skipped:[/bold] {len(result.skipped)} files (already exist).")
    if result.has_failures:
        console.print(f"  [red][bold]Failed:[/bold] {len(result.failed)} files. Check log for details.[/red]")
    console.print()

    if report.contact_record_count > 0 and report.contact_file_path is not None:
        console.print("[green][bold]Contacts Found:[/bold][/green]")
        console.print(
            f"  Counted [bold]{report.contact_record_count} contacts[/bold]"
            f"[green] in a file inside the folder:[/green]"
        )
        console.print(f"  [blue]{report.contact_file_path.parent}[/blue]")
        if report.multiple_contact_files:
            console.print(
                "  [yellow](Note: Multiple contact files were found. Count is from the first file.)[/yellow]"
            )
    else:
        console.print("[yellow]Note: No phone contact files were found in this backup.[/yellow]")

    console.print()
    console.print(f"A detailed report was saved to: [blue]{report.log_path}[/blue]")


@cli.group()
def backup():
    """Back up the phone."""
    pass


@backup.command("usb")
@click.option("--serial", "-s", help="Device serial number")
@click.option("--wait-timeout", type=float, help="Give up waiting for the phone after this many seconds")
@click.option("--keep-mounted", is_flag=True, help="Leave the USB drive mounted afterwards")
@click.option("--yes", "-y", is_flag=True, help="Eject without waiting for Enter")
@click.pass_context
def backup_usb(ctx, serial: Optional[str], wait_timeout: Optional[float], keep_mounted: bool, yes: bool):
    """Mount the USB drive, back up the phone onto it, then eject it."""
    config = _config(ctx)
    volume = UsbVolume(config.usb_mount_dir)

    console.print("[blue]--- Preparing Your USB Drive ---[/blue]")
    try:
        mount_point = volume.mount()
    except VolumeError as e:
        _abort(str(e))
    console.print("[green]OK. Your USB drive is ready.[/green]")

    failed = False
    try:
        _run_backup(config, mount_point, serial, wait_timeout)
    except (ADBError, DestinationError) as e:
        err_console.print(f"[red]Error: Backup failed: {e}[/red]")
        failed = True
    finally:
        if not keep_mounted:
            if not yes:
                click.pause("Press Enter to safely eject the USB drive...")
            _eject(volume, fatal=False)

    if failed:
        sys.exit(1)


@backup.command("local")
@click.option("--serial", "-s", help="Device serial number")
@click.option("--wait-timeout", type=float, help="Give up waiting for the phone after this many seconds")
@click.option("--dest", "-d", type=click.Path(file_okay=False, path_type=Path), help="Backup base folder")
@click.pass_context
def backup_local(ctx, serial: Optional[str], wait_timeout: Optional[float], dest: Optional[Path]):
    """Back up the phone to a folder on this computer."""
    config = _config(ctx)
    base_dir = dest or config.local_backup_dir

    try:
        _run_backup(config, base_dir, serial, wait_timeout)
    except (ADBError, DestinationError) as e:
        _abort(f"Backup failed: {e}")


@cli.group()
def usb():
    """Manual USB drive control."""
    pass


@usb.command("mount")
@click.pass_context
def usb_mount(ctx):
    """Mount the USB drive only."""
    volume = UsbVolume(_config(ctx).usb_mount_dir)

    console.print("[blue]--- Preparing Your USB Drive ---[/blue]")
    try:
        mount_point = volume.mount()
    except VolumeError as e:
        _abort(str(e))

    console.print("[green]OK. Your USB drive is ready.[/green]")
    click.echo(str(mount_point))


@usb.command("eject")
@click.pass_context
def usb_eject(ctx):
    """Eject the USB drive only."""
    _eject(UsbVolume(_config(ctx).usb_mount_dir), fatal=True)


def _eject(volume: UsbVolume, fatal: bool) -> None:
    console.print("[blue]--- Ejecting USB Drive ---[/blue]")
    try:
        volume.unmount()
    except VolumeError as e:
        if fatal:
            _abort(str(e))
        err_console.print(f"[yellow]Warning: {e}[/yellow]")
        return
    console.print("[green]Done. You can now safely remove the USB drive.[/green]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
