"""
Photo-Reminisce entry point
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional

from .core import ConfigManager, StyleManager, setup_logging
from .errors import ConversionError, DecodeError, ExportInProgressError, StyleNotFoundError, UnsupportedInput
from .export import BatchExporter, DirectorySink, ExportProgress
from .i18n import I18n, batch_result_message, t
from .library import PhotoLibrary, intake_photo
from .models import COLOR_HEX, FILE_TYPES, FORMATS, Position, StyleSettings
from .renderer import TimestampRenderer

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="photo-reminisce",
        description="Stamp photos with a vintage date overlay and export them.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Image files to stamp.")
    parser.add_argument("--config", type=Path, default=None, help="INI config file (default: ~/.photo-reminisce.ini).")
    parser.add_argument("--preset", default=None, help="Style preset name (see --list-styles).")
    parser.add_argument("--list-styles", action="store_true", help="List style presets and exit.")
    parser.add_argument("--color", choices=sorted(COLOR_HEX), default=None)
    parser.add_argument("--format", dest="format_", choices=FORMATS, default=None)
    parser.add_argument("--font-size", type=int, default=None, help="Font size in source pixels (64-256).")
    parser.add_argument("--shadow", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument(
        "--position", nargs=2, type=float, metavar=("X", "Y"), default=None,
        help="Baseline anchor in source pixels; disables the bottom-right anchor.",
    )
    parser.add_argument("--file-type", choices=FILE_TYPES, default=None)
    parser.add_argument("--quality", type=int, default=None, help="JPEG quality (50-100).")
    parser.add_argument("-o", "--output-dir", type=Path, default=None)
    parser.add_argument("--overwrite", action="store_true", default=None, help="Overwrite existing exports.")
    parser.add_argument("--delay-ms", type=int, default=None, help="Pause between exported photos.")
    parser.add_argument("--lang", default=None, help="Message language (en, zh-CN).")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def build_style(args: argparse.Namespace, config: dict, style_manager: StyleManager) -> StyleSettings:
    """Config, then preset, then command-line overrides"""
    style = StyleSettings.from_config(config)

    preset = args.preset or config.get("style", {}).get("preset")
    if preset:
        style = style_manager.apply_style(preset, style)

    overrides = {
        "color": args.color,
        "format": args.format_,
        "font_size": args.font_size,
        "shadow": args.shadow,
        "file_type": args.file_type,
        "quality": args.quality,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.position is not None:
        overrides["fixed_to_bottom_right"] = False
    return style.replace(**overrides)


def load_photos(paths: Iterable[Path], converter: Callable[[bytes], bytes] | None = None) -> PhotoLibrary:
    library = PhotoLibrary()
    for path in paths:
        media_type = mimetypes.guess_type(path.name)[0] or ""
        try:
            photo = intake_photo(path.read_bytes(), path.name, media_type, converter=converter)
        except UnsupportedInput as e:
            logger.error(f"{path.name}: {e}")
            print(f"{path.name}: {t('error_not_image')}", file=sys.stderr)
            continue
        except ConversionError as e:
            logger.error(f"{path.name}: {e}")
            print(f"{path.name}: {t('error_conversion')}", file=sys.stderr)
            continue
        except (DecodeError, OSError) as e:
            logger.error(f"{path.name}: {e}")
            print(f"{path.name}: {t('error_process_image')}", file=sys.stderr)
            continue

        library.add(photo)
        if photo.date_is_default:
            print(t("msg_date_defaulted", filename=photo.filename))
    return library


def _print_progress(progress: ExportProgress):
    print(t("msg_batch_progress", current=progress.index + 1, total=progress.total, percent=progress.percent))
    if not progress.saved:
        print(t("error_export", filename=progress.filename, error=progress.error), file=sys.stderr)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Program main entry"""
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config_manager = ConfigManager(args.config)
    config = config_manager.load()
    I18n.set_language(args.lang or config.get("general", {}).get("language", "en"))

    style_manager = StyleManager()
    if args.list_styles:
        for name in style_manager.list_styles():
            print(name)
        return 0

    try:
        style = build_style(args, config, style_manager)
    except StyleNotFoundError:
        preset = args.preset or config.get("style", {}).get("preset")
        print(t("error_style_not_found", name=preset), file=sys.stderr)
        return 2

    library = load_photos(args.files)
    if not len(library):
        print(t("msg_no_photos"), file=sys.stderr)
        return 1

    export_config = config.get("export", {})
    output_dir = args.output_dir or export_config.get("output_directory") or Path.cwd()
    overwrite = args.overwrite if args.overwrite is not None else export_config.get("overwrite_existing", False)
    delay_ms = args.delay_ms if args.delay_ms is not None else export_config.get("inter_item_delay_ms", 100)

    exporter = BatchExporter(
        DirectorySink(output_dir, overwrite_existing=overwrite),
        TimestampRenderer(style_manager),
        inter_item_delay=delay_ms / 1000,
    )
    position = Position(*args.position) if args.position else None

    try:
        summary = exporter.export_all(library, style, position, progress_callback=_print_progress)
    except ExportInProgressError:
        print(t("error_export_running"), file=sys.stderr)
        return 1

    print(batch_result_message(summary))
    return 0 if summary.all_saved else 1


if __name__ == "__main__":
    sys.exit(main())
