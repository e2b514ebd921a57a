"""
Photo Reminisce configuration, style presets and logging
"""

import configparser
import logging
from pathlib import Path

import yaml
from PIL import ImageFont

from .errors import StyleNotFoundError
from .models import StyleSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = 'photo-reminisce.log'):
    """Configure root logging to a UTF-8 log file and the console"""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def get_base_path() -> Path:
    """Directory holding the packaged styles/ and fonts/ folders"""
    return Path(__file__).parent


class ConfigManager:
    """Configuration manager backed by an INI file"""

    DEFAULT_CONFIG = {
        "general": {
            "language": "en",
        },
        "style": {
            "preset": "",
            "color": "orange",
            "format": "standard",
            "font_size": "96",
            "shadow": "true",
            "fixed_to_bottom_right": "true",
        },
        "export": {
            "file_type": "jpeg",
            "quality": "92",
            "output_directory": "",
            "overwrite_existing": "false",
            "inter_item_delay_ms": "100",
        },
    }

    def __init__(self, config_path: str | Path | None = None):
        if config_path is None:
            self.config_path = Path.home() / ".photo-reminisce.ini"
        else:
            self.config_path = Path(config_path)
        self._config: configparser.ConfigParser | None = None

    def load(self) -> dict:
        """Load the configuration, creating the file with defaults if missing"""
        if self._config is not None:
            return self._to_dict()

        # Defaults go in first so options missing from an older file survive the read
        self._config = self._defaults_parser()
        if not self.config_path.exists():
            self._save_config()
            logger.info(f"Default config created: {self.config_path}")
            return self._to_dict()

        try:
            self._config.read(self.config_path, encoding='utf-8')
            logger.info(f"Config loaded: {self.config_path}")
        except configparser.Error as e:
            logger.error(f"Failed to load config file: {e}")
            self._config = self._defaults_parser()
        return self._to_dict()

    def save(self, config: dict) -> None:
        """Write ``config`` sections back to the INI file"""
        if self._config is None:
            self._config = self._defaults_parser()

        self._config.read_dict({
            section: {key: _to_ini(value) for key, value in values.items()}
            for section, values in config.items()
        })

        try:
            self._save_config()
        except OSError as e:
            logger.error(f"Failed to save config file: {e}")
            raise
        logger.info("Config saved")

    def save_style(self, style: StyleSettings, preset: str = "") -> None:
        """Persist the current style so the next session starts from it"""
        self.load()
        self.save({
            "style": {
                "preset": preset,
                "color": style.color,
                "format": style.format,
                "font_size": style.font_size,
                "shadow": style.shadow,
                "fixed_to_bottom_right": style.fixed_to_bottom_right,
            },
            "export": {
                "file_type": style.file_type,
                "quality": style.quality,
            },
        })

    def _defaults_parser(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser()
        parser.read_dict(self.DEFAULT_CONFIG)
        return parser

    def _save_config(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            self._config.write(f)

    def _to_dict(self) -> dict:
        return {
            section: {key: _from_ini(value) for key, value in self._config.items(section)}
            for section in self._config.sections()
        }


def _to_ini(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _from_ini(value: str):
    """Booleans and plain digit strings come back typed, anything else stays text"""
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    if value.isdigit():
        return int(value)
    return value


class StyleManager:
    """Style presets (YAML) and monospace font lookup"""

    # Tried in order when no bundled font is present
    SYSTEM_MONOSPACE_FONTS = [
        "DejaVuSansMono-Bold.ttf",
        "DejaVuSansMono.ttf",
        "LiberationMono-Bold.ttf",
        "LiberationMono-Regular.ttf",
        "courbd.ttf",
        "cour.ttf",
        "Menlo.ttc",
        "Courier New.ttf",
    ]

    def __init__(self, styles_dir: str | Path | None = None, fonts_dir: str | Path | None = None):
        base_path = get_base_path()
        self.styles_dir = Path(styles_dir) if styles_dir else base_path / "styles"
        self.fonts_dir = Path(fonts_dir) if fonts_dir else base_path / "fonts"
        self._styles_cache: dict = {}
        self._font_cache: dict = {}

    def list_styles(self) -> list[str]:
        """Names of all available presets, sorted"""
        styles = set()
        if self.styles_dir.exists():
            for pattern in ("*.yml", "*.yaml"):
                styles.update(file.stem for file in self.styles_dir.glob(pattern))
        return sorted(styles)

    def load_style(self, name: str) -> dict:
        """Raw preset mapping for ``name``"""
        if name in self._styles_cache:
            return self._styles_cache[name]

        style_path = self.styles_dir / f"{name}.yml"
        if not style_path.exists():
            style_path = self.styles_dir / f"{name}.yaml"

        if not style_path.exists():
            raise StyleNotFoundError(f"Style preset not found: {name}")

        try:
            with open(style_path, 'r', encoding='utf-8') as f:
                style = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to load style [{name}]: {e}")
            raise

        self._styles_cache[name] = style
        logger.info(f"Style preset loaded: {name}")
        return style

    def apply_style(self, name: str, base: StyleSettings | None = None) -> StyleSettings:
        """Overlay preset ``name`` onto ``base`` settings"""
        base = base or StyleSettings()
        preset = self.load_style(name)
        fields = {key: preset[key] for key in (
            "color", "format", "font_size", "shadow",
            "fixed_to_bottom_right", "file_type", "quality",
        ) if key in preset}
        return base.replace(**fields)

    def get_font_path(self) -> Path | None:
        """First TrueType/OpenType font file in the bundled fonts directory"""
        if self.fonts_dir.exists():
            for path in sorted(self.fonts_dir.rglob("*")):
                if path.suffix.lower() in ('.ttf', '.otf', '.ttc'):
                    return path
        return None

    def get_font(self, size: int) -> ImageFont.FreeTypeFont:
        """Monospace font at ``size`` pixels"""
        if size in self._font_cache:
            return self._font_cache[size]

        font = None
        font_path = self.get_font_path()
        candidates = ([str(font_path)] if font_path else []) + self.SYSTEM_MONOSPACE_FONTS
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue

        if font is None:
            logger.warning("No monospace font found, using Pillow default font")
            font = ImageFont.load_default(size)

        self._font_cache[size] = font
        return font
