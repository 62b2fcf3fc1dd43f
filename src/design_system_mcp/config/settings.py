"""
Configuration settings and constants for design system extraction.

This module centralizes file patterns, output defaults, the default analyzer
chain and the configuration loader that combines the JSON config file,
``.dsmrc``/``.env`` environment files, environment variables and CLI
overrides.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set

from dotenv import load_dotenv

from ..analysis.exceptions import ConfigurationError
from ..analysis.models import ChainConfig, MergeStrategy, StageConfig

logger = logging.getLogger(__name__)


# Directories never scanned for story files
EXCLUDED_DIRS: Set[str] = {
    ".git",
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    ".cache",
    "storybook-static",
    "__pycache__",
}

DEFAULT_STORIES_PATTERNS: List[str] = [
    "**/*.stories.tsx",
    "**/*.stories.ts",
    "**/*.stories.jsx",
    "**/*.stories.js",
    "**/*.stories.mdx",
]

STORY_EXTENSIONS: List[str] = ["js", "jsx", "ts", "tsx", "mdx"]

# Companion component file lookup order
COMPONENT_EXTENSIONS: List[str] = [".tsx", ".ts", ".jsx", ".js"]

CONFIG_FILE_NAMES: List[str] = ["dsm.config.json", ".dsm.config.json"]
RC_FILE_NAME = ".dsmrc"

DEFAULT_OUTPUT_PATH = "design-system-mcp.json"
DEFAULT_INLINE_EXTENSION = ".dsm.json"
DEFAULT_DESIGN_SYSTEM_NAME = "My Design System"
DEFAULT_DESIGN_SYSTEM_DESCRIPTION = "Design system components for AI tools"

# Default analyzer chain: (name, weight, enabled)
DEFAULT_CHAIN_STAGES = [
    ("comments", 0, True),
    ("storybook", 1, True),
    ("source", 2, True),
    ("openai", 3, False),
]


class Framework(str, Enum):
    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    SVELTE = "svelte"
    WEB_COMPONENTS = "web-components"


class DesignLibrary(str, Enum):
    MATERIAL_UI = "mui"
    TAILWIND = "tailwind"
    BOOTSTRAP = "bootstrap"
    CHAKRA_UI = "chakra"
    MANTINE = "mantine"
    ANT_DESIGN = "antd"
    SEMANTIC_UI = "semantic"
    BULMA = "bulma"
    FOUNDATION = "foundation"
    CUSTOM = "custom"
    NONE = "none"


class OutputMode(str, Enum):
    SINGLE_FILE = "single-file"
    INLINE_FILES = "inline-files"


def _parse_enum(enum_cls, value: Any, config_key: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid value '{value}' for {config_key}. Expected one of: {allowed}",
            config_key=config_key,
            config_value=str(value),
        )


def _parse_bool(value: Any, config_key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(
        f"Invalid boolean '{value}' for {config_key}",
        config_key=config_key,
        config_value=str(value),
    )


@dataclass
class StorybookSettings:
    """Where story files live and which framework they target."""

    stories_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_STORIES_PATTERNS)
    )
    exclude_patterns: List[str] = field(default_factory=list)
    framework: Framework = Framework.REACT


@dataclass
class OutputSettings:
    """Where and how generated context is written."""

    mode: OutputMode = OutputMode.SINGLE_FILE
    output_path: str = DEFAULT_OUTPUT_PATH
    inline_file_prefix: str = ""
    inline_file_extension: str = DEFAULT_INLINE_EXTENSION


@dataclass
class DesignSystemConfig:
    """Complete configuration for one design system."""

    name: str = DEFAULT_DESIGN_SYSTEM_NAME
    version: str = "1.0.0"
    description: str = DEFAULT_DESIGN_SYSTEM_DESCRIPTION
    root_directory: str = field(default_factory=os.getcwd)
    base_import_path: Optional[str] = None
    storybook: StorybookSettings = field(default_factory=StorybookSettings)
    design_library: DesignLibrary = DesignLibrary.NONE
    output: OutputSettings = field(default_factory=OutputSettings)
    chain: ChainConfig = field(default_factory=lambda: get_default_chain_config())
    theme: Dict[str, Any] = field(default_factory=dict)
    manual_components: List[Dict[str, Any]] = field(default_factory=list)
    ignore_components: List[str] = field(default_factory=list)
    max_workers: int = 4

    @property
    def framework(self) -> Framework:
        return self.storybook.framework

    def resolve_output_path(self) -> str:
        """Absolute output path, relative paths resolved against the root."""
        path = Path(self.output.output_path)
        if not path.is_absolute():
            path = Path(self.root_directory) / path
        return str(path)


def get_default_chain_config() -> ChainConfig:
    """
    Default analyzer chain.

    The model-backed analyzer is only enabled when DSM_ENABLE_OPENAI is set,
    since it needs API credentials.
    """
    enable_openai = os.getenv("DSM_ENABLE_OPENAI", "false").lower() == "true"
    stages = []
    for name, weight, enabled in DEFAULT_CHAIN_STAGES:
        if name == "openai":
            enabled = enable_openai
        stages.append(StageConfig(name=name, enabled=enabled, weight=weight))
    return ChainConfig(
        stages=stages, merge_strategy=MergeStrategy.MERGE, continue_on_error=True
    )


def get_default_config() -> DesignSystemConfig:
    """Get default configuration."""
    return DesignSystemConfig()


def find_config_file(root_directory: str) -> Optional[str]:
    """Return the first config file found in the root directory."""
    for name in CONFIG_FILE_NAMES:
        candidate = Path(root_directory) / name
        if candidate.is_file():
            return str(candidate)
    return None


def _read_config_file(config_path: str) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Config file not found: {config_path}", config_key="config_path",
            config_value=config_path,
        )
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in config file {config_path}: {e}",
            config_key="config_path",
            config_value=config_path,
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a JSON object",
            config_key="config_path",
            config_value=config_path,
        )
    return data


def _merge_chain(data: Mapping[str, Any]) -> ChainConfig:
    """Build a chain from the config file, keeping default stages it omits."""
    chain = get_default_chain_config()

    if data.get("enabled") is False:
        # Without a chain only the story file itself is read
        for stage in chain.stages:
            stage.enabled = stage.name == "storybook"

    for stage_data in data.get("parsers", data.get("stages")) or []:
        stage = StageConfig.from_dict(stage_data)
        existing = chain.get_stage(stage.name)
        if existing is None:
            chain.stages.append(stage)
        else:
            existing.enabled = bool(stage_data.get("enabled", existing.enabled))
            existing.weight = int(stage_data.get("weight", existing.weight))
            existing.config.update(stage.config)

    if "mergeStrategy" in data:
        chain.merge_strategy = MergeStrategy.parse(data["mergeStrategy"])
    if "continueOnError" in data:
        chain.continue_on_error = _parse_bool(data["continueOnError"], "continueOnError")
    return chain


def _apply_file_data(config: DesignSystemConfig, data: Mapping[str, Any], base_dir: str):
    config.name = data.get("name", config.name)
    config.version = data.get("version", config.version)
    config.description = data.get("description", config.description)

    if "rootDirectory" in data:
        root = Path(data["rootDirectory"])
        config.root_directory = str(root if root.is_absolute() else Path(base_dir) / root)
    if "baseImportPath" in data:
        config.base_import_path = data["baseImportPath"]
    if "designLibrary" in data:
        config.design_library = _parse_enum(
            DesignLibrary, data["designLibrary"], "designLibrary"
        )

    storybook = data.get("storybook") or {}
    if "storiesPattern" in storybook:
        patterns = storybook["storiesPattern"]
        config.storybook.stories_patterns = (
            [patterns] if isinstance(patterns, str) else list(patterns)
        )
    if "excludePatterns" in storybook:
        config.storybook.exclude_patterns = list(storybook["excludePatterns"])
    if "framework" in storybook:
        config.storybook.framework = _parse_enum(
            Framework, storybook["framework"], "framework"
        )

    output = data.get("output") or {}
    if "mode" in output:
        config.output.mode = _parse_enum(OutputMode, output["mode"], "output.mode")
    if "outputPath" in output:
        config.output.output_path = output["outputPath"]
    if "inlineFilePrefix" in output:
        config.output.inline_file_prefix = output["inlineFilePrefix"]
    if "inlineFileExtension" in output:
        config.output.inline_file_extension = output["inlineFileExtension"]

    chain_data = data.get("parserChain", data.get("parsers"))
    if isinstance(chain_data, Mapping):
        config.chain = _merge_chain(chain_data)

    config.theme = dict(data.get("theme") or {})
    config.manual_components = list(data.get("manualComponents") or [])
    config.ignore_components = list(data.get("ignoreComponents") or [])


def _apply_environment(config: DesignSystemConfig) -> None:
    if os.getenv("DSM_ROOT_DIRECTORY"):
        config.root_directory = os.getenv("DSM_ROOT_DIRECTORY")
    if os.getenv("DSM_FRAMEWORK"):
        config.storybook.framework = _parse_enum(
            Framework, os.getenv("DSM_FRAMEWORK"), "DSM_FRAMEWORK"
        )
    if os.getenv("DSM_DESIGN_LIBRARY"):
        config.design_library = _parse_enum(
            DesignLibrary, os.getenv("DSM_DESIGN_LIBRARY"), "DSM_DESIGN_LIBRARY"
        )
    if os.getenv("DSM_BASE_IMPORT_PATH"):
        config.base_import_path = os.getenv("DSM_BASE_IMPORT_PATH")
    if os.getenv("DSM_MERGE_STRATEGY"):
        config.chain.merge_strategy = MergeStrategy.parse(os.getenv("DSM_MERGE_STRATEGY"))
    if os.getenv("DSM_CONTINUE_ON_ERROR"):
        config.chain.continue_on_error = _parse_bool(
            os.getenv("DSM_CONTINUE_ON_ERROR"), "DSM_CONTINUE_ON_ERROR"
        )
    if os.getenv("DSM_OUTPUT_PATH"):
        config.output.output_path = os.getenv("DSM_OUTPUT_PATH")
    if os.getenv("DSM_MAX_WORKERS"):
        try:
            config.max_workers = max(1, int(os.getenv("DSM_MAX_WORKERS")))
        except ValueError:
            raise ConfigurationError(
                f"Invalid DSM_MAX_WORKERS: {os.getenv('DSM_MAX_WORKERS')}",
                config_key="DSM_MAX_WORKERS",
                config_value=os.getenv("DSM_MAX_WORKERS"),
            )


def _apply_overrides(config: DesignSystemConfig, overrides: Mapping[str, Any]) -> None:
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "root_directory":
            config.root_directory = str(Path(value).resolve())
        elif key == "framework":
            config.storybook.framework = _parse_enum(Framework, value, "framework")
        elif key == "design_library":
            config.design_library = _parse_enum(DesignLibrary, value, "design_library")
        elif key == "base_import_path":
            config.base_import_path = value
        elif key == "output_path":
            config.output.output_path = str(Path(value).resolve())
        elif key == "output_mode":
            config.output.mode = _parse_enum(OutputMode, value, "output_mode")
        elif key == "merge_strategy":
            config.chain.merge_strategy = MergeStrategy.parse(value)
        elif key == "continue_on_error":
            config.chain.continue_on_error = _parse_bool(value, "continue_on_error")
        elif key == "stories_patterns":
            config.storybook.stories_patterns = (
                [p.strip() for p in value.split(",") if p.strip()]
                if isinstance(value, str)
                else list(value)
            )
        elif key in ("name", "description"):
            setattr(config, key, value)
        else:
            raise ConfigurationError(
                f"Unknown configuration override '{key}'", config_key=key
            )


def load_config(
    config_path: Optional[str] = None,
    root_directory: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> DesignSystemConfig:
    """
    Load configuration from files, environment and explicit overrides.

    Precedence, lowest first: defaults, config file, environment variables
    (including values from ``.dsmrc`` and ``.env``), explicit overrides.

    Args:
        config_path: Explicit config file path (optional)
        root_directory: Directory to search for config files (default: cwd)
        overrides: CLI style overrides keyed by setting name

    Returns:
        DesignSystemConfig

    Raises:
        ConfigurationError: If a file or value is invalid
    """
    search_dir = str(Path(root_directory or os.getcwd()).resolve())

    for env_file in (RC_FILE_NAME, ".env"):
        env_path = Path(search_dir) / env_file
        if env_path.is_file():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded environment from {env_path}")

    config = get_default_config()
    config.root_directory = search_dir

    path = config_path or find_config_file(search_dir)
    if path:
        data = _read_config_file(path)
        _apply_file_data(config, data, str(Path(path).resolve().parent))
        logger.info(f"Loaded configuration from {path}")
    else:
        logger.debug(f"No config file found in {search_dir}, using defaults")

    _apply_environment(config)
    _apply_overrides(config, overrides or {})

    config.root_directory = str(Path(config.root_directory).resolve())
    return config
