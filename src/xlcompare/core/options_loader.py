"""
xlcompare - Comparison profile loader

Loads ComparisonOptions from a YAML profile:

    comparison:
      compare_values: true
      compare_cell_format: true
"""
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv

from .options import ComparisonOptions

logger = logging.getLogger(__name__)

OPTIONS_ENV_VAR = 'XLCOMPARE_OPTIONS'
DEFAULT_LOCATIONS = (Path('config/xlcompare.yaml'), Path('xlcompare.yaml'))


def find_profile(config_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate the comparison profile.

    Args:
        config_path: Explicit path. If None, looks for:
                    - $XLCOMPARE_OPTIONS environment variable
                    - ./config/xlcompare.yaml
                    - ./xlcompare.yaml

    Returns:
        Path to the profile, or None when no profile is configured
    """
    if config_path is not None:
        return Path(config_path)

    env_config = os.getenv(OPTIONS_ENV_VAR)
    if env_config:
        return Path(env_config)

    for candidate in DEFAULT_LOCATIONS:
        if candidate.exists():
            return candidate

    return None


def load_options(config_path: Optional[Union[str, Path]] = None) -> ComparisonOptions:
    """
    Load comparison options from a YAML profile.

    Args:
        config_path: Path to YAML profile (see find_profile for the lookup order)

    Returns:
        ComparisonOptions; defaults when no profile is found

    Raises:
        FileNotFoundError: If the selected profile does not exist
        ValueError: If the profile is invalid
    """
    # Load .env file if it exists
    load_dotenv()

    profile = find_profile(config_path)
    if profile is None:
        logger.debug("No comparison profile found, using defaults")
        return ComparisonOptions()

    if not profile.exists():
        raise FileNotFoundError(f"Comparison profile not found: {profile}")

    with open(profile, encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {profile}: {e}")

    if not isinstance(data, dict) or 'comparison' not in data:
        raise ValueError(f"Missing required section 'comparison' in {profile}")

    section = data['comparison'] or {}
    if not isinstance(section, dict):
        raise ValueError(f"Section 'comparison' in {profile} must be a mapping")

    options = ComparisonOptions.from_dict(section)
    logger.info(f"Loaded comparison profile: {profile}")
    return options
