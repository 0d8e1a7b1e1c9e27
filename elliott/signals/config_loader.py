"""
YAML configuration loader for the analysis pipeline.

Loads analyzer configurations from YAML files, so thresholds and rule
switches can be tuned without code changes.
"""
import yaml
from pathlib import Path
from typing import Union

from .config import AnalysisConfig
from ..shared.defaults import *


def load_config_from_yaml(yaml_path: Union[str, Path]) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AnalysisConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or holds invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    name = config_dict.get('name', yaml_path.stem)
    description = config_dict.get('description', '')

    pivots = config_dict.get('pivots', {}) or {}
    labeling = config_dict.get('labeling', {}) or {}
    sampling = config_dict.get('sampling', {}) or {}
    cache = config_dict.get('cache', {}) or {}

    # sampling.enabled: false turns downsampling off entirely
    if sampling.get('enabled', True):
        sample_threshold = sampling.get('threshold', SAMPLE_THRESHOLD)
    else:
        sample_threshold = None

    return AnalysisConfig(
        name=name,
        description=description,

        threshold=pivots.get('threshold', PIVOT_THRESHOLD),
        fallback_threshold=pivots.get('fallback_threshold'),
        min_bars=pivots.get('min_bars', MIN_BARS),
        min_pivot_spacing=pivots.get('min_spacing', MIN_PIVOT_SPACING),
        confirmation_bars=pivots.get('confirmation_bars', CONFIRMATION_BARS),
        min_pivots_for_fallback=pivots.get('min_pivots_for_fallback', MIN_PIVOTS_FOR_FALLBACK),

        min_pivots=labeling.get('min_pivots', MIN_PIVOTS),
        enforce_wave3_not_shortest=labeling.get('enforce_wave3_not_shortest', ENFORCE_WAVE3_NOT_SHORTEST),
        enforce_wave4_overlap=labeling.get('enforce_wave4_overlap', ENFORCE_WAVE4_OVERLAP),
        max_resets_per_segment=labeling.get('max_resets_per_segment', MAX_RESETS_PER_SEGMENT),
        progress_chunk_size=labeling.get('progress_chunk_size', PROGRESS_CHUNK_SIZE),

        sample_threshold=sample_threshold,

        cache_max_entries=cache.get('max_entries', CACHE_MAX_ENTRIES),
        cache_ttl_seconds=cache.get('ttl_seconds', CACHE_TTL_SECONDS),
    )


def save_config_to_yaml(config: AnalysisConfig, yaml_path: Union[str, Path]) -> None:
    """
    Save analysis configuration to YAML file.

    Args:
        config: AnalysisConfig to save
        yaml_path: Path to output YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = {
        'name': config.name,
        'description': config.description,
        'pivots': {
            'threshold': config.threshold,
            'fallback_threshold': config.fallback_threshold,
            'min_bars': config.min_bars,
            'min_spacing': config.min_pivot_spacing,
            'confirmation_bars': config.confirmation_bars,
            'min_pivots_for_fallback': config.min_pivots_for_fallback,
        },
        'labeling': {
            'min_pivots': config.min_pivots,
            'enforce_wave3_not_shortest': config.enforce_wave3_not_shortest,
            'enforce_wave4_overlap': config.enforce_wave4_overlap,
            'max_resets_per_segment': config.max_resets_per_segment,
            'progress_chunk_size': config.progress_chunk_size,
        },
        'sampling': {
            'enabled': config.sample_threshold is not None,
            'threshold': config.sample_threshold if config.sample_threshold is not None else SAMPLE_THRESHOLD,
        },
        'cache': {
            'max_entries': config.cache_max_entries,
            'ttl_seconds': config.cache_ttl_seconds,
        },
    }

    with open(yaml_path, 'w') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)
