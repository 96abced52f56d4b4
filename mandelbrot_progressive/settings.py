"""
Settings for the Mandelbrot viewer.

Defaults live in DEFAULT_SETTINGS; settings.json next to this file (or a
file passed to load_settings) overrides them section by section.
"""

import copy
import json
import logging
import os


logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'window': {
        'width': 800,
        'height': 600,
        'fps': 60,
        'resizable': True,
    },
    'render': {
        'pass_divisors': [8, 4, 2, 1],
    },
    'parameters': {
        'maxIterations': 100,
        'colorScheme': 0,
        'zoomLevel': 1,
        'centerOffset': 0,
    },
    'controls': {
        'zoom_step': 0.25,
        'pan_step': 0.05,
        'iteration_step': 50,
    },
}


def load_settings(path=None):
    """
    Load settings, merged over DEFAULT_SETTINGS.

    Args:
        path: JSON file to read (default: the packaged settings.json)

    Returns:
        dict with 'window', 'render', 'parameters' and 'controls' sections.
        Unreadable files produce a warning and the defaults.
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    path = path or SETTINGS_PATH
    try:
        with open(path, 'r') as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: top level must be an object", path)
        return settings

    for section, values in loaded.items():
        if section in settings and isinstance(values, dict):
            settings[section].update(values)
        else:
            logger.warning("Ignoring unknown settings section %r", section)
    return settings
