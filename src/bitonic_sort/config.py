from collections import ChainMap

from .constants import GROUP_SIZE, MAX_BUFFER_BYTES, METAL_THREADGROUP_WIDTH
from .simulator import SimulatedDevice
from .utils import set_log_level


default_config = {
    'device': 'simulator',
    'group_size': GROUP_SIZE,
    'strict_barriers': False,
    'max_buffer_bytes': MAX_BUFFER_BYTES,
    'threadgroup_width': None,
    'trace': False,
    'array_size': 128,
    'value_low': 1,
    'value_high': 100,
    'seed': None,
    'log_level': 'WARNING',
}

debug_config = {
    'strict_barriers': True,
    'trace': True,
    'log_level': 'DEBUG',
}

metal_config = {
    'device': 'metal',
    'threadgroup_width': METAL_THREADGROUP_WIDTH,
}

small_groups_config = {
    'group_size': 4,
    'array_size': 32,
}

config_presets = {
    'default': {},
    'debug': debug_config,
    'metal': metal_config,
    'small-groups': small_groups_config,
}


def make_config(preset=None, **overrides):
    if preset is None:
        preset = 'default'
    if preset not in config_presets:
        raise ValueError(f"Preset '{preset}' not found.")
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return ChainMap(overrides, config_presets[preset], default_config)


def create_device(cfg):
    set_log_level(cfg['log_level'])
    if cfg['device'] == 'simulator':
        return SimulatedDevice(
            max_buffer_bytes=cfg['max_buffer_bytes'],
            strict_barriers=cfg['strict_barriers'],
            threadgroup_width=cfg['threadgroup_width'],
            trace=cfg['trace'],
        )
    elif cfg['device'] == 'metal':
        from .metal import MetalDevice
        return MetalDevice(
            max_buffer_bytes=cfg['max_buffer_bytes'],
            threadgroup_width=cfg['threadgroup_width'] or METAL_THREADGROUP_WIDTH,
        )
    else:
        raise ValueError(f"Device '{cfg['device']}' not found.")


def create_device_from_preset(preset_name, **overrides):
    return create_device(make_config(preset_name, **overrides))
