import numpy as np


# host -> kernel parameter block, read from a constant buffer
SortParams = np.dtype([
    ('stage', np.uint32),
    ('substage', np.uint32),
    ('length', np.uint32),
    ('group_size', np.uint32),
])


def make_params(length, group_size, stage=0, substage=0):
    params = np.zeros(1, dtype=SortParams)
    params['stage'] = stage
    params['substage'] = substage
    params['length'] = length
    params['group_size'] = group_size
    return params[0]
